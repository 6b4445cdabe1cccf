import logging
from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Iterable
from polycascade.errors import ProjectionConflict

logger = logging.getLogger(__name__)

SEPARATOR = '.'


def get_path(source: Mapping, path: str, default: Any = None) -> Any:
    current = source
    for segment in path.split(SEPARATOR):
        if not isinstance(current, Mapping) or segment not in current:
            return default
        current = current[segment]
    return current


def project(source: Mapping, paths: Iterable[str], into: dict = None) -> dict[str, Any]:
    result = {} if into is None else into

    for path in paths:
        *parents, leaf = path.split(SEPARATOR)
        if not parents:
            result[path] = deepcopy(source.get(path))
            continue

        current = result
        for segment in parents:
            if segment not in current:
                current[segment] = {}
            elif not isinstance(current[segment], dict):
                logger.debug(f"Projection of '{path}' collides with value at '{segment}'.")
                raise ProjectionConflict(path, segment, current[segment])
            current = current[segment]

        current[leaf] = deepcopy(get_path(source, path))
    return result
