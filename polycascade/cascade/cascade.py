import logging
import polycascade.config as cfg
from dataclasses import dataclass, field
from typing import Any
from polycascade.constants import ID_FIELD
from polycascade.errors import (
    CascadeDepthExceeded,
    CascadeErrors,
    IdentifierUnavailable,
    InvalidRelationType,
    ProjectionConflict,
    StoreError,
)
from polycascade.model import Cascadable, Identifiable
from polycascade.projection import project
from polycascade.cascade.config import CascadeConfig
from polycascade.cascade.relation import get_strategy
from polycascade.store.base import Store, UpdateResult

logger = logging.getLogger(__name__)


@dataclass
class CascadeReport:
    results: list[tuple[CascadeConfig, UpdateResult]] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)
    depth: int = 0

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self):
        if self.errors:
            raise CascadeErrors(self.errors)


class Cascader:
    def __init__(self, store: Store, max_depth: int = None, id_types: tuple = (str,)):
        self._store = store
        self._max_depth = max_depth if max_depth is not None else cfg.get(cfg.MAX_NEST_DEPTH)
        self._id_types = id_types

    def cascade_save(self, doc, prepared: dict[str, Any]) -> CascadeReport:
        report = CascadeReport()
        self._save(doc, prepared, 0, report)
        return report

    def _save(self, doc, prepared: dict[str, Any], depth: int, report: CascadeReport):
        if not isinstance(doc, Cascadable):
            return

        if self._max_depth is not None and depth > self._max_depth:
            logger.warning(f"Stopping nested cascade of {doc!r} at depth {depth}.")
            report.errors.append(CascadeDepthExceeded(doc, self._max_depth))
            return
        report.depth = max(report.depth, depth)

        for conf in doc.get_cascade(self._store):
            self._save_with_config(conf, prepared, report)

            if not conf.nest:
                continue
            try:
                related_docs = conf.collection.find(conf.query, conf.instance)
                for related in related_docs:
                    related_prepared = conf.collection.prepare_for_save(related)
                    self._save(related, related_prepared, depth + 1, report)
            except StoreError as e:
                logger.warning(f"Nested cascade through {conf!r} failed: {e}")
                report.errors.append(e)

    def _save_with_config(self, conf: CascadeConfig, prepared: dict[str, Any], report: CascadeReport):
        target_id = prepared.get(ID_FIELD)
        try:
            strategy = get_strategy(conf.rel_type)
            seed = {ID_FIELD: target_id} if conf.is_embedded else {}
            projected = project(prepared, conf.properties, into=seed)
            logger.debug(f"Cascading save of {target_id} through {conf!r}.")
            report.results.append((conf, strategy.save(conf, target_id, projected)))
        except (InvalidRelationType, ProjectionConflict, StoreError) as e:
            logger.warning(f"Cascading save of {target_id} through {conf!r} failed: {e}")
            report.errors.append(e)

    def cascade_delete(self, doc) -> CascadeReport:
        report = CascadeReport()
        if not isinstance(doc, Cascadable):
            return report

        target_id = self._get_id(doc)
        for conf in doc.get_cascade(self._store):
            strategy = get_strategy(conf.rel_type)
            logger.debug(f"Cascading delete of {target_id} through {conf!r}.")
            try:
                report.results.append((conf, strategy.delete(conf, target_id)))
            except StoreError as e:
                logger.warning(f"Cascading delete of {target_id} through {conf!r} failed: {e}")
                report.errors.append(e)
        return report

    def _get_id(self, doc):
        if not isinstance(doc, Identifiable):
            message = f"{doc.__class__.__name__} does not expose an identifier"
            logger.error(message)
            raise IdentifierUnavailable(doc, message)

        target_id = doc.get_id()
        if target_id is None:
            message = f"{doc.__class__.__name__} has no identifier set"
            logger.error(message)
            raise IdentifierUnavailable(doc, message)
        if not isinstance(target_id, self._id_types):
            message = f"identifier {target_id!r} is not of type {', '.join(t.__name__ for t in self._id_types)}"
            logger.error(message)
            raise IdentifierUnavailable(doc, message)
        return target_id


def cascade_save(store: Store, doc, prepared: dict[str, Any], max_depth: int = None) -> CascadeReport:
    return Cascader(store, max_depth=max_depth).cascade_save(doc, prepared)


def cascade_delete(store: Store, doc) -> CascadeReport:
    return Cascader(store).cascade_delete(doc)
