import logging
from copy import deepcopy
from typing import Any, Iterator
from polycascade.constants import ID_FIELD, SET, UNSET, PULL, PUSH, IN, NE, EXISTS
from polycascade.errors import StoreError
from polycascade.projection import SEPARATOR
from polycascade.store.base import Collection, Store, UpdateResult

logger = logging.getLogger(__name__)

_MISSING = object()


def _values_at(document: dict, path: str) -> list:
    current = [document]
    for segment in path.split(SEPARATOR):
        found = []
        for value in current:
            if isinstance(value, dict):
                if segment in value:
                    found.append(value[segment])
            elif isinstance(value, list):
                found.extend(item[segment] for item in value if isinstance(item, dict) and segment in item)
        current = found
    return current


def _equals(value, expected) -> bool:
    if value == expected:
        return True
    return isinstance(value, list) and expected in value


def _is_operator_dict(condition) -> bool:
    return isinstance(condition, dict) and bool(condition) and all(k.startswith('$') for k in condition)


def _matches_condition(values: list, condition) -> bool:
    if not _is_operator_dict(condition):
        if condition is None and not values:
            return True
        return any(_equals(value, condition) for value in values)

    for operator, argument in condition.items():
        if operator == IN:
            matched = any(_equals(value, option) for option in argument for value in values)
        elif operator == NE:
            matched = not any(_equals(value, argument) for value in values)
        elif operator == EXISTS:
            matched = bool(values) == bool(argument)
        else:
            raise StoreError(f"Unsupported filter operator '{operator}'")
        if not matched:
            return False
    return True


def matches(document: dict, query: dict) -> bool:
    return all(_matches_condition(_values_at(document, path), condition) for path, condition in (query or {}).items())


def _element_matches(element, condition) -> bool:
    if isinstance(element, dict) and isinstance(condition, dict) and not _is_operator_dict(condition):
        return matches(element, condition)
    return _matches_condition([element], condition)


def _parent_of(document: dict, path: str, create: bool):
    *parents, leaf = path.split(SEPARATOR)
    current = document
    for segment in parents:
        if segment not in current or current[segment] is None:
            if not create:
                return None, leaf
            current[segment] = {}
        if not isinstance(current[segment], dict):
            raise StoreError(f"Cannot traverse '{path}': '{segment}' is not a sub-document")
        current = current[segment]
    return current, leaf


def _apply_update(document: dict, update: dict):
    for operator, fields in update.items():
        for path, value in fields.items():
            if operator == SET:
                parent, leaf = _parent_of(document, path, create=True)
                parent[leaf] = deepcopy(value)
                continue

            parent, leaf = _parent_of(document, path, create=operator == PUSH)
            if operator == UNSET:
                if parent is not None:
                    parent.pop(leaf, None)
                continue

            current = _MISSING if parent is None else parent.get(leaf, _MISSING)
            if operator == PULL:
                if current is _MISSING or current is None:
                    continue
                if not isinstance(current, list):
                    raise StoreError(f"Cannot pull from non-array field '{path}'")
                parent[leaf] = [element for element in current if not _element_matches(element, value)]
            elif operator == PUSH:
                if current is _MISSING or current is None:
                    parent[leaf] = [deepcopy(value)]
                elif not isinstance(current, list):
                    raise StoreError(f"Cannot push onto non-array field '{path}'")
                else:
                    current.append(deepcopy(value))
            else:
                raise StoreError(f"Unsupported update operator '{operator}'")


class MemoryCollection(Collection):
    def __init__(self, store: 'MemoryStore', name: str, document_class: type = None):
        super().__init__(name, document_class)
        self._store = store
        self._documents: dict[Any, dict] = {}

    def _log(self, operation: str, query: dict, update: dict = None):
        self._store.operations.append((self.name, operation, deepcopy(query), deepcopy(update)))
        logger.debug(f"{operation} on {self.name}: {query} {update or ''}")

    def find(self, query: dict, document_class: type = None) -> Iterator[Any]:
        self._log('find', query)
        found = [deepcopy(d) for d in self._documents.values() if matches(d, query)]
        return (self.decode(d, document_class) for d in found)

    def find_raw(self, query: dict = None) -> list[dict]:
        return [deepcopy(d) for d in self._documents.values() if matches(d, query)]

    def update_all(self, query: dict, update: dict) -> UpdateResult:
        self._log('update_all', query, update)
        result = UpdateResult()
        for key, document in list(self._documents.items()):
            if not matches(document, query):
                continue
            result.matched += 1
            updated = deepcopy(document)
            _apply_update(updated, update)
            if updated != document:
                self._documents[key] = updated
                result.modified += 1
        return result

    def save(self, data: dict):
        if data.get(ID_FIELD) is None:
            raise StoreError(f"Cannot save into '{self.name}' without '{ID_FIELD}'")
        self._log('save', {ID_FIELD: data[ID_FIELD]})
        self._documents[data[ID_FIELD]] = deepcopy(data)

    def remove(self, query: dict) -> int:
        self._log('remove', query)
        doomed = [key for key, document in self._documents.items() if matches(document, query)]
        for key in doomed:
            del self._documents[key]
        return len(doomed)

    def __len__(self):
        return len(self._documents)


class MemoryStore(Store):
    def __init__(self):
        super().__init__()
        self.operations: list[tuple] = []

    def _create_collection(self, name: str, document_class: type) -> MemoryCollection:
        return MemoryCollection(self, name, document_class)
