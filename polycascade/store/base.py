from abc import ABC, abstractmethod
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Iterator
from polycascade.constants import ID_FIELD


@dataclass
class UpdateResult:
    matched: int = 0
    modified: int = 0


class Collection(ABC):
    def __init__(self, name: str, document_class: type = None):
        self.name = name
        self.document_class = document_class

    @abstractmethod
    def find(self, query: dict, document_class: type = None) -> Iterator[Any]:
        pass

    @abstractmethod
    def update_all(self, query: dict, update: dict) -> UpdateResult:
        pass

    @abstractmethod
    def save(self, data: dict):
        pass

    @abstractmethod
    def remove(self, query: dict) -> int:
        pass

    def prepare_for_save(self, document) -> dict[str, Any]:
        if hasattr(document, '_to_save_dict'):
            return document._to_save_dict()
        if isinstance(document, Mapping):
            return deepcopy(dict(document))
        raise TypeError(f"Cannot prepare {document!r} for saving into '{self.name}'")

    def decode(self, data: dict, document_class: type = None):
        document_class = document_class or self.document_class
        if document_class is None:
            return data
        return document_class._from_document(data)

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}>"


class Store(ABC):
    def __init__(self):
        self._collections: dict[str, Collection] = {}

    def collection(self, name: str, document_class: type = None) -> Collection:
        collection = self._collections.get(name)
        if collection is None:
            collection = self._create_collection(name, document_class)
            self._collections[name] = collection
        elif document_class is not None and collection.document_class is None:
            collection.document_class = document_class
        return collection

    @abstractmethod
    def _create_collection(self, name: str, document_class: type) -> Collection:
        pass

    def connect(self):
        return self

    def close(self):
        pass

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def id_query(identifier) -> dict:
    return {ID_FIELD: identifier}
