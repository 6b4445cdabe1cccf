import uuid as uuidlib
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import Any, Type, TypeVar, TYPE_CHECKING
from polycascade.constants import ID_FIELD

if TYPE_CHECKING:
    from polycascade.cascade.config import CascadeConfig
    from polycascade.store.base import Store

T = TypeVar("T")


class Identifiable(ABC):
    @abstractmethod
    def get_id(self):
        pass


class Cascadable(ABC):
    @abstractmethod
    def get_cascade(self, store: 'Store') -> list['CascadeConfig']:
        pass


class BaseDocument(Identifiable):
    collection_name: str
    fields: list[str] = []

    def __init__(self, _id: str = None):
        if _id is None:
            _id = str(uuidlib.uuid4())
        self._id = _id
        self._original_state = {}

    def get_id(self):
        return self._id

    def _update_snapshot(self):
        self._original_state = deepcopy(self._to_save_dict())

    def _original(self, name: str, default: Any = None) -> Any:
        return self._original_state.get(name, default)

    def _changed(self, name: str) -> bool:
        return name in self._original_state and self._original_state[name] != getattr(self, name, None)

    @classmethod
    def _from_document(cls: Type[T], data: dict[str, Any]) -> T:
        obj_data = {name: deepcopy(data.get(name)) for name in cls.fields}
        obj = cls(**obj_data, _id=data.get(ID_FIELD))
        obj._update_snapshot()
        return obj

    def _to_save_dict(self) -> dict[str, Any]:
        data = {ID_FIELD: self._id}
        data.update({
            name: deepcopy(getattr(self, name))
            for name in self.fields
            if hasattr(self, name)
        })
        return data

    def __eq__(self, other):
        return type(self) is type(other) and self._id == other._id

    def __hash__(self):
        return hash((type(self), self._id))

    def __repr__(self):
        field_values = {name: getattr(self, name, None) for name in self.fields}
        return f"<{self.__class__.__name__} {self._id} {field_values}>"
