import json
import logging
import polypheny
import polycascade.config as cfg
from typing import Any, Iterator
from polycascade.constants import ID_FIELD
from polycascade.errors import StoreError
from polycascade.store.base import Collection, Store, UpdateResult

logger = logging.getLogger(__name__)

MQL = 'mongo'


def _to_mql(value) -> str:
    return json.dumps(value, default=str)


def _decode_row(row) -> dict:
    value = row[0] if isinstance(row, (list, tuple)) and len(row) == 1 else row
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return dict(value)


class PolyphenyCollection(Collection):
    def __init__(self, store: 'PolyphenyStore', name: str, document_class: type = None):
        super().__init__(name, document_class)
        self._store = store

    def _statement(self, method: str, *arguments) -> str:
        return f"db.{self.name}.{method}({', '.join(_to_mql(a) for a in arguments)})"

    def find(self, query: dict, document_class: type = None) -> Iterator[Any]:
        rows = self._store._execute(self._statement('find', query or {}), fetch=True)
        return (self.decode(_decode_row(row), document_class) for row in rows)

    def update_all(self, query: dict, update: dict) -> UpdateResult:
        count = self._store._execute(self._statement('updateMany', query or {}, update))
        return UpdateResult(matched=count, modified=count)

    def save(self, data: dict):
        if data.get(ID_FIELD) is None:
            raise StoreError(f"Cannot save into '{self.name}' without '{ID_FIELD}'")
        self._store._execute(self._statement('deleteMany', {ID_FIELD: data[ID_FIELD]}))
        self._store._execute(self._statement('insertOne', data))

    def remove(self, query: dict) -> int:
        return self._store._execute(self._statement('deleteMany', query or {}))


class PolyphenyStore(Store):
    def __init__(
            self,
            address=None,
            namespace: str = None,
            user: str = None,
            password: str = None,
            transport: str = None,
        ):
        super().__init__()
        self._address = address or cfg.get(cfg.DEFAULT_ADDRESS)
        self._namespace = namespace or cfg.get(cfg.DEFAULT_NAMESPACE)
        self._user = user if user is not None else cfg.get(cfg.DEFAULT_USER)
        self._password = password if password is not None else cfg.get(cfg.DEFAULT_PASS)
        self._transport = transport or cfg.get(cfg.DEFAULT_TRANSPORT)

        self._conn = None
        self._cursor = None

    def connect(self):
        if self._conn is not None:
            return self
        try:
            self._conn = polypheny.connect(
                self._address,
                username=self._user,
                password=self._password,
                transport=self._transport
            )
            self._cursor = self._conn.cursor()
            self._cursor.execute(f'CREATE DOCUMENT NAMESPACE IF NOT EXISTS "{self._namespace}"')
            self._conn.commit()
        except polypheny.Error as e:
            message = f"Failed to connect to Polypheny at {self._address}"
            logger.error(message)
            raise StoreError(message) from e
        logger.debug(f"Connected to Polypheny namespace {self._namespace}.")
        return self

    def close(self):
        if self._cursor:
            self._cursor.close()
        if self._conn:
            self._conn.close()
        self._cursor = None
        self._conn = None

    def _create_collection(self, name: str, document_class: type) -> PolyphenyCollection:
        return PolyphenyCollection(self, name, document_class)

    def _execute(self, statement: str, fetch: bool = False):
        if self._cursor is None:
            raise StoreError("PolyphenyStore must be connected before use")
        logger.debug(f"Executing on {self._namespace}: {statement}")
        try:
            self._cursor.executeany(MQL, statement, namespace=self._namespace)
            if fetch:
                return self._cursor.fetchall()
            self._conn.commit()
        except polypheny.Error as e:
            raise StoreError(f"Statement failed: {statement}") from e
        return max(getattr(self._cursor, 'rowcount', 0) or 0, 0)
