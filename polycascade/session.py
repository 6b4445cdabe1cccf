import logging
import uuid
from enum import Enum, auto
import polycascade.config as cfg
from polycascade.cascade.cascade import Cascader, CascadeReport
from polycascade.model import BaseDocument
from polycascade.store.base import Store, id_query

logger = logging.getLogger(__name__)


class _SessionState(Enum):
    INITIALIZED = auto()
    ACTIVE = auto()
    COMPLETED = auto()


class Session:
    def __init__(self, store: Store, max_depth: int = None, strict: bool = False):
        self._store = store
        self._cascader = Cascader(store, max_depth=max_depth)
        self._strict = strict
        self._session_id = uuid.uuid4()
        self._state = _SessionState.INITIALIZED
        self._locked_config = False

    def __enter__(self):
        if self._state == _SessionState.ACTIVE:
            return self

        self._store.connect()
        if not cfg.is_locked():
            cfg.lock()
            self._locked_config = True
        self._state = _SessionState.ACTIVE
        logger.debug(f"Session {self._session_id} started.")
        return self

    def _throw_if_not_active(self):
        if self._state == _SessionState.INITIALIZED:
            message = f'Session {self._session_id} must first be activated by using it in a "with" block'
            logger.error(message)
            raise RuntimeError(message)

        if self._state == _SessionState.COMPLETED:
            message = f'This operation cannot be performed by the completed Session {self._session_id}'
            logger.error(message)
            raise RuntimeError(message)

    def _collection_for(self, document: BaseDocument):
        return self._store.collection(document.collection_name, type(document))

    def _finish(self, report: CascadeReport) -> CascadeReport:
        if self._strict:
            report.raise_for_errors()
        return report

    def save(self, document: BaseDocument) -> CascadeReport:
        self._throw_if_not_active()

        collection = self._collection_for(document)
        prepared = collection.prepare_for_save(document)
        collection.save(prepared)
        logger.debug(f"Saved {document.get_id()} into {collection.name}.")

        report = self._cascader.cascade_save(document, prepared)
        document._update_snapshot()
        return self._finish(report)

    def save_all(self, documents) -> list[CascadeReport]:
        # session state is checked by save
        return [self.save(document) for document in documents]

    def get(self, document_class: type, _id):
        self._throw_if_not_active()
        found = self._store.collection(document_class.collection_name, document_class).find(id_query(_id))
        return next(iter(found), None)

    def delete(self, document: BaseDocument) -> CascadeReport:
        self._throw_if_not_active()

        collection = self._collection_for(document)
        removed = collection.remove(id_query(document.get_id()))
        logger.debug(f"Removed {removed} document(s) {document.get_id()} from {collection.name}.")

        return self._finish(self._cascader.cascade_delete(document))

    def delete_all(self, documents) -> list[CascadeReport]:
        # session state is checked by delete
        return [self.delete(document) for document in documents]

    def close(self):
        self._throw_if_not_active()
        self._state = _SessionState.COMPLETED
        logger.debug(f"Session {self._session_id} closed.")

    def get_session_state(self):
        return self._state

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._state == _SessionState.ACTIVE:
            self._state = _SessionState.COMPLETED
        if self._locked_config:
            cfg.unlock()
            self._locked_config = False
        self._store.close()
