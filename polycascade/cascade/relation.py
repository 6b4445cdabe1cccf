import logging
from typing import Any
from polycascade.constants import ID_FIELD, SET, PULL, PUSH
from polycascade.errors import InvalidRelationType, StoreError
from polycascade.cascade.config import CascadeConfig, RelationType
from polycascade.store.base import UpdateResult

logger = logging.getLogger(__name__)


def _clear_update(conf: CascadeConfig) -> dict:
    if conf.is_embedded:
        return {SET: {conf.through_prop: None}}
    return {SET: {prop: None for prop in conf.properties}}


def _pull_update(conf: CascadeConfig, target_id) -> dict:
    return {PULL: {conf.through_prop: {ID_FIELD: target_id}}}


def _update_ignoring_errors(conf: CascadeConfig, query: dict, update: dict, step: str):
    try:
        conf.collection.update_all(query, update)
    except StoreError as e:
        logger.warning(f"Ignoring failed {step} on {conf.collection.name} for {query}: {e}")


class One:
    @staticmethod
    def save(conf: CascadeConfig, target_id, projected: dict[str, Any]) -> UpdateResult:
        if conf.has_old_query:
            _update_ignoring_errors(conf, conf.old_query, _clear_update(conf), 'clear of previous relation')

        if conf.is_embedded:
            update = {SET: {conf.through_prop: projected}}
        else:
            update = {SET: dict(projected)}
        return conf.collection.update_all(conf.query, update)

    @staticmethod
    def delete(conf: CascadeConfig, target_id) -> UpdateResult:
        return conf.collection.update_all(conf.query, _clear_update(conf))


class Many:
    @staticmethod
    def save(conf: CascadeConfig, target_id, projected: dict[str, Any]) -> UpdateResult:
        pull = _pull_update(conf, target_id)
        if conf.has_old_query:
            _update_ignoring_errors(conf, conf.old_query, pull, 'pull from previous relation')

        # drop the current copy so a re-save replaces instead of duplicating it
        _update_ignoring_errors(conf, conf.query, pull, 'pull from current relation')

        return conf.collection.update_all(conf.query, {PUSH: {conf.through_prop: projected}})

    @staticmethod
    def delete(conf: CascadeConfig, target_id) -> UpdateResult:
        return conf.collection.update_all(conf.query, _pull_update(conf, target_id))


_strategies = {
    RelationType.ONE: One,
    RelationType.MANY: Many,
}


def register_strategy(rel_type, strategy):
    _strategies[rel_type] = strategy


def get_strategy(rel_type):
    try:
        return _strategies[rel_type]
    except (KeyError, TypeError):
        raise InvalidRelationType(rel_type) from None
