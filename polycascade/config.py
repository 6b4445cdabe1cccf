import logging
import polycascade.constants as cst

logger = logging.getLogger(__name__)

MAX_NEST_DEPTH = 'max_nest_depth'
DEFAULT_NAMESPACE = 'default_namespace'
DEFAULT_ADDRESS = 'default_address'
DEFAULT_USER = 'default_user'
DEFAULT_PASS = 'default_pass'
DEFAULT_TRANSPORT = 'default_transport'

_defaults = {
    MAX_NEST_DEPTH: cst.MAX_NEST_DEPTH,
    DEFAULT_NAMESPACE: cst.DEFAULT_NAMESPACE,
    DEFAULT_ADDRESS: cst.DEFAULT_ADDRESS,
    DEFAULT_USER: cst.DEFAULT_USER,
    DEFAULT_PASS: cst.DEFAULT_PASS,
    DEFAULT_TRANSPORT: cst.DEFAULT_TRANSPORT,
}

_values = dict(_defaults)
_locked = False


def get(key):
    if key not in _values:
        raise KeyError(f"Unknown configuration key '{key}'")
    return _values[key]


def set(key, value):
    if _locked:
        message = f"Configuration is locked, '{key}' cannot be changed while stores are in use"
        logger.error(message)
        raise RuntimeError(message)
    if key not in _values:
        raise KeyError(f"Unknown configuration key '{key}'")
    _values[key] = value
    logger.debug(f"Configuration '{key}' set to {value!r}.")


def lock():
    global _locked
    _locked = True


def unlock():
    global _locked
    _locked = False


def is_locked():
    return _locked


def reset():
    if _locked:
        raise RuntimeError("Configuration is locked and cannot be reset")
    _values.clear()
    _values.update(_defaults)
