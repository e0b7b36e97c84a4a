"""Composition of classified keys into storage engine requests.

A list addresses one axis and a tuple addresses one axis per element:

    t[[3, 4, 5]]   # rows 3, 4 and 5 of axis 0         -> engine.get_item(Gather)
    t[(3, 4, 5)]   # element (3, 4, 5) across 3 axes   -> engine.get_item_vector([...])

The composer keeps that distinction by choosing the single-key or the
multi-key entry point of the engine from the top-level expression alone.
"""

import logging
from typing import NamedTuple, Optional

from tensor_key.classifier import IndexExpression, to_tensor_keys
from tensor_key.tensor_key import IndexKey

logger = logging.getLogger(__name__)



class ResolvedIndex(NamedTuple):
    """Keys resolved from one index expression."""
    keys: list[IndexKey]
    is_vector: bool  # True when the expression was a tuple


def resolve_index(expression: IndexExpression, log: Optional[logging.Logger] = None) -> ResolvedIndex:
    """Classify an index expression completely before anything is dispatched."""
    keys = to_tensor_keys(expression, log=log)
    return ResolvedIndex(keys, isinstance(expression, tuple))


def get_item(engine, expression: IndexExpression, log: Optional[logging.Logger] = None):
    """Read the selection described by ``expression`` from a storage engine.

    Args:
        engine: StorageEngine to read from
        expression: Caller index expression
        log: Logger for diagnostics, defaults to this module's logger

    Returns:
        Whatever the engine returns for the resolved key(s)
    """
    resolved = resolve_index(expression, log=log)
    log = log or logger
    if resolved.is_vector:
        log.debug(f"Dispatching get_item_vector with keys: {resolved.keys}")
        return engine.get_item_vector(resolved.keys)
    log.debug(f"Dispatching get_item with key: {resolved.keys[0]!r}")
    return engine.get_item(resolved.keys[0])


def set_item(engine, expression: IndexExpression, value, log: Optional[logging.Logger] = None) -> None:
    """Write ``value`` into the selection described by ``expression``.

    Every axis is resolved before the engine is called, so an invalid element
    anywhere in a tuple leaves the tensor untouched.

    Args:
        engine: StorageEngine to write to
        expression: Caller index expression
        value: Value to assign, shape compatibility is checked by the engine
        log: Logger for diagnostics, defaults to this module's logger
    """
    resolved = resolve_index(expression, log=log)
    log = log or logger
    if resolved.is_vector:
        log.debug(f"Dispatching set_item_vector with keys: {resolved.keys}")
        engine.set_item_vector(resolved.keys, value)
    else:
        log.debug(f"Dispatching set_item with key: {resolved.keys[0]!r}")
        engine.set_item(resolved.keys[0], value)
