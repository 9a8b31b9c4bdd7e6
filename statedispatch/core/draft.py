# statedispatch/core/draft.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import copy
import inspect
from typing import Any, Callable, Mapping, MutableMapping

from statedispatch.core.errors import ConfigurationError
from statedispatch.core.types import Updater


def snapshot(value: Any) -> Any:
    """
    Return a deep copy of ``value`` that shares no mutable structure with it.

    Every state value crossing the machine boundary goes through here, in both
    directions.
    """
    return copy.deepcopy(value)


def accepts_payload(updater: Updater) -> bool:
    """
    Check whether ``updater`` can be called with a second positional argument.

    Callables whose signature cannot be inspected are assumed to accept it.

    :raises ConfigurationError: If ``updater`` has a keyword-only parameter
        without a default, since the machine only passes arguments positionally.
    """
    try:
        signature = inspect.signature(updater)
    except (TypeError, ValueError):
        return True

    positional = 0
    variadic = False
    for param in signature.parameters.values():
        if param.kind == inspect.Parameter.VAR_POSITIONAL:
            variadic = True
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            positional += 1
        if param.kind == inspect.Parameter.KEYWORD_ONLY and param.default is inspect.Parameter.empty:
            raise ConfigurationError(
                f"Updater {getattr(updater, '__name__', updater)!r} requires keyword-only argument '{param.name}'; "
                "updaters receive the state and payload positionally",
                details={"parameter": param.name},
            )
    return variadic or positional >= 2


def merge(draft: Any, partial: Mapping[str, Any]) -> None:
    """
    Shallow-merge ``partial`` onto ``draft`` in place.

    Mutable mappings are updated key by key; any other object gets attributes set.
    """
    if isinstance(draft, MutableMapping):
        draft.update(partial)
        return
    for key, value in partial.items():
        setattr(draft, key, value)


def apply_result(draft: Any, result: Any) -> None:
    """
    Fold an updater's return value into ``draft``.

    :param draft: The mutable working copy the updater received.
    :param result: A mapping to merge, ``None`` when the updater edited the
        draft itself, or a callable continuation that edits the draft.
    :raises TypeError: For any other kind of result.
    """
    if result is None:
        return
    if isinstance(result, Mapping):
        merge(draft, snapshot(result))
        return
    if callable(result):
        continuation: Callable[[Any], Any] = result
        apply_result(draft, continuation(draft))
        return
    raise TypeError(
        f"Updater must return a mapping, None or a callable, got {type(result).__name__}"
    )
