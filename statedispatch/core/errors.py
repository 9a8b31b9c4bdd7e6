# statedispatch/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from typing import Any, Dict, List, Optional, Sequence


def _format_names(names: Sequence[str]) -> str:
    return ", ".join(names) if names else "none"


class DispatchError(Exception):
    """
    Base exception class for errors raised by the dispatch machine or its builder.

    :param message: Human-readable description of the failure.
    :param details: Optional dictionary of extra diagnostic data.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownEventError(DispatchError):
    """
    Raised when ``dispatch`` is called with a name absent from the declared events.
    """

    def __init__(
        self,
        event_name: str,
        available_events: Sequence[str] = (),
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(f'Event "{event_name}" does not exist', details)
        self.event_name = event_name
        self.available_events: List[str] = list(available_events)


class InvalidTransitionError(DispatchError):
    """
    Raised when a declared event is not a permitted successor of the current event.
    """

    def __init__(
        self,
        event_name: str,
        current_event: str,
        valid_next_events: Sequence[str],
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f'Cannot transition from "{current_event}" to "{event_name}". '
            f"Valid next events: {_format_names(valid_next_events)}",
            details,
        )
        self.event_name = event_name
        self.current_event = current_event
        self.valid_next_events: List[str] = list(valid_next_events)


class ReentrantDispatchError(DispatchError):
    """
    Raised under ``ReentrancyPolicy.REJECT`` when a listener or updater dispatches
    on the machine that is already dispatching.
    """

    def __init__(self, event_name: str, active_event: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            f'Cannot dispatch "{event_name}" while "{active_event}" is still being dispatched',
            details,
        )
        self.event_name = event_name
        self.active_event = active_event


class ConfigurationError(DispatchError):
    """
    Raised at construction time when a machine configuration is rejected.
    """


class UnknownEventReferenceError(ConfigurationError):
    """
    Raised when the transition table references an event name, as a key or as a
    successor, that is not among the declared events.

    ``referenced_by`` is the transition key the bad successor was listed under,
    or ``None`` when the key itself is unknown.
    """

    def __init__(
        self,
        event_name: str,
        available_events: Sequence[str],
        referenced_by: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        where = "valid_next_events" if referenced_by is None else f'valid_next_events["{referenced_by}"]'
        super().__init__(
            f'{where} references unknown event: "{event_name}". '
            f"Available events: {_format_names(available_events)}",
            details,
        )
        self.event_name = event_name
        self.referenced_by = referenced_by
        self.available_events: List[str] = list(available_events)


class InitialStateValidationError(ConfigurationError):
    """
    Raised when an optional schema rejects the initial state.
    """

    def __init__(self, schema_message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"Initial state validation failed: {schema_message}", details)
        self.schema_message = schema_message
