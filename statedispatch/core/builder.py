# statedispatch/core/builder.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from statedispatch.core.errors import InitialStateValidationError, UnknownEventReferenceError
from statedispatch.core.machine import DispatchMachine
from statedispatch.core.types import (
    EventMap,
    EventName,
    ReentrancyPolicy,
    SchemaProtocol,
    StateData,
    TransitionTable,
    Updater,
)

logger = logging.getLogger(__name__)


@dataclass
class DispatchConfig:
    """
    Everything needed to construct a machine.

    :param initial_state: State the machine starts in.
    :param events: Mapping of event name to updater.
    :param valid_next_events: Partial mapping of event name to allowed successors.
    :param schema: Optional object with ``safe_parse`` used to check ``initial_state``.
    :param reentrancy: Policy for dispatches made during a dispatch.
    """

    initial_state: StateData
    events: EventMap
    valid_next_events: TransitionTable = field(default_factory=dict)
    schema: Optional[SchemaProtocol] = None
    reentrancy: ReentrancyPolicy = ReentrancyPolicy.QUEUE


def _read(result: Any, name: str, default: Any = None) -> Any:
    if isinstance(result, Mapping):
        return result.get(name, default)
    return getattr(result, name, default)


def _validate_initial_state(schema: SchemaProtocol, initial_state: StateData) -> None:
    result = schema.safe_parse(initial_state)
    if _read(result, "success", False):
        return
    error = _read(result, "error")
    message = _read(error, "message") if error is not None else None
    raise InitialStateValidationError(str(message if message is not None else error))


def _normalize_transitions(
    valid_next_events: TransitionTable, event_names: List[EventName]
) -> Dict[EventName, List[EventName]]:
    """
    Check every key and successor against the declared events and return a
    table where each key maps to a concrete list.

    :raises UnknownEventReferenceError: On the first unknown name found.
    """
    known = set(event_names)
    normalized: Dict[EventName, List[EventName]] = {}
    for event, next_events in valid_next_events.items():
        if event not in known:
            raise UnknownEventReferenceError(event, event_names)
        if next_events is None:
            normalized[event] = []
            continue
        if isinstance(next_events, (str, bytes)) or not isinstance(next_events, Sequence):
            raise UnknownEventReferenceError(
                str(next_events),
                event_names,
                referenced_by=event,
                details={"reason": "successors must be a sequence of event names"},
            )
        for next_event in next_events:
            if next_event not in known:
                raise UnknownEventReferenceError(next_event, event_names, referenced_by=event)
        normalized[event] = list(next_events)
    return normalized


def build(config: DispatchConfig) -> DispatchMachine:
    """
    Validate a configuration and construct the machine it describes.

    The schema, when present, is checked first; the transition table is checked
    second. Either a fully valid machine is returned or an error is raised.

    :raises InitialStateValidationError: If the schema rejects the initial state.
    :raises UnknownEventReferenceError: If the transition table names an
        undeclared event.
    """
    if config.schema is not None:
        _validate_initial_state(config.schema, config.initial_state)

    event_names = list(config.events)
    transitions = _normalize_transitions(config.valid_next_events or {}, event_names)

    machine = DispatchMachine(
        initial_state=config.initial_state,
        events=config.events,
        valid_next_events=transitions,
        reentrancy=config.reentrancy,
    )
    logger.debug("Built machine with %d events and %d transition entries", len(event_names), len(transitions))
    return machine


def create_dispatch(
    initial_state: StateData,
    events: EventMap,
    valid_next_events: Optional[TransitionTable] = None,
    schema: Optional[SchemaProtocol] = None,
    reentrancy: ReentrancyPolicy = ReentrancyPolicy.QUEUE,
) -> DispatchMachine:
    """
    Create a machine with validated event transitions.

    Example:
        counter = create_dispatch(
            initial_state={"count": 0},
            events={
                "increment": lambda state: {"count": state["count"] + 1},
                "decrement": lambda state: {"count": state["count"] - 1},
                "reset": lambda state: {"count": 0},
            },
            valid_next_events={
                "increment": ["decrement", "reset"],
                "decrement": ["increment"],
                "reset": ["increment"],
            },
        )
    """
    return build(
        DispatchConfig(
            initial_state=initial_state,
            events=events,
            valid_next_events=valid_next_events or {},
            schema=schema,
            reentrancy=reentrancy,
        )
    )


def create_validated_dispatch(
    schema: SchemaProtocol,
    initial_state: StateData,
    events: EventMap,
    valid_next_events: Optional[TransitionTable] = None,
    reentrancy: ReentrancyPolicy = ReentrancyPolicy.QUEUE,
) -> DispatchMachine:
    """
    Create a machine whose initial state must pass ``schema``.

    :raises ValueError: If ``schema`` is None.
    """
    if schema is None:
        raise ValueError("A schema is required for validated dispatch")
    return create_dispatch(initial_state, events, valid_next_events, schema=schema, reentrancy=reentrancy)


class MachineBuilder:
    """Builds dispatch machine configurations step by step.

    All validation happens in ``build``, through the same path as
    ``create_dispatch``, so a builder never yields a machine that
    ``create_dispatch`` would reject.
    """

    def __init__(self) -> None:
        self._initial_state: StateData = None
        self._has_initial_state = False
        self._events: Dict[EventName, Updater] = {}
        self._valid_next_events: Dict[EventName, List[EventName]] = {}
        self._schema: Optional[SchemaProtocol] = None
        self._reentrancy = ReentrancyPolicy.QUEUE

    @property
    def events(self) -> Dict[EventName, Updater]:
        """Copy of the events added so far."""
        return dict(self._events)

    @property
    def valid_next_events(self) -> Dict[EventName, List[EventName]]:
        """Copy of the transition entries added so far."""
        return {k: list(v) for k, v in self._valid_next_events.items()}

    def with_initial_state(self, initial_state: StateData) -> "MachineBuilder":
        self._initial_state = initial_state
        self._has_initial_state = True
        return self

    def add_event(self, name: EventName, updater: Updater) -> "MachineBuilder":
        """Declare an event.

        Raises:
            ValueError: If the name is already declared or updater is not callable
        """
        if name in self._events:
            raise ValueError(f"Event '{name}' already exists")
        if not callable(updater):
            raise ValueError(f"Updater for event '{name}' must be callable")
        self._events[name] = updater
        return self

    def allow(self, event: EventName, *next_events: EventName) -> "MachineBuilder":
        """Allow ``next_events`` after ``event``. With no names, anything may follow."""
        entry = self._valid_next_events.setdefault(event, [])
        for next_event in next_events:
            if next_event not in entry:
                entry.append(next_event)
        return self

    def with_schema(self, schema: SchemaProtocol) -> "MachineBuilder":
        self._schema = schema
        return self

    def with_reentrancy(self, reentrancy: ReentrancyPolicy) -> "MachineBuilder":
        self._reentrancy = reentrancy
        return self

    def build(self) -> DispatchMachine:
        """Build and validate a machine instance.

        Raises:
            ValueError: If no initial state or no events were given
            ConfigurationError: If the configuration is invalid
        """
        if not self._has_initial_state:
            raise ValueError("Initial state not set")
        if not self._events:
            raise ValueError("No events added to machine")
        return build(
            DispatchConfig(
                initial_state=self._initial_state,
                events=dict(self._events),
                valid_next_events=self.valid_next_events,
                schema=self._schema,
                reentrancy=self._reentrancy,
            )
        )
