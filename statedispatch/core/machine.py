# statedispatch/core/machine.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from statedispatch.core.draft import accepts_payload, apply_result, snapshot
from statedispatch.core.errors import (
    InvalidTransitionError,
    ReentrantDispatchError,
    UnknownEventError,
)
from statedispatch.core.types import (
    EventMap,
    EventName,
    Listener,
    ReentrancyPolicy,
    StateData,
    TransitionTable,
    Unsubscribe,
    Updater,
)

logger = logging.getLogger(__name__)


class DispatchMachine:
    """
    A finite state machine whose transitions are named events.

    Each event is bound to an updater that produces the next state, and the
    transition table lists which events may follow each event. Before the first
    dispatch (and after a reset) any declared event may be dispatched.

    Dispatch contract for updaters. The updater is called with a mutable deep
    copy of the state (the draft) and, when it takes a second positional
    argument, the payload. Its return value decides how the next state is made:

    - a mapping is shallow-merged onto the draft;
    - ``None`` means the draft was edited in place;
    - a callable is invoked with the draft and its own result is folded the
      same way.

    The draft then becomes the new state. Values read from the machine are
    always deep copies, so callers cannot change the machine's state except by
    dispatching.

    The engine trusts its transition table; use ``build`` or
    ``create_dispatch`` to have it checked against the declared events.
    """

    def __init__(
        self,
        initial_state: StateData,
        events: EventMap,
        valid_next_events: Optional[TransitionTable] = None,
        reentrancy: ReentrancyPolicy = ReentrancyPolicy.QUEUE,
    ) -> None:
        """
        :param initial_state: State the machine starts in and returns to on reset.
        :param events: Mapping of event name to updater, in declared order.
        :param valid_next_events: Mapping of event name to the events allowed to
            follow it. Missing or empty entries mean every event may follow.
        :param reentrancy: What to do with dispatches made during a dispatch.
        """
        self._initial_state = snapshot(initial_state)
        self._state = snapshot(initial_state)

        # events
        self._events: Dict[EventName, Updater] = dict(events)
        self._takes_payload: Dict[EventName, bool] = {
            name: accepts_payload(updater) for name, updater in self._events.items()
        }
        self._valid_next_events: Dict[EventName, List[EventName]] = {
            name: list(next_events or []) for name, next_events in (valid_next_events or {}).items()
        }
        self._current_event: Optional[EventName] = None

        # listeners, kept in subscription order
        self._listeners: Dict[Listener, None] = {}

        # reentrancy
        self._reentrancy = reentrancy
        self._active_event: Optional[EventName] = None
        self._pending: Deque[Tuple[EventName, Any]] = deque()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(current_event={self._current_event!r}, "
            f"events={len(self._events)}, listeners={len(self._listeners)})"
        )

    @property
    def event_names(self) -> Tuple[EventName, ...]:
        """Declared event names in declaration order."""
        return tuple(self._events)

    @property
    def reentrancy(self) -> ReentrancyPolicy:
        """Policy applied to dispatches made while a dispatch is running."""
        return self._reentrancy

    def dispatch(self, event_name: EventName, payload: Any = None) -> None:
        """
        Apply an event to the state and notify listeners.

        :param event_name: Name of a declared event.
        :param payload: Optional value handed to the updater.
        :raises UnknownEventError: If ``event_name`` is not declared.
        :raises InvalidTransitionError: If the current event does not allow it. A
            queued nested dispatch is checked against the event that will precede
            it, so the error is raised at the nested call site.
        :raises ReentrantDispatchError: If nested dispatch is rejected by policy.
        """
        if self._active_event is not None:
            if self._reentrancy is ReentrancyPolicy.REJECT:
                logger.debug("Rejected nested dispatch of %r during %r", event_name, self._active_event)
                raise ReentrantDispatchError(event_name, self._active_event)
            if self._reentrancy is ReentrancyPolicy.QUEUE:
                self._require_known(event_name)
                predecessor = self._pending[-1][0] if self._pending else self._active_event
                self._check_transition(event_name, predecessor)
                self._pending.append((event_name, payload))
                logger.debug("Queued nested dispatch of %r during %r", event_name, self._active_event)
                return
            self._apply(event_name, payload)
            return

        try:
            self._apply(event_name, payload)
            while self._pending:
                queued_name, queued_payload = self._pending.popleft()
                self._apply(queued_name, queued_payload)
        finally:
            self._pending.clear()

    def subscribe(self, listener: Listener) -> Unsubscribe:
        """
        Register a listener called with the new state after every successful dispatch.

        :param listener: Callable taking the new state.
        :return: A callable removing this listener; calling it again does nothing.
        """
        self._listeners[listener] = None

        def unsubscribe() -> None:
            self._listeners.pop(listener, None)

        return unsubscribe

    def get_state(self) -> StateData:
        """Return a copy of the current state."""
        return snapshot(self._state)

    def get_current_event(self) -> Optional[EventName]:
        """Return the last successfully dispatched event, or None before the first dispatch and after reset."""
        return self._current_event

    def get_valid_next_events(self) -> List[EventName]:
        """
        Return the events allowed next.

        Before the first dispatch every declared event is returned. Afterwards
        the transition entry of the current event is returned; an empty list
        means every event is allowed, whether the entry was declared empty or
        not declared at all.
        """
        if self._current_event is None:
            return list(self._events)
        return list(self._valid_next_events.get(self._current_event, []))

    def reset_state(self) -> None:
        """Restore the initial state and clear the current event. Listeners are kept."""
        self._state = snapshot(self._initial_state)
        self._current_event = None
        logger.debug("Machine reset to initial state")

    def _require_known(self, event_name: EventName) -> None:
        if event_name not in self._events:
            logger.debug("Rejected unknown event %r", event_name)
            raise UnknownEventError(event_name, list(self._events))

    def _check_transition(self, event_name: EventName, previous_event: Optional[EventName]) -> None:
        if previous_event is None:
            return
        valid_next = self._valid_next_events.get(previous_event, [])
        # An empty list allows every event
        if valid_next and event_name not in valid_next:
            logger.debug("Rejected transition %r -> %r", previous_event, event_name)
            raise InvalidTransitionError(event_name, previous_event, valid_next)

    def _apply(self, event_name: EventName, payload: Any) -> None:
        """Validate, update, commit and notify for a single event."""
        self._require_known(event_name)
        self._check_transition(event_name, self._current_event)

        updater = self._events[event_name]
        draft = snapshot(self._state)
        previous_active = self._active_event
        self._active_event = event_name
        try:
            if self._takes_payload[event_name]:
                result = updater(draft, payload)
            else:
                result = updater(draft)
            apply_result(draft, result)

            # The updater may still hold the draft, so commit a copy
            self._state = snapshot(draft)
            self._current_event = event_name
            logger.debug("Dispatched %r", event_name)

            self._notify()
        finally:
            self._active_event = previous_active

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(snapshot(self._state))
