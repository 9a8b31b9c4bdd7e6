"""
Type definitions and enums for the dispatch machine.

This module contains shared type definitions used by the engine, the builder
and the schema extensions. It has no runtime dependencies on other modules of
the package so it can be imported from anywhere without cycles.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

EventName = str
StateData = Any

# An updater returns a partial state to merge, None after editing the draft in
# place, or a continuation that edits the draft.
UpdaterResult = Union[Mapping[str, Any], None, Callable[[Any], None]]
Updater = Callable[..., UpdaterResult]
Listener = Callable[[StateData], None]
Unsubscribe = Callable[[], None]

EventMap = Mapping[EventName, Updater]
TransitionTable = Mapping[EventName, Optional[Sequence[EventName]]]


class ReentrancyPolicy(Enum):
    """Defines how a machine treats ``dispatch`` calls made while it is dispatching.

    Nested calls come from listeners or updaters calling back into the machine.
    """

    # Run after the current dispatch finishes its fan-out. The transition is checked
    # when queued; an updater or listener error raised while draining still escapes
    # the outer dispatch after the outer event has committed.
    QUEUE = auto()
    REJECT = auto()  # Raise ReentrantDispatchError
    # Recurse immediately. A nested dispatch from inside an updater is overwritten
    # when the outer draft commits, and current_event ends as the outer event.
    ALLOW = auto()


@dataclass(frozen=True)
class ParseIssue:
    """Diagnostic carried by a failed parse."""

    message: str


@dataclass(frozen=True)
class ParseSuccess:
    data: Any
    success: bool = True


@dataclass(frozen=True)
class ParseFailure:
    error: ParseIssue
    success: bool = False


ParseResult = Union[ParseSuccess, ParseFailure]


@runtime_checkable
class SchemaProtocol(Protocol):
    """
    Schema protocol for initial-state validation.

    Methods:
        safe_parse(value): Attempts to validate ``value`` without raising.

    The returned object exposes ``success``; on success it carries ``data``,
    on failure an ``error`` with a ``message``. Plain mappings of the same
    shape are accepted too.
    """

    def safe_parse(self, value: Any) -> Any:
        ...
