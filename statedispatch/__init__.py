"""statedispatch: embeddable finite state machine with named, validated events

This package provides a small state container whose transitions are named
events checked against a transition table.

Responsibilities:
    - Event dispatch and transition validation
    - Return-style and draft-style state updates
    - Listener notification after each dispatch
    - Construction-time validation of the transition table
    - Optional schema validation of the initial state

Cross-cutting Concerns:
    Thread Safety:
        - Machines are single-threaded; callers synchronize externally

    Error Handling:
        - Structured error hierarchy rooted at DispatchError
        - Failed dispatches leave the machine unchanged

    Logging:
        - Standard library logging under the "statedispatch" logger
        - DEBUG level only; a NullHandler is installed by default

    Security:
        - State is deep-copied at every boundary
"""

import logging

from statedispatch.core import (
    ConfigurationError,
    DispatchConfig,
    DispatchError,
    DispatchMachine,
    InitialStateValidationError,
    InvalidTransitionError,
    MachineBuilder,
    ParseFailure,
    ParseIssue,
    ParseSuccess,
    ReentrancyPolicy,
    ReentrantDispatchError,
    SchemaProtocol,
    UnknownEventError,
    UnknownEventReferenceError,
    build,
    create_dispatch,
    create_validated_dispatch,
)

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConfigurationError",
    "DispatchConfig",
    "DispatchError",
    "DispatchMachine",
    "InitialStateValidationError",
    "InvalidTransitionError",
    "MachineBuilder",
    "ParseFailure",
    "ParseIssue",
    "ParseSuccess",
    "ReentrancyPolicy",
    "ReentrantDispatchError",
    "SchemaProtocol",
    "UnknownEventError",
    "UnknownEventReferenceError",
    "build",
    "create_dispatch",
    "create_validated_dispatch",
]
