"""
Core package providing the dispatch machine and its builder.

Architecture:
- errors: error taxonomy shared by engine and builder
- types: type aliases, reentrancy policy and schema contract
- draft: copy-on-read/write snapshots and the updater result protocol
- machine: the mutation/validation engine
- builder: construction-time validation and factories
"""

# Import order matters to avoid circular dependencies
from .errors import (
    ConfigurationError,
    DispatchError,
    InitialStateValidationError,
    InvalidTransitionError,
    ReentrantDispatchError,
    UnknownEventError,
    UnknownEventReferenceError,
)
from .types import ParseFailure, ParseIssue, ParseResult, ParseSuccess, ReentrancyPolicy, SchemaProtocol
from .machine import DispatchMachine
from .builder import DispatchConfig, MachineBuilder, build, create_dispatch, create_validated_dispatch

__all__ = [
    # Errors
    "DispatchError",
    "UnknownEventError",
    "InvalidTransitionError",
    "ReentrantDispatchError",
    "ConfigurationError",
    "UnknownEventReferenceError",
    "InitialStateValidationError",
    # Types
    "ReentrancyPolicy",
    "SchemaProtocol",
    "ParseIssue",
    "ParseSuccess",
    "ParseFailure",
    "ParseResult",
    # Engine and builder
    "DispatchMachine",
    "DispatchConfig",
    "MachineBuilder",
    "build",
    "create_dispatch",
    "create_validated_dispatch",
]
