"""Core building blocks: subprocess runner, session registry, registry client."""

from .registry_client import RegistryClient
from .runner import CommandRunner
from .sessions import SessionChannel, SessionRegistry
from .types import (
    CommandResult,
    EventType,
    OutputLine,
    PushResult,
    PushStatus,
    SessionEvent,
    Stage,
    StageOutcome,
    StreamName,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "EventType",
    "OutputLine",
    "PushResult",
    "PushStatus",
    "RegistryClient",
    "SessionChannel",
    "SessionEvent",
    "SessionRegistry",
    "Stage",
    "StageOutcome",
    "StreamName",
]
