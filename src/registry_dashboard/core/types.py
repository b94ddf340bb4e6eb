"""Core data types shared by the runner, sessions and push orchestrator."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class StreamName(str, Enum):
    """Origin stream of a subprocess output line."""

    STDOUT = "stdout"
    STDERR = "stderr"


class Stage(str, Enum):
    """Stages of a push operation, in execution order."""

    PULL = "pull"
    TAG = "tag"
    PUSH = "push"


class PushStatus(str, Enum):
    """Status values reported to a session while a push runs."""

    STARTING = "starting"
    COMPLETED = "completed"
    ERROR = "error"


class EventType(str, Enum):
    """Kinds of events delivered over a session stream."""

    LOG = "log"
    STATUS = "status"
    CLOSE = "close"


@dataclass(frozen=True)
class OutputLine:
    """One line of subprocess output, without its line terminator."""

    stream: StreamName
    text: str


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a single subprocess invocation."""

    args: tuple[str, ...]
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


@dataclass(frozen=True)
class SessionEvent:
    """Event delivered to a session stream."""

    type: EventType
    message: str | None = None
    value: PushStatus | None = None
    timestamp: str = field(default_factory=_utcnow)

    @classmethod
    def log(cls, message: str) -> "SessionEvent":
        return cls(EventType.LOG, message=message)

    @classmethod
    def status(cls, value: PushStatus) -> "SessionEvent":
        return cls(EventType.STATUS, value=value)

    @classmethod
    def close(cls) -> "SessionEvent":
        return cls(EventType.CLOSE)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type.value}
        if self.type is EventType.LOG:
            data["message"] = self.message
            data["timestamp"] = self.timestamp
        elif self.type is EventType.STATUS:
            data["value"] = self.value.value if self.value else None
        return data

    def to_sse(self) -> bytes:
        """Encode as a Server-Sent Events data frame."""
        return f"data: {json.dumps(self.to_dict())}\n\n".encode("utf-8")


@dataclass
class StageOutcome:
    """Captured output of one push stage."""

    stage: Stage
    ok: bool
    stdout: str = ""
    stderr: str = ""


@dataclass
class PushResult:
    """Aggregate result of a push operation."""

    image: str
    destination: str
    stages: list[StageOutcome] = field(default_factory=list)
    logs: list[str] = field(default_factory=list)
    error: str | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def log(self) -> str:
        return "".join(outcome.stdout for outcome in self.stages)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"result": "ok", "log": self.log, "logs": list(self.logs)}
        return {"error": self.error, "detail": self.detail, "logs": list(self.logs)}
