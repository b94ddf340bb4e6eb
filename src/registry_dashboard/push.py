"""Push an upstream image into the local registry via the docker CLI."""

import logging
import shlex

from .core.runner import CommandRunner
from .core.sessions import SessionRegistry
from .core.types import (
    OutputLine,
    PushResult,
    PushStatus,
    SessionEvent,
    Stage,
    StageOutcome,
)
from .exceptions import CommandLaunchError

logger = logging.getLogger(__name__)


def destination_reference(image: str, registry_host: str) -> str:
    """Reference under which the image is tagged and pushed to the registry."""
    return f"{registry_host.rstrip('/')}/{image}"


def build_push_commands(image: str, registry_host: str) -> list[tuple[Stage, list[str]]]:
    """Build the docker argument lists for each push stage.

    Args:
        image: Source image reference (e.g., "nginx:latest")
        registry_host: Registry host and port (e.g., "localhost:5000")

    Returns:
        List of (stage, arguments) in execution order
    """
    destination = destination_reference(image, registry_host)
    return [
        (Stage.PULL, ["pull", image]),
        (Stage.TAG, ["tag", image, destination]),
        (Stage.PUSH, ["push", destination]),
    ]


def format_push_commands(
    image: str, registry_host: str, executable: str = "docker"
) -> list[str]:
    """Render the push stages as shell command lines."""
    return [
        shlex.join([executable, *args])
        for _, args in build_push_commands(image, registry_host)
    ]


class PushOrchestrator:
    """Runs pull, tag and push in sequence, reporting progress to a session."""

    def __init__(
        self, runner: CommandRunner, sessions: SessionRegistry, registry_host: str
    ) -> None:
        self.runner = runner
        self.sessions = sessions
        self.registry_host = registry_host

    async def push(self, image: str, session_id: str | None = None) -> PushResult:
        """Copy an image into the registry.

        Stops at the first stage that fails; later stages are never started.

        Args:
            image: Source image reference
            session_id: Optional session that receives log and status events

        Returns:
            PushResult describing success or the failing stage
        """
        result = PushResult(
            image=image, destination=destination_reference(image, self.registry_host)
        )
        self.sessions.emit(session_id, SessionEvent.status(PushStatus.STARTING))

        for stage, args in build_push_commands(image, self.registry_host):

            def record(line: OutputLine, stage: Stage = stage) -> None:
                message = f"[{stage.value}] {line.text}"
                result.logs.append(message)
                self.sessions.emit(session_id, SessionEvent.log(message))

            try:
                outcome = await self.runner.run(*args, line_callback=record)
            except CommandLaunchError as e:
                logger.error("Push of %s aborted at %s: %s", image, stage.value, e)
                result.stages.append(StageOutcome(stage, ok=False, stderr=str(e)))
                return self._fail(result, stage, str(e), session_id)

            result.stages.append(
                StageOutcome(stage, outcome.ok, outcome.stdout, outcome.stderr)
            )
            if not outcome.ok:
                if outcome.timed_out:
                    detail = outcome.stderr or f"{stage.value} timed out"
                else:
                    detail = outcome.stderr
                logger.warning(
                    "Push of %s failed at %s (exit %s)",
                    image,
                    stage.value,
                    outcome.returncode,
                )
                return self._fail(result, stage, detail, session_id)

        self.sessions.emit(session_id, SessionEvent.status(PushStatus.COMPLETED))
        self.sessions.emit(session_id, SessionEvent.close())
        logger.info("Pushed %s as %s", image, result.destination)
        return result

    def _fail(
        self, result: PushResult, stage: Stage, detail: str, session_id: str | None
    ) -> PushResult:
        result.error = f"docker {stage.value} failed"
        result.detail = detail
        self.sessions.emit(session_id, SessionEvent.status(PushStatus.ERROR))
        return result
