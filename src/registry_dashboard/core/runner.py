"""Async subprocess runner with line-by-line output capture."""

import asyncio
import inspect
import logging
from typing import Awaitable, Callable, Union

from ..exceptions import CommandLaunchError
from .types import CommandResult, OutputLine, StreamName

logger = logging.getLogger(__name__)

LineCallback = Callable[[OutputLine], Union[None, Awaitable[None]]]

# Maximum length of a single output line
STREAM_LIMIT = 1024 * 1024


class CommandRunner:
    """Runs an external executable and reports its output as it arrives."""

    def __init__(self, executable: str = "docker", timeout: float | None = None) -> None:
        """Initialize the runner.

        Args:
            executable: Program to invoke (e.g., "docker")
            timeout: Seconds before a running command is killed; None for no limit
        """
        self.executable = executable
        self.timeout = timeout

    async def run(
        self, *args: str, line_callback: LineCallback | None = None
    ) -> CommandResult:
        """Run the executable with the given arguments.

        Both output streams are drained concurrently. Each complete line, and
        any trailing partial line, is passed to line_callback as soon as it is
        read.

        Args:
            *args: Arguments passed to the executable
            line_callback: Optional sync or async callback for each output line

        Returns:
            CommandResult; a non-zero exit code is reported, not raised

        Raises:
            CommandLaunchError: If the process cannot be started
        """
        argv = (self.executable, *args)
        logger.info("Running %s", " ".join(argv))
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                limit=STREAM_LIMIT,
            )
        except OSError as e:
            raise CommandLaunchError(f"Failed to start {self.executable}: {e}") from e

        captured: dict[StreamName, list[str]] = {
            StreamName.STDOUT: [],
            StreamName.STDERR: [],
        }

        async def drain(reader: asyncio.StreamReader, stream: StreamName) -> None:
            while True:
                chunk = await reader.readline()
                if not chunk:
                    break
                text = chunk.decode("utf-8", errors="replace")
                captured[stream].append(text)
                if line_callback:
                    line = OutputLine(stream, text.rstrip("\r\n"))
                    pending = line_callback(line)
                    if inspect.isawaitable(pending):
                        await pending

        async def communicate() -> None:
            await asyncio.gather(
                drain(process.stdout, StreamName.STDOUT),
                drain(process.stderr, StreamName.STDERR),
            )
            await process.wait()

        timed_out = False
        try:
            await asyncio.wait_for(communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            timed_out = True
            logger.warning("Command timed out after %ss: %s", self.timeout, " ".join(argv))
            if process.returncode is None:
                process.kill()
            await process.wait()

        return CommandResult(
            args=tuple(args),
            returncode=process.returncode,
            stdout="".join(captured[StreamName.STDOUT]),
            stderr="".join(captured[StreamName.STDERR]),
            timed_out=timed_out,
        )
