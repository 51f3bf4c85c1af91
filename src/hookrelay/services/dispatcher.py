"""Local command execution for relayed webhook messages."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from hookrelay.errors.exceptions import CommandExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a successful command run."""

    returncode: int
    stdout: str
    stderr: str


class CommandDispatcher:
    """Runs ``command + [message]`` as an argument vector, never through a shell.

    The message is one discrete argv entry, so quotes and shell metacharacters
    reach the command verbatim.
    """

    def __init__(self, command: Sequence[str], timeout: float | None = 30.0) -> None:
        if not command:
            raise ValueError("command must not be empty")
        self.command = list(command)
        self.timeout = timeout

    async def dispatch(self, message: str) -> CommandResult:
        argv = [*self.command, message]

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as exc:
            raise CommandExecutionError(f"Failed to start {self.command[0]}: {exc}") from exc

        try:
            stdout_b, stderr_b = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await process.wait()
            raise CommandExecutionError(
                f"{self.command[0]} timed out after {self.timeout}s"
            ) from exc

        stdout = stdout_b.decode("utf-8", errors="replace").strip()
        stderr = stderr_b.decode("utf-8", errors="replace").strip()

        if process.returncode != 0:
            detail = f": {stderr}" if stderr else ""
            raise CommandExecutionError(
                f"{self.command[0]} exited with status {process.returncode}{detail}"
            )

        if stderr:
            logger.warning("%s stderr: %s", self.command[0], stderr)
        logger.info("%s event sent: %s", self.command[0], stdout)
        return CommandResult(returncode=process.returncode, stdout=stdout, stderr=stderr)
