"""Single place for secure subprocess invocation.

Uses exec (no shell), list args, and a bounded timeout. All bandit
suppressions live here.
"""

from __future__ import annotations

import asyncio
import subprocess  # nosec B404 - used only for PIPE constants
from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict


class CommandOutput(BaseModel):
    """Captured result of one finished subprocess."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        """Return whether the process exited with status zero."""
        return self.returncode == 0


async def run_subprocess(
    argv: Sequence[str],
    *,
    timeout: float | None = None,
) -> CommandOutput:
    """Run a subprocess with exec semantics and capture its output.

    Returncode is not checked; caller inspects ``returncode``.

    Args:
        argv: Command and arguments as a list (no shell parsing).
        timeout: Optional timeout in seconds.

    Returns:
        Captured output.

    Raises:
        FileNotFoundError: If the executable does not exist.
        TimeoutError: If the process outlives ``timeout``.
    """
    process = await asyncio.create_subprocess_exec(  # nosec B603 - exec, list args
        *argv,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except TimeoutError:
        process.kill()
        await process.wait()
        raise
    return CommandOutput(
        argv=tuple(argv),
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )


async def spawn_detached(argv: Sequence[str]) -> None:
    """Start a subprocess without waiting for it to finish.

    Args:
        argv: Command and arguments as a list (no shell parsing).

    Raises:
        FileNotFoundError: If the executable does not exist.
    """
    await asyncio.create_subprocess_exec(  # nosec B603 - exec, list args
        *argv,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
