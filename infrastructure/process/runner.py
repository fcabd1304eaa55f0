"""
Process Runner

Runs external executables with asyncio subprocesses. Standard output and
standard error are drained concurrently while the child runs, so a child
writing more than a pipe buffer's worth never blocks; the exit status is
read only after both streams reach EOF.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from ...domain.exceptions import LaunchFailedError, ToolFailedError, ToolNotFoundError

logger = logging.getLogger(__name__)

READ_SIZE = 64 * 1024


async def _drain(stream: asyncio.StreamReader) -> bytes:
    """Read a stream to EOF."""
    chunks: List[bytes] = []
    while True:
        chunk = await stream.read(READ_SIZE)
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


class ProcessRunner:
    """
    Spawns external tools and maps their exit status to exceptions.

    Features:
    - Concurrent stdout/stderr draining
    - Verbatim stderr in failure messages
    - Child process is killed when the awaiting task is cancelled
    """

    def __init__(self, kill_on_cancel: bool = True):
        """
        Initialize the runner.

        Args:
            kill_on_cancel: Kill the child if the awaiting task is cancelled
        """
        self.kill_on_cancel = kill_on_cancel

    async def capture(self, executable: Union[str, Path], args: Sequence[str]) -> str:
        """
        Run a tool and return its standard output.

        Raises:
            ToolNotFoundError: If the executable does not exist
            LaunchFailedError: If the process cannot be spawned
            ToolFailedError: If the process exits non-zero
        """
        stdout, _ = await self._execute(executable, args)
        return stdout.decode('utf-8', errors='replace')

    async def run(self, executable: Union[str, Path], args: Sequence[str]) -> None:
        """
        Run a tool for its side effects.

        Raises:
            ToolNotFoundError: If the executable does not exist
            LaunchFailedError: If the process cannot be spawned
            ToolFailedError: If the process exits non-zero
        """
        await self._execute(executable, args)

    async def _execute(
        self,
        executable: Union[str, Path],
        args: Sequence[str],
    ) -> Tuple[bytes, bytes]:
        exe = Path(executable)
        if not exe.exists():
            raise ToolNotFoundError(f"Executable not found: {exe}")

        cmd = [str(exe), *[str(a) for a in args]]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise LaunchFailedError(f"Failed to launch {exe.name}: {e}") from e

        try:
            stdout, stderr = await asyncio.gather(
                _drain(process.stdout),
                _drain(process.stderr),
            )
            returncode = await process.wait()
        except asyncio.CancelledError:
            if self.kill_on_cancel:
                await self._kill(process)
            raise

        if returncode != 0:
            message = stderr.decode('utf-8', errors='replace')
            if not message.strip():
                message = f"Exit code {returncode}"
            logger.error(f"{exe.name} exited with {returncode}: {message.strip()}")
            raise ToolFailedError(returncode, message)

        return stdout, stderr

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()
        logger.info(f"Killed process {process.pid} after cancellation")
