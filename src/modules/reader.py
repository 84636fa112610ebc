"""Module source readers.

A module source is anything that produces the raw bytes of a module listing:
``read(size)`` returns the next chunk (``b""`` once the output is exhausted)
and ``close()`` releases the producer. ``ModuleReader`` is the default
implementation, backed by a running ``go list -m -json all`` process.
"""

from __future__ import annotations

import logging
import os
import subprocess
import threading
from typing import IO, TYPE_CHECKING, Protocol

from errors import VgopathError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import TracebackType

logger = logging.getLogger(__name__)

GO_LIST_COMMAND: tuple[str, ...] = ("go", "list", "-m", "-json", "all")

# Grace period given to the producer to exit once its output is drained.
CLOSE_TIMEOUT = 3.0

READ_CHUNK_SIZE = 64 * 1024


class ModuleSource(Protocol):
    def read(self, size: int = ..., /) -> bytes: ...

    def close(self) -> None: ...


class StartError(VgopathError):
    """Raised when the producer process cannot be launched."""

    def __init__(self, command: Sequence[str], cause: OSError) -> None:
        self.command = tuple(command)
        super().__init__(f"error starting {' '.join(self.command)}: {cause}")


class ProducerExitError(VgopathError):
    """Raised on close when the producer exited unsuccessfully."""

    def __init__(self, command: Sequence[str], returncode: int) -> None:
        self.command = tuple(command)
        self.returncode = returncode
        super().__init__(
            f"{' '.join(self.command)} exited with status {returncode}"
        )


class ShutdownTimeoutError(VgopathError):
    """Raised on close when the producer did not exit within the grace period."""

    def __init__(self, command: Sequence[str], timeout: float) -> None:
        self.command = tuple(command)
        self.timeout = timeout
        super().__init__(
            f"error waiting for {' '.join(self.command)} to complete: "
            f"still running after {timeout:g}s"
        )


class ModuleReader:
    """Stream the standard output of a module-listing process.

    ``close`` never blocks for longer than ``close_timeout`` seconds and is
    safe to call concurrently: the first caller waits for the process, later
    callers get the cached outcome.
    """

    def __init__(
        self,
        process: subprocess.Popen[bytes],
        command: Sequence[str],
        *,
        close_timeout: float = CLOSE_TIMEOUT,
    ) -> None:
        if process.stdout is None:
            msg = "process must be started with stdout=subprocess.PIPE"
            raise ValueError(msg)
        self._process = process
        self._stdout: IO[bytes] = process.stdout
        self.command = tuple(command)
        self.close_timeout = close_timeout

        self._lock = threading.Lock()
        self._exited = False
        self._wait_error: VgopathError | None = None

    def read(self, size: int = READ_CHUNK_SIZE, /) -> bytes:
        """Return the next chunk of output, or ``b""`` at end of stream.

        End of stream is reported once the producer closes its output,
        regardless of its exit status.
        """
        if size < 0:
            return self._stdout.read()
        return self._stdout.read1(size)  # type: ignore[attr-defined]

    def close(self) -> None:
        with self._lock:
            if not self._exited:
                self._wait_error = self._wait()
                self._exited = True
                self._stdout.close()
            if self._wait_error is not None:
                raise self._wait_error

    def _wait(self) -> VgopathError | None:
        try:
            returncode = self._process.wait(timeout=self.close_timeout)
        except subprocess.TimeoutExpired:
            logger.debug("killing %s after %gs", self.command[0], self.close_timeout)
            self._process.kill()
            self._process.wait()
            return ShutdownTimeoutError(self.command, self.close_timeout)

        logger.debug("%s exited with status %d", self.command[0], returncode)
        if returncode != 0:
            return ProducerExitError(self.command, returncode)
        return None

    def __enter__(self) -> ModuleReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


def open_go_list(
    *,
    dir: str | os.PathLike[str] | None = None,
    command: Sequence[str] | None = None,
    close_timeout: float = CLOSE_TIMEOUT,
    stderr: int | IO[bytes] | None = None,
) -> ModuleReader:
    """Start the module-listing command and return a reader for its output.

    Args:
        dir: Working directory for the command (default: current directory)
        command: Command to run instead of ``go list -m -json all``
        close_timeout: Seconds ``close`` waits for the command to exit
        stderr: Where the command's standard error goes (default: inherited)

    Raises:
        StartError: If the command cannot be launched.
    """
    argv = tuple(command) if command is not None else GO_LIST_COMMAND
    if not argv:
        msg = "command must not be empty"
        raise ValueError(msg)

    try:
        process = subprocess.Popen(
            argv,
            cwd=dir,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=stderr,
        )
    except OSError as exc:
        raise StartError(argv, exc) from exc

    logger.debug("started %s (pid %d) in %s", " ".join(argv), process.pid, dir or ".")
    return ModuleReader(process, argv, close_timeout=close_timeout)


__all__ = [
    "CLOSE_TIMEOUT",
    "GO_LIST_COMMAND",
    "ModuleReader",
    "ModuleSource",
    "ProducerExitError",
    "ShutdownTimeoutError",
    "StartError",
    "open_go_list",
]
