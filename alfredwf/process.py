"""Child process execution on the asyncio event loop."""

import asyncio
import logging
import signal
from pathlib import Path
from typing import Optional, Union

from .exceptions import ProcessError

logger = logging.getLogger(__name__)


class ProcessBuilder:
    """Builds and runs a child process, capturing stdout as bytes.

    stdin is closed and stderr is inherited, so diagnostics from the child go
    straight to the user.

    Examples:
        >>> out = await ProcessBuilder("git", "status").with_cwd("raw").run()
    """

    def __init__(self, exe: str, *argv: str):
        self.exe = exe
        self.argv = list(argv)
        self.cwd: Optional[Path] = None

    def with_cwd(self, cwd: Union[str, Path]) -> "ProcessBuilder":
        """Set the working directory of the child.

        Returns:
            This builder, for chaining
        """
        self.cwd = Path(cwd)
        return self

    async def run(self) -> bytes:
        """Run the child to completion.

        Returns:
            Everything the child wrote to stdout

        Raises:
            ProcessError: If the child cannot be started, exits non-zero, or
                is killed by a signal
        """
        logger.debug(f"Running {self.exe} {' '.join(self.argv)} (cwd={self.cwd})")
        try:
            proc = await asyncio.create_subprocess_exec(
                self.exe,
                *self.argv,
                cwd=self.cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=None,
            )
        except OSError as e:
            raise ProcessError(f"Child '{self.exe}' failed to start: {e}") from e

        stdout, _ = await proc.communicate()
        returncode = proc.returncode
        if returncode == 0:
            return stdout
        if returncode is not None and returncode < 0:
            try:
                name = signal.Signals(-returncode).name
            except ValueError:
                name = str(-returncode)
            raise ProcessError(
                f"Child '{self.exe}' exited on signal {name}", returncode=returncode
            )
        raise ProcessError(
            f"Child '{self.exe}' failed: exit code {returncode}", returncode=returncode
        )
