"""
Execution of external RPM tools (rpmbuild, rpmspec, rpm2cpio, cpio).
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional, Union

from srpmtools.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolConfig:
    """Names or paths of the external binaries srpmtools drives."""

    rpmbuild: str = "rpmbuild"
    rpmspec: str = "rpmspec"
    rpm2cpio: str = "rpm2cpio"
    cpio: str = "cpio"

    def missing(self) -> list[str]:
        """Return the configured tools that cannot be found in PATH."""
        tools = [self.rpmbuild, self.rpmspec, self.rpm2cpio, self.cpio]
        return [tool for tool in tools if shutil.which(tool) is None]


class CommandRunner:
    """
    Runs an external command given as an argument list.

    Subclasses return a subprocess.CompletedProcess whose stdout/stderr are
    str when text is True and bytes otherwise.
    """

    def run(
        self,
        cmd: list[str],
        cwd: Optional[str] = None,
        input: Optional[Union[str, bytes]] = None,
        text: bool = True,
    ) -> subprocess.CompletedProcess:
        raise NotImplementedError


class SubprocessRunner(CommandRunner):
    """CommandRunner backed by subprocess.run. Commands block until they exit."""

    def run(
        self,
        cmd: list[str],
        cwd: Optional[str] = None,
        input: Optional[Union[str, bytes]] = None,
        text: bool = True,
    ) -> subprocess.CompletedProcess:
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            return subprocess.run(cmd, cwd=cwd, input=input, capture_output=True, text=text)
        except FileNotFoundError:
            raise ToolNotFoundError(f"{cmd[0]} is required in PATH")
