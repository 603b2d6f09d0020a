"""
External command execution.

Every process xssh starts (ssh probes, interactive ssh, the Tailscale CLI) goes
through a CommandRunner so the sync and inference logic can be exercised with
a fake runner instead of real processes.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .exceptions import CommandExecutionError

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Outcome of a finished external command."""
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out


class CommandRunner(ABC):
    """Executes external commands."""

    @abstractmethod
    def run(
        self,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        kill_timeout: Optional[float] = None,
        capture_output: bool = True,
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            args: Program and arguments
            timeout: Seconds before the process is sent SIGTERM
            kill_timeout: Seconds after SIGTERM before the process is killed
            capture_output: Capture stdout/stderr instead of inheriting the terminal

        Returns:
            CommandResult for the finished process

        Raises:
            CommandExecutionError: If the process cannot be started
        """


class SubprocessRunner(CommandRunner):
    """CommandRunner backed by the subprocess module."""

    def run(
        self,
        args: Sequence[str],
        *,
        timeout: Optional[float] = None,
        kill_timeout: Optional[float] = None,
        capture_output: bool = True,
    ) -> CommandResult:
        command = [str(arg) for arg in args]
        logger.debug(f"Running: {' '.join(command)}")

        pipe = subprocess.PIPE if capture_output else None
        # captured commands must not read the terminal
        stdin = subprocess.DEVNULL if capture_output else None
        try:
            process = subprocess.Popen(
                command, stdin=stdin, stdout=pipe, stderr=pipe, text=True
            )
        except OSError as e:
            raise CommandExecutionError(command, e.strerror or str(e)) from e

        timed_out = False
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            logger.debug(f"'{command[0]}' exceeded {timeout}s, terminating")
            process.terminate()
            try:
                stdout, stderr = process.communicate(timeout=kill_timeout)
            except subprocess.TimeoutExpired:
                logger.debug(f"'{command[0]}' ignored SIGTERM, killing")
                process.kill()
                stdout, stderr = process.communicate()

        return CommandResult(
            args=command,
            returncode=process.returncode,
            stdout=stdout or "",
            stderr=stderr or "",
            timed_out=timed_out,
        )


default_runner = SubprocessRunner()
