"""Interactive ssh sessions, optionally inside a remote tmux session."""

import logging
import shlex
from typing import List, Optional

from .models import XsshSettings
from .runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)


def build_ssh_args(
    destination: str,
    tmux_session: Optional[str] = None,
    settings: Optional[XsshSettings] = None,
) -> List[str]:
    """
    Build the ssh command line for a destination.

    With a tmux session name, a TTY is forced and the remote side runs
    `tmux -u new-session -A -s <name>`, attaching to the session or creating it.
    """
    settings = settings or XsshSettings()
    args = [settings.ssh_binary, destination]

    if tmux_session:
        args += ["-t", "tmux", "-u", "new-session", "-A", "-s", shlex.quote(tmux_session)]

    return args


def launch(args: List[str], runner: Optional[CommandRunner] = None) -> int:
    """
    Run ssh attached to the current terminal and wait for it to exit.

    Raises:
        CommandExecutionError: If ssh cannot be started
    """
    runner = runner or default_runner
    logger.debug(f"Launching: {' '.join(args)}")
    result = runner.run(args, capture_output=False)
    return result.returncode
