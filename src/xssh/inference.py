"""Login user inference through non-interactive ssh probes."""

import logging
from typing import List, Optional

from .models import XsshSettings
from .runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)


def build_probe_command(user: str, address: str, settings: XsshSettings) -> List[str]:
    """Build an ssh invocation that only checks whether `user` can log in."""
    return [
        settings.ssh_binary,
        "-o", "StrictHostKeyChecking=no",
        "-o", f"ConnectTimeout={settings.connect_timeout}",
        "-o", "BatchMode=yes",
        "-Cq",
        f"{user}@{address}",
        "exit",
    ]


def probe_login(
    user: str,
    address: str,
    settings: XsshSettings,
    runner: CommandRunner,
) -> bool:
    """Return True if `user@address` accepts a key-based login."""
    result = runner.run(
        build_probe_command(user, address, settings),
        timeout=settings.probe_term_timeout,
        kill_timeout=settings.probe_kill_timeout,
    )
    if result.timed_out:
        logger.debug(f"Probe {user}@{address} timed out")
    return result.ok


def infer_user(
    address: str,
    settings: Optional[XsshSettings] = None,
    runner: Optional[CommandRunner] = None,
) -> str:
    """
    Determine which login account to use for a host.

    Candidates are probed in order and the first one that authenticates wins.
    When none does, the last candidate is returned.

    Args:
        address: IP address or resolvable name of the host
        settings: Candidate users and timeouts (defaults used when omitted)
        runner: Command runner used for the probes

    Returns:
        str: The login account

    Raises:
        CommandExecutionError: If a probe cannot be started
    """
    settings = settings or XsshSettings()
    runner = runner or default_runner

    for user in settings.candidate_users:
        if probe_login(user, address, settings, runner):
            logger.debug(f"Inferred user '{user}' for {address}")
            return user

    fallback = settings.candidate_users[-1]
    logger.debug(f"No candidate user accepted for {address}, using '{fallback}'")
    return fallback
