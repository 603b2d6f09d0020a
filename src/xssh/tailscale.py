"""
Tailscale peer directory.

Reads `tailscale status --json` and returns the peers tagged as servers.
"""

import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from .exceptions import TailscaleError
from .models import TailscalePeer, XsshSettings
from .runner import CommandRunner, default_runner

logger = logging.getLogger(__name__)


def get_status(settings: XsshSettings, runner: CommandRunner) -> dict:
    """Run the Tailscale CLI and return the decoded status document."""
    result = runner.run(
        [settings.tailscale_binary, "status", "--json"],
        timeout=settings.tailscale_timeout,
        kill_timeout=settings.probe_kill_timeout,
    )
    if not result.ok:
        detail = result.stderr.strip() or f"exit code {result.returncode}"
        if result.timed_out:
            detail = f"timed out after {settings.tailscale_timeout}s"
        raise TailscaleError(f"'tailscale status' failed: {detail}")

    try:
        status = json.loads(result.stdout)
    except json.JSONDecodeError as e:
        raise TailscaleError(f"Improperly formatted JSON from tailscale: {e}") from e

    if not isinstance(status, dict):
        raise TailscaleError("Tailscale status is not a JSON object")
    return status


def parse_server_peers(status: dict, server_tag: str) -> List[TailscalePeer]:
    """
    Extract the server-tagged peers from a status document.

    Raises:
        TailscaleError: If the `Peer` collection is missing or a server peer is invalid
    """
    if "Peer" not in status:
        raise TailscaleError("Tailscale status has no 'Peer' field")

    peers = status["Peer"]
    if peers is None:
        return []
    if not isinstance(peers, dict):
        raise TailscaleError("Tailscale 'Peer' field is not a mapping")

    servers = []
    for key, raw in peers.items():
        if not isinstance(raw, dict):
            raise TailscaleError(f"Peer '{key}' is not an object")
        if server_tag not in (raw.get("Tags") or []):
            continue
        try:
            servers.append(TailscalePeer.model_validate(raw))
        except ValidationError as e:
            raise TailscaleError(f"Invalid peer '{key}': {e}") from e

    logger.debug(f"{len(servers)} of {len(peers)} peers are tagged '{server_tag}'")
    return servers


def fetch_server_peers(
    settings: Optional[XsshSettings] = None,
    runner: Optional[CommandRunner] = None,
) -> List[TailscalePeer]:
    """Fetch the peers tagged with the server tag from the local Tailscale daemon."""
    settings = settings or XsshSettings()
    runner = runner or default_runner
    return parse_server_peers(get_status(settings, runner), settings.server_tag)
