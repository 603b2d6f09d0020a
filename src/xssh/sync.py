"""
Host synchronization into the SSH config.

Peers are resolved into HostRecords concurrently (each resolution may run
several ssh probes), then merged into the config store from the calling
thread and appended to the file in one pass.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from .exceptions import InvalidHostError
from .models import TailscalePeer, XsshSettings
from .runner import CommandRunner, default_runner
from .ssh_config import HostRecord, SSHConfigStore, new_host_record
from .tailscale import fetch_server_peers

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """What a sync did to the config store."""
    store: SSHConfigStore
    records: List[HostRecord] = field(default_factory=list)
    added: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[Tuple[str, Exception]] = field(default_factory=list)


def host_alias(hostname: str) -> str:
    """Turn a device hostname into a usable `Host` alias."""
    return re.sub(r"\s+", "-", hostname.strip())


def _resolve_peer(
    peer: TailscalePeer, settings: XsshSettings, runner: CommandRunner
) -> HostRecord:
    return new_host_record(
        host_alias(peer.hostname), peer.address, settings=settings, runner=runner
    )


def resolve_hosts(
    peers: List[TailscalePeer],
    settings: XsshSettings,
    runner: CommandRunner,
) -> List[HostRecord]:
    """
    Resolve peers into host records on a worker pool.

    Records come back in peer order. The first failing resolution cancels the
    peers that have not started yet and is re-raised.
    """
    if not peers:
        return []

    records: Dict[int, HostRecord] = {}
    max_workers = min(settings.max_workers, len(peers))

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_map = {
            executor.submit(_resolve_peer, peer, settings, runner): index
            for index, peer in enumerate(peers)
        }

        for future in as_completed(future_map):
            try:
                records[future_map[future]] = future.result()
            except Exception:
                for pending in future_map:
                    pending.cancel()
                raise

    return [records[index] for index in range(len(peers))]


def merge_records(
    records: List[HostRecord],
    settings: XsshSettings,
    overwrite: bool,
) -> SyncResult:
    """Load the config store, add every record and append the new blocks."""
    store = SSHConfigStore.load(settings.ssh_config_file, extra_options=settings.host_options())
    result = SyncResult(store=store, records=list(records))

    for record in records:
        if store.add(record, overwrite):
            if record.name not in result.added:
                result.added.append(record.name)
        else:
            result.skipped.append(record.name)

    result.failed = store.save()
    return result


def sync_from_tailscale(
    overwrite: bool = False,
    settings: Optional[XsshSettings] = None,
    runner: Optional[CommandRunner] = None,
) -> SyncResult:
    """
    Sync server-tagged Tailscale peers into the SSH config.

    Raises:
        TailscaleError: If the peer directory cannot be read
        CommandExecutionError: If a login probe cannot be started
        SSHConfigError: If the config file cannot be read or opened
    """
    settings = settings or XsshSettings()
    runner = runner or default_runner

    peers = fetch_server_peers(settings, runner)
    logger.info(f"Found {len(peers)} server peers in Tailscale")

    records = resolve_hosts(peers, settings, runner)
    return merge_records(records, settings, overwrite)


SyncFunction = Callable[..., SyncResult]

SYNC_SOURCES: Dict[str, SyncFunction] = {
    "tailscale": sync_from_tailscale,
}


def split_destination(destination: str) -> Tuple[Optional[str], str]:
    """Split `[user@]host` into (user, host)."""
    user, _, host = destination.rpartition("@")
    return (user or None), host


def save_destination(
    destination: str,
    overwrite: bool = False,
    settings: Optional[XsshSettings] = None,
    runner: Optional[CommandRunner] = None,
) -> SyncResult:
    """Store a single destination given on the command line as a host entry."""
    settings = settings or XsshSettings()
    runner = runner or default_runner

    user, host = split_destination(destination)
    if not host:
        raise InvalidHostError(f"No host in destination '{destination}'")
    record = new_host_record(host, host, account=user, settings=settings, runner=runner)
    return merge_records([record], settings, overwrite)
