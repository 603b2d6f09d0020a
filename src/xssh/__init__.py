"""
xssh - SSH launcher and SSH config sync for Tailscale networks

Opens ssh sessions (optionally inside a remote tmux session) and keeps
~/.ssh/config in sync with the server-tagged peers of a tailnet.
"""

__version__ = "0.3.0"
__description__ = "SSH launcher and Tailscale SSH config sync"

from .ssh_config import HostRecord, SSHConfigStore, new_host_record
from .sync import sync_from_tailscale

__all__ = ["HostRecord", "SSHConfigStore", "new_host_record", "sync_from_tailscale"]
