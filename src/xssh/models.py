"""Data models for xssh."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_CANDIDATE_USERS = ["ubuntu", "debian", "root"]
DEFAULT_SERVER_TAG = "tag:server"


class XsshSettings(BaseModel):
    """Runtime settings shared by inference, sync and session launching."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    ssh_config_file: str = "~/.ssh/config"
    candidate_users: List[str] = Field(
        default_factory=lambda: list(DEFAULT_CANDIDATE_USERS), min_length=1
    )
    connect_timeout: int = Field(default=5, gt=0)
    probe_term_timeout: float = Field(default=15.0, gt=0)
    probe_kill_timeout: float = Field(default=5.0, gt=0)
    server_tag: str = DEFAULT_SERVER_TAG
    max_workers: int = Field(default=8, gt=0)
    ssh_binary: str = "ssh"
    tailscale_binary: str = "tailscale"
    tailscale_timeout: float = Field(default=30.0, gt=0)
    disable_host_key_checking: bool = True

    @field_validator("candidate_users")
    @classmethod
    def _users_not_blank(cls, users: List[str]) -> List[str]:
        if any(not user.strip() for user in users):
            raise ValueError("candidate users must be non-empty strings")
        return users

    def host_options(self) -> dict:
        """Extra options written into every synced host block."""
        if self.disable_host_key_checking:
            return {"StrictHostKeyChecking": "no"}
        return {}


class TailscalePeer(BaseModel):
    """A single entry of the `Peer` collection in `tailscale status --json`."""
    model_config = ConfigDict(populate_by_name=True)

    hostname: str = Field(alias="HostName", min_length=1)
    ips: List[str] = Field(alias="TailscaleIPs", min_length=1)
    tags: Optional[List[str]] = Field(default=None, alias="Tags")

    @field_validator("hostname")
    @classmethod
    def _hostname_not_blank(cls, hostname: str) -> str:
        if not hostname.strip():
            raise ValueError("hostname must not be blank")
        return hostname

    @field_validator("ips")
    @classmethod
    def _ips_are_addresses(cls, ips: List[str]) -> List[str]:
        if any(not ip or any(c.isspace() for c in ip) for ip in ips):
            raise ValueError("addresses must be non-empty and contain no whitespace")
        return ips

    @property
    def address(self) -> str:
        """The authoritative (first listed) Tailscale address."""
        return self.ips[0]

    def has_tag(self, tag: str) -> bool:
        return bool(self.tags) and tag in self.tags
