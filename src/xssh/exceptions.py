"""Exception types raised by xssh."""


class XsshError(Exception):
    """Base class for errors that abort an xssh operation."""


class CommandExecutionError(XsshError):
    """Raised when an external command cannot be started at all."""

    def __init__(self, command, reason):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Failed to execute '{self.command[0]}': {reason}")


class TailscaleError(XsshError):
    """Raised when the Tailscale peer directory cannot be fetched or parsed."""


class SettingsError(XsshError):
    """Raised when a settings file is missing or invalid."""


class SSHConfigError(XsshError):
    """Raised when the SSH config file cannot be read or opened for writing."""


class InvalidHostError(XsshError, ValueError):
    """Raised when a host entry would have an empty or malformed field."""
