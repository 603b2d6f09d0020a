"""
SSH config host blocks and the append-only config store.
"""

import glob
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .exceptions import InvalidHostError, SSHConfigError
from .inference import infer_user
from .models import XsshSettings
from .runner import CommandRunner

logger = logging.getLogger(__name__)

_DIRECTIVE_SPLIT = re.compile(r"[\s=]+")
_PATTERN_CHARS = set("*?!")
_MAX_INCLUDE_DEPTH = 16


def _is_token(value: str) -> bool:
    return bool(value) and not any(c.isspace() for c in value)


@dataclass(frozen=True)
class HostRecord:
    """A resolved SSH config entry."""
    name: str
    address: str
    account: str

    def __post_init__(self):
        if not _is_token(self.name):
            raise InvalidHostError(f"Invalid host name: {self.name!r}")
        if not _is_token(self.address):
            raise InvalidHostError(f"Host '{self.name}' has an invalid address: {self.address!r}")
        if not _is_token(self.account):
            raise InvalidHostError(f"Host '{self.name}' has an invalid login account: {self.account!r}")

    def to_config_text(self, extra_options: Optional[Dict[str, str]] = None) -> str:
        """Render the host block, without the trailing blank separator."""
        lines = [
            f"Host {self.name}",
            f"    HostName {self.address}",
            f"    User {self.account}",
        ]
        for key, value in (extra_options or {}).items():
            lines.append(f"    {key} {value}")
        return "\n".join(lines).strip()


def new_host_record(
    name: str,
    address: str,
    account: Optional[str] = None,
    settings: Optional[XsshSettings] = None,
    runner: Optional[CommandRunner] = None,
) -> HostRecord:
    """Build a HostRecord, inferring the login account when none is given."""
    if not account:
        account = infer_user(address, settings=settings, runner=runner)
    return HostRecord(name=name, address=address, account=account)


def _iter_blocks(text: str) -> Iterator[Tuple[List[str], Dict[str, str]]]:
    """Yield (host patterns, options) per Host/Match section."""
    patterns: Optional[List[str]] = None
    options: Dict[str, str] = {}

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        parts = _DIRECTIVE_SPLIT.split(line, maxsplit=1)
        if len(parts) != 2:
            continue
        key, value = parts[0].lower(), parts[1].strip()

        if key in ("host", "match"):
            if patterns is not None:
                yield patterns, options
            patterns = value.split() if key == "host" else []
            options = {}
        elif patterns is not None:
            # ssh uses the first value given for a keyword
            options.setdefault(key, value)

    if patterns is not None:
        yield patterns, options


def _is_literal(pattern: str) -> bool:
    return not any(c in _PATTERN_CHARS for c in pattern)


def parse_config_text(text: str) -> List[HostRecord]:
    """
    Parse complete host blocks out of SSH config text.

    Only blocks with a single literal host name and both HostName and User
    set are returned; everything else in the file is ignored.
    """
    records = []
    for patterns, options in _iter_blocks(text):
        if len(patterns) != 1 or not _is_literal(patterns[0]):
            continue
        if "hostname" not in options or "user" not in options:
            continue
        try:
            records.append(
                HostRecord(name=patterns[0], address=options["hostname"], account=options["user"])
            )
        except InvalidHostError:
            continue
    return records


def declared_hosts(text: str) -> Set[str]:
    """All literal names that appear on Host lines."""
    return {
        pattern
        for patterns, _ in _iter_blocks(text)
        for pattern in patterns
        if _is_literal(pattern)
    }


def include_patterns(text: str) -> List[str]:
    """Paths named by Include directives, in file order."""
    patterns = []
    for line in text.splitlines():
        parts = _DIRECTIVE_SPLIT.split(line.strip(), maxsplit=1)
        if len(parts) == 2 and parts[0].lower() == "include":
            patterns.extend(parts[1].split())
    return patterns


def _included_hosts(text: str, base_dir: Path, depth: int = 0) -> Set[str]:
    """Literal host names declared in files pulled in by Include, recursively."""
    names: Set[str] = set()
    if depth >= _MAX_INCLUDE_DEPTH:
        logger.warning(f"Include nested deeper than {_MAX_INCLUDE_DEPTH} levels, ignoring the rest")
        return names

    for pattern in include_patterns(text):
        pattern = os.path.expanduser(pattern)
        if not os.path.isabs(pattern):
            pattern = str(base_dir / pattern)
        for match in sorted(glob.glob(pattern)):
            try:
                included = Path(match).read_text()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Could not read included file {match}: {e}")
                continue
            names |= declared_hosts(included)
            names |= _included_hosts(included, base_dir, depth + 1)
    return names


def _write_all(f, data: bytes) -> None:
    # unbuffered file: nothing is held back after a failed write
    view = memoryview(data)
    while view:
        written = f.write(view)
        view = view[written:]


def _ends_with_newline(path: Path) -> bool:
    with open(path, "rb") as f:
        f.seek(-1, 2)
        return f.read(1) == b"\n"


class SSHConfigStore:
    """In-memory view of an SSH config file that is persisted by appending."""

    def __init__(
        self,
        path: str,
        entries: Optional[Dict[str, HostRecord]] = None,
        declared: Optional[Set[str]] = None,
        extra_options: Optional[Dict[str, str]] = None,
    ):
        self.path = path
        self.entries: Dict[str, HostRecord] = dict(entries or {})
        self.extra_options = dict(extra_options or {})
        self._declared = set(declared or ())
        self._pending: Dict[str, None] = {}

    @property
    def file_path(self) -> Path:
        return Path(self.path).expanduser()

    @classmethod
    def load(cls, path: str, extra_options: Optional[Dict[str, str]] = None) -> "SSHConfigStore":
        """
        Load the host entries of an existing config file.

        A missing file gives an empty store. When a name has several complete
        blocks the last one wins, since later syncs append replacements.
        Host names declared in files pulled in by Include count as existing,
        relative Include paths resolve against the config file's directory.

        Raises:
            SSHConfigError: If the file exists but cannot be read
        """
        file_path = Path(path).expanduser()
        if not file_path.exists():
            logger.debug(f"{file_path} does not exist, starting with an empty config")
            return cls(path, extra_options=extra_options)

        try:
            text = file_path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            raise SSHConfigError(f"Could not read {file_path}: {e}") from e

        entries = {record.name: record for record in parse_config_text(text)}
        declared = declared_hosts(text) | _included_hosts(text, file_path.parent)
        logger.debug(f"Loaded {len(entries)} host entries from {file_path}")
        return cls(path, entries=entries, declared=declared, extra_options=extra_options)

    def add(self, record: HostRecord, overwrite: bool = False) -> bool:
        """
        Insert a host entry.

        Returns:
            bool: False if the name already exists and overwrite is disabled
        """
        if record.name in self.list() and not overwrite:
            logger.info(f"'{record.name}' exists in the config, skipping...")
            return False

        self.entries[record.name] = record
        self._pending[record.name] = None
        return True

    def save(self) -> List[Tuple[str, Exception]]:
        """
        Append every entry added since load to the config file.

        The file is created when missing and never truncated. A failure to
        write one entry does not stop the others.

        Returns:
            List of (host name, error) for entries that could not be written

        Raises:
            SSHConfigError: If the file cannot be opened for appending
        """
        if not self._pending:
            return []

        file_path = self.file_path
        failures: List[Tuple[str, Exception]] = []

        try:
            file_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            needs_newline = (
                file_path.exists()
                and file_path.stat().st_size > 0
                and not _ends_with_newline(file_path)
            )
            f = open(file_path, "ab", buffering=0)
        except OSError as e:
            raise SSHConfigError(f"Could not open {file_path} for writing: {e}") from e

        with f:
            if needs_newline:
                try:
                    _write_all(f, b"\n")
                except OSError as e:
                    raise SSHConfigError(f"Could not write to {file_path}: {e}") from e
            for name in list(self._pending):
                try:
                    block = self.entries[name].to_config_text(self.extra_options) + "\n\n"
                    _write_all(f, block.encode())
                except OSError as e:
                    logger.error(f"Error writing {name} to file: {e}")
                    failures.append((name, e))
                else:
                    del self._pending[name]

        return failures

    def list(self) -> Set[str]:
        """Names of all hosts known to the store."""
        return set(self.entries) | self._declared
