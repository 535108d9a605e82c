"""Process tables and connection records shared by tool front- and back-ends."""

from __future__ import annotations

import base64
import os
import socket
import struct
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TextIO

# Longest host name the wire records hold, terminator included.
HOST_NAME_MAX = 64
# Size of a session key buffer, terminator included.
SESSION_KEY_SIZE = 32 + HOST_NAME_MAX
# A timeout value meaning "wait forever".
UNLIMITED_TIMEOUT = -1
# A retry count meaning "retry forever".
UNLIMITED_RETRIES = -1

_SESSION_PREFIX = "taskscope"
_LEAF_FORMAT = struct.Struct(f"<{HOST_NAME_MAX}s{HOST_NAME_MAX}s3i")
LEAF_INFO_SIZE = _LEAF_FORMAT.size


def not_in_path_message(what: str) -> str:
    """Message telling the user that a program is missing from $PATH."""
    return (
        f"It appears as if '{what}', is not in your $PATH.\n"
        "Please update your $PATH to include its location."
    )


def session_key(host_name: str | None = None, pid: int | None = None) -> str:
    """Key that tells one analysis session apart from another."""
    if host_name is None:
        host_name = socket.gethostname()
    if pid is None:
        pid = os.getpid()
    key = f"{_SESSION_PREFIX}-{host_name}-{pid}"
    return key[: SESSION_KEY_SIZE - 1]


@dataclass(frozen=True)
class ProcessEntry:
    """One application process: where it runs, what it runs and its rank."""

    host_name: str = ""
    executable_name: str = ""
    pid: int = 0
    mpi_rank: int = 0
    cnode_id: int = 0


def _encode_name(name: str) -> bytes:
    raw = name.encode("utf-8")
    if len(raw) >= HOST_NAME_MAX:
        raise ValueError(f"host name too long: {name!r}")
    return raw


def _decode_name(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", errors="replace")


@dataclass(frozen=True)
class ToolLeafInfo:
    """Where a tool leaf connects to its parent in the tool network."""

    host_name: str
    parent_host_name: str
    rank: int
    parent_port: int
    parent_rank: int

    def to_bytes(self) -> bytes:
        """Fixed-size binary record of the leaf information."""
        return _LEAF_FORMAT.pack(
            _encode_name(self.host_name),
            _encode_name(self.parent_host_name),
            self.rank,
            self.parent_port,
            self.parent_rank,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> ToolLeafInfo:
        """Read a record written by to_bytes."""
        if len(data) != LEAF_INFO_SIZE:
            raise ValueError(
                f"leaf record must be {LEAF_INFO_SIZE} bytes, got {len(data)}"
            )
        host, parent, rank, port, parent_rank = _LEAF_FORMAT.unpack(data)
        return cls(_decode_name(host), _decode_name(parent), rank, port, parent_rank)

    def encode(self) -> str:
        """Base64 text of the binary record, for publishing."""
        return base64.b64encode(self.to_bytes()).decode("ascii")

    @classmethod
    def decode(cls, text: str) -> ToolLeafInfo:
        """Read leaf information published by encode."""
        return cls.from_bytes(base64.b64decode(text, validate=True))


class ProcessTable:
    """The processes of a parallel job; None entries means no table yet."""

    def __init__(self, entries: Iterable[ProcessEntry] | None = None) -> None:
        self._entries: list[ProcessEntry] | None = (
            None if entries is None else list(entries)
        )

    @property
    def allocated(self) -> bool:
        """True once the table holds a (possibly empty) list of processes."""
        return self._entries is not None

    @property
    def entries(self) -> list[ProcessEntry]:
        """A copy of the entries."""
        return list(self._entries or [])

    def __len__(self) -> int:
        return len(self._entries or [])

    def __iter__(self) -> Iterator[ProcessEntry]:
        return iter(self.entries)

    def dump_to(self, stream: TextIO, prefix: str = "") -> None:
        """Write a readable listing of the table to stream."""
        stream.write(f"{prefix}*** Process Table Dump ***\n")
        if self._entries is None:
            stream.write(f"{prefix}XXX Process Table Not Allocated XXX\n")
            return
        for entry in self._entries:
            stream.write(f"{prefix}Host Name: {entry.host_name}\n")
            stream.write(f"{prefix}Executable Name: {entry.executable_name}\n")
            stream.write(f"{prefix}PID: {entry.pid} TID: {entry.mpi_rank}\n")

    def host_names(self) -> set[str]:
        """The distinct hosts the processes run on."""
        return {entry.host_name for entry in self._entries or []}