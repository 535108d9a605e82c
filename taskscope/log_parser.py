"""Parser for task profiler logs."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from os import PathLike
from pathlib import Path

from taskscope.common import ProcType
from taskscope.info_types import (
    LegionProfData,
    MetaDesc,
    ProcDesc,
    TaskInfo,
    TaskKind,
)

log = logging.getLogger(__name__)

_TIMING = r"([0-9]+) ([0-9]+) ([0-9]+) ([0-9]+) ([0-9]+) ([0-9]+) ([0-9]+)"
_TASK_INFO_RX = re.compile(r"Prof Task Info " + _TIMING)
_META_INFO_RX = re.compile(r"Prof Meta Info " + _TIMING)
_PROC_DESC_RX = re.compile(r"Prof Proc Desc ([0-9]+) ([0-9]+)")
_TASK_KIND_RX = re.compile(r"Prof Task Kind ([0-9]+) ([a-zA-Z0-9_]+)")
_META_DESC_RX = re.compile(r"Prof Meta Desc ([0-9]+) ([a-zA-Z0-9_]+)")

_NS_PER_US = 1000


class LogParseError(Exception):
    """Raised when a log cannot be read or does not look like a profiler log."""

    def __init__(self, message: str, file_name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.file_name = file_name

    def __str__(self) -> str:
        if self.file_name:
            return f"{self.file_name}: {self.message}"
        return self.message


def _to_uint(text: str, bits: int) -> int:
    """Decimal text to an unsigned integer; values that do not fit become 0."""
    value = int(text)
    return value if value < (1 << bits) else 0


def _timing(match: re.Match[str]) -> TaskInfo:
    # Times arrive in nanoseconds and are kept in microseconds.
    times = [_to_uint(match.group(n), 64) // _NS_PER_US for n in range(4, 8)]
    return TaskInfo(
        _to_uint(match.group(1), 32),
        _to_uint(match.group(2), 32),
        _to_uint(match.group(3), 64),
        *times,
    )


def _proc_kind(text: str) -> ProcType:
    try:
        return ProcType(_to_uint(text, 32))
    except ValueError:
        return ProcType.UNKNOWN


def parse_lines(lines: Iterable[str]) -> LegionProfData:
    """Parse profiler log lines.

    Raises LogParseError when no processor descriptions were found.
    """
    data = LegionProfData()
    for line in lines:
        if match := _TASK_KIND_RX.search(line):
            task_id = _to_uint(match.group(1), 32)
            data.task_kinds.setdefault(task_id, TaskKind(task_id, match.group(2)))
        elif match := _TASK_INFO_RX.search(line):
            data.task_infos.append(_timing(match))
        elif match := _META_INFO_RX.search(line):
            data.meta_infos.append(_timing(match))
        elif match := _PROC_DESC_RX.search(line):
            data.proc_descs.append(
                ProcDesc(_to_uint(match.group(1), 64), _proc_kind(match.group(2)))
            )
        elif match := _META_DESC_RX.search(line):
            op_id = _to_uint(match.group(1), 32)
            data.meta_descs.setdefault(op_id, MetaDesc(op_id, match.group(2)))

    log.debug("# Proc Kinds Found: %d", len(data.task_kinds))
    log.debug("# Procs Found     : %d", len(data.proc_descs))
    log.debug("# Task Infos Found: %d", len(data.task_infos))
    log.debug("# Meta Descs Found: %d", len(data.meta_descs))
    log.debug("# Meta Infos Found: %d", len(data.meta_infos))

    if not data.proc_descs:
        raise LogParseError("Invalid Log Format")
    return data


def parse_log(path: str | PathLike[str]) -> LegionProfData:
    """Read and parse a profiler log file."""
    file_name = str(path)
    log_path = Path(path)
    if not log_path.exists():
        raise LogParseError(f"'{file_name}' Does Not Exist", file_name)
    try:
        with log_path.open(encoding="utf-8", errors="replace") as stream:
            return parse_lines(stream)
    except LogParseError as err:
        raise LogParseError(err.message, file_name) from None
    except OSError as err:
        raise LogParseError(err.strerror or str(err), file_name) from err