"""Shared constants and enumerations for the task timeline viewer."""

from __future__ import annotations

from enum import IntEnum

APP_NAME = "timeline"
APP_WIN_TITLE = "Task Execution Timeline"

# Horizontal resolution of the timeline: one pixel covers this many microseconds.
MICROSECONDS_PER_PIXEL = 100


class ProcType(IntEnum):
    """Kinds of processors reported by the profiler, in wire order."""

    TOC_PROC = 0  # throughput core (GPU)
    LOC_PROC = 1  # latency core (CPU)
    UTIL_PROC = 2  # utility core
    IO_PROC = 3  # I/O core
    PROC_GROUP = 4  # processor group
    UNKNOWN = 5


class StatusKind(IntEnum):
    """Severity of a status message shown to the user."""

    INFO = 0
    WARN = 1
    ERR = 2


_PROC_TYPE_NAMES = {
    ProcType.TOC_PROC: "GPU",
    ProcType.LOC_PROC: "CPU",
    ProcType.UTIL_PROC: "Utility",
    ProcType.IO_PROC: "IO",
    ProcType.PROC_GROUP: "Proc Group",
    ProcType.UNKNOWN: "Unknown",
}


def proc_type_name(proc_type: ProcType | int) -> str:
    """Return the display name of a processor type.

    Raises ValueError for a value that is not a known processor type.
    """
    try:
        kind = ProcType(proc_type)
    except ValueError:
        raise ValueError(f"unknown processor type: {proc_type!r}") from None
    return _PROC_TYPE_NAMES[kind]