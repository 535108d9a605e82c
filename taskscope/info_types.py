"""Records produced by parsing a profiler log."""

from __future__ import annotations

from dataclasses import dataclass, field

from taskscope.common import ProcType


@dataclass(frozen=True)
class TaskKind:
    """A task identifier and its registered name."""

    task_id: int
    name: str


@dataclass(frozen=True)
class TaskInfo:
    """Timing of one task execution; all times are in microseconds."""

    task_id: int
    func_id: int
    proc_id: int
    create_time: int
    ready_time: int
    start_time: int
    stop_time: int


@dataclass(frozen=True)
class ProcDesc:
    """A processor and its kind."""

    proc_id: int
    kind: ProcType = ProcType.UNKNOWN


@dataclass(frozen=True)
class MetaDesc:
    """A runtime meta-operation identifier and its name."""

    op_id: int
    name: str


@dataclass
class LegionProfData:
    """Everything gathered from one profiler log."""

    task_kinds: dict[int, TaskKind] = field(default_factory=dict)
    task_infos: list[TaskInfo] = field(default_factory=list)
    meta_infos: list[TaskInfo] = field(default_factory=list)
    proc_descs: list[ProcDesc] = field(default_factory=list)
    meta_descs: dict[int, MetaDesc] = field(default_factory=dict)
    _report: str = field(default="", init=False, repr=False, compare=False)

    def n_processors(self) -> int:
        """Number of processors described in the log."""
        return len(self.proc_descs)

    def analyze(self) -> None:
        """Run the analysis; there are no analyses defined, so the report is empty."""
        self._report = ""

    def analysis_report(self) -> str:
        """Text of the most recent analysis."""
        return self._report