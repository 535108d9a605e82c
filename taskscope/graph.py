"""The scene holding every processor timeline of a plot."""

from __future__ import annotations

from taskscope.info_types import LegionProfData, ProcDesc, TaskInfo
from taskscope.palette import color_alphabet2
from taskscope.timeline import ProcTimeline, Rect, TaskBar


class TimelineGraph:
    """Processor timelines stacked vertically in processor id order."""

    SPACING = 10.0

    def __init__(self) -> None:
        self._timelines: dict[int, ProcTimeline] = {}

    @property
    def timelines(self) -> list[ProcTimeline]:
        """The timelines ordered by processor id."""
        return [self._timelines[key] for key in sorted(self._timelines)]

    def add_proc_timeline(self, proc_desc: ProcDesc) -> ProcTimeline:
        """Add a timeline for the processor unless one already exists."""
        existing = self._timelines.get(proc_desc.proc_id)
        if existing is not None:
            return existing
        timeline = ProcTimeline(proc_desc, on_layout_change=self.update_layout)
        self._timelines[proc_desc.proc_id] = timeline
        self.update_layout()
        return timeline

    def _timeline_for(self, info: TaskInfo) -> ProcTimeline:
        try:
            return self._timelines[info.proc_id]
        except KeyError:
            raise KeyError(f"no timeline for processor {info.proc_id}") from None

    def add_plot_data(self, data: LegionProfData) -> None:
        """Create timelines for the data's processors and place its tasks.

        Raises KeyError for a task on a processor that has no timeline.
        """
        palette = color_alphabet2()
        for proc_desc in data.proc_descs:
            self.add_proc_timeline(proc_desc)
        names = {task_id: kind.name for task_id, kind in data.task_kinds.items()}
        for timeline in self._timelines.values():
            timeline.color_palette = palette
            timeline.task_names.update(names)
        for info in data.task_infos:
            self._timeline_for(info).add_task(info)
        for info in data.meta_infos:
            self._timeline_for(info).add_task(info)

    def plot(self) -> None:
        """Finish the plot by laying the timelines out."""
        self.update_layout()

    def update_layout(self) -> None:
        """Stack the timelines top to bottom with spacing between them."""
        y = 0.0
        for timeline in self.timelines:
            timeline.y = y
            timeline.propagate_position_update()
            y += timeline.bounding_rect().height + self.SPACING

    def scene_rect(self) -> Rect:
        """The rectangle holding every timeline and task bar."""
        rect = Rect(0.0, 0.0, 0.0, 0.0)
        for timeline in self.timelines:
            own = timeline.bounding_rect()
            rect = rect.united(Rect(own.x, timeline.y + own.y, own.width, own.height))
            for bar in timeline.bars:
                rect = rect.united(Rect(bar.x, bar.y, bar.width, TaskBar.HEIGHT))
        return rect