"""Per-processor timelines and the task bars drawn on them."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass

from taskscope.common import MICROSECONDS_PER_PIXEL, proc_type_name
from taskscope.info_types import ProcDesc, TaskInfo
from taskscope.palette import Color

_U64 = 1 << 64
_MIN_TASK_LEVEL = 1
_AXIS_SPACE = 5.0
_MIN_WIDTH = 100.0
# One tick mark every 20 milliseconds.
_TICK_INCREMENT = 20_000 // MICROSECONDS_PER_PIXEL
_MICROSECONDS = " \u03bcs"
_LIGHTNESS = 128

DEFAULT_TASK_COLOR = Color(160, 160, 164)


@dataclass(frozen=True)
class Rect:
    """An axis-aligned rectangle in scene units."""

    x: float
    y: float
    width: float
    height: float

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def bottom_left(self) -> tuple[float, float]:
        return self.left, self.bottom

    @property
    def bottom_right(self) -> tuple[float, float]:
        return self.right, self.bottom

    def is_null(self) -> bool:
        """True when the rectangle has neither width nor height."""
        return self.width == 0 and self.height == 0

    def united(self, other: Rect) -> Rect:
        """The smallest rectangle holding both rectangles; null ones are ignored."""
        if other.is_null():
            return self
        if self.is_null():
            return other
        left = min(self.left, other.left)
        top = min(self.top, other.top)
        right = max(self.right, other.right)
        bottom = max(self.bottom, other.bottom)
        return Rect(left, top, right - left, bottom - top)


class OverlapMap:
    """Counts how many open time windows cover each stretch of time.

    Windows are open intervals over integer microseconds, so the window
    (start, stop) covers the times start + 1 through stop - 1. Segment
    borders of every added window are kept, even where neighbouring counts
    are equal. Segments are reported as (first, last, count) with both ends
    inclusive.
    """

    def __init__(self) -> None:
        self._segments: list[tuple[int, int, int]] = []

    def __iter__(self) -> Iterator[tuple[int, int, int]]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def add(self, start: int, stop: int) -> None:
        """Add the open window (start, stop), raising the count it covers by one."""
        first, last = start + 1, stop - 1
        if first > last:
            return
        result: list[tuple[int, int, int]] = []
        cursor = first
        for seg_first, seg_last, count in self._segments:
            if seg_last < first or seg_first > last:
                result.append((seg_first, seg_last, count))
                continue
            if seg_first < first:
                result.append((seg_first, first - 1, count))
            overlap_first = max(seg_first, first)
            overlap_last = min(seg_last, last)
            if cursor < overlap_first:
                result.append((cursor, overlap_first - 1, 1))
            result.append((overlap_first, overlap_last, count + 1))
            cursor = overlap_last + 1
            if seg_last > last:
                result.append((last + 1, seg_last, count))
        if cursor <= last:
            result.append((cursor, last, 1))
        result.sort()
        self._segments = result

    def segments(self, start: int, stop: int) -> list[tuple[int, int, int]]:
        """Segments that overlap the open window (start, stop), in time order."""
        first, last = start + 1, stop - 1
        if first > last:
            return []
        return [seg for seg in self._segments if seg[1] >= first and seg[0] <= last]


class TaskBar:
    """One task execution drawn as a bar on a processor timeline."""

    HEIGHT = 30.0
    MAX_Z_VALUE = 10.0

    def __init__(
        self,
        info: TaskInfo,
        proc_desc: ProcDesc,
        level: int,
        z_value: float,
        y: float = 0.0,
        name: str = "",
    ) -> None:
        self.info = info
        self.proc_desc = proc_desc
        self.level = level
        self.name = name
        self._z_stash = z_value
        self.z_value = z_value
        self.x = float(info.start_time // MICROSECONDS_PER_PIXEL)
        self.y = float(y)
        self.width = float(self.duration // MICROSECONDS_PER_PIXEL)
        self._color = DEFAULT_TASK_COLOR
        self._light_color = self._color.lighter(_LIGHTNESS)

    @property
    def duration(self) -> int:
        """Execution time in microseconds."""
        return (self.info.stop_time - self.info.start_time) % _U64

    @property
    def fill_color(self) -> Color:
        return self._color

    @fill_color.setter
    def fill_color(self, color: Color) -> None:
        self._color = color
        self._light_color = color.lighter(_LIGHTNESS)

    @property
    def light_color(self) -> Color:
        return self._light_color

    def bounding_rect(self) -> Rect:
        """The bar's extent in its own coordinates."""
        return Rect(0.0, 0.0, self.width, self.HEIGHT)

    def tooltip(self) -> str:
        """Text describing the task execution."""
        micros = self.duration
        seconds = micros / 1e6
        return (
            f"Name: {self.name or 'unnamed'}"
            f"\nExecuted on: {proc_type_name(self.proc_desc.kind)} {self.proc_desc.proc_id}"
            f"\nStart: {self.info.start_time}{_MICROSECONDS}"
            f"\nEnd: {self.info.stop_time}{_MICROSECONDS}"
            f"\nDuration: {seconds:.1f} s ({micros}{_MICROSECONDS})"
        )

    def paint_colors(self, selected: bool) -> tuple[Color, Color]:
        """Return (pen, fill) colours; a selected bar is also brought to the front."""
        if selected:
            self.z_value = self.MAX_Z_VALUE
            return self._color, self._light_color
        self.z_value = self._z_stash
        return self._light_color, self._color

    def update_z_value(self, z_value: float) -> None:
        """Set the resting stacking order of the bar."""
        self._z_stash = z_value
        self.z_value = z_value


class ProcTimeline:
    """The tasks executed on one processor, stacked where they overlap."""

    def __init__(
        self,
        proc_desc: ProcDesc,
        on_layout_change: Callable[[], None] | None = None,
    ) -> None:
        self.proc_desc = proc_desc
        self.y = 0.0
        self.color_palette: list[Color] = []
        self.task_names: dict[int, str] = {}
        self.bars: list[TaskBar] = []
        self.intervals = OverlapMap()
        self._max_x = 0.0
        self._max_level = _MIN_TASK_LEVEL
        self._on_layout_change = on_layout_change

    @property
    def max_level(self) -> int:
        """Number of stacking levels the timeline currently needs."""
        return self._max_level

    def add_task(self, info: TaskInfo) -> TaskBar | None:
        """Place a task on the timeline; tasks narrower than a pixel are skipped."""
        start, stop = info.start_time, info.stop_time
        if (stop - start) % _U64 < MICROSECONDS_PER_PIXEL:
            return None
        self.intervals.add(start, stop)
        old_max_level = self._max_level
        level = _MIN_TASK_LEVEL
        z_value = 0.0
        first, last = start + 1, stop - 1
        for seg_first, seg_last, _count in self.intervals.segments(start, stop):
            if seg_first <= first and last <= seg_last:
                level += 1
                if level > self._max_level:
                    self._max_level = level
            elif first <= seg_first and seg_last <= last:
                # A wider task covering placed ones is pushed back a little.
                z_value -= 0.1
        task_right = float(stop // MICROSECONDS_PER_PIXEL)
        if task_right > self._max_x:
            self._max_x = task_right
        bar = TaskBar(
            info,
            self.proc_desc,
            level - 1,
            z_value,
            self.y,
            self.task_names.get(info.task_id, ""),
        )
        if self.color_palette:
            bar.fill_color = self.color_palette[info.func_id % len(self.color_palette)]
        self.bars.append(bar)
        if old_max_level != self._max_level and self._on_layout_change is not None:
            self._on_layout_change()
        return bar

    def bounding_rect(self) -> Rect:
        """The timeline's extent in its own coordinates."""
        if not self.bars:
            return Rect(0.0, 0.0, _MIN_WIDTH, TaskBar.HEIGHT + _AXIS_SPACE)
        return Rect(
            0.0,
            0.0,
            self._max_x,
            self._max_level * TaskBar.HEIGHT + _AXIS_SPACE,
        )

    def propagate_position_update(self) -> None:
        """Move every bar to follow the timeline's vertical position."""
        task_y = int(self.y)
        for bar in self.bars:
            bar.y = float(task_y + bar.level * TaskBar.HEIGHT)

    def legend(self) -> str:
        """Label of the timeline: processor kind and zero-padded id."""
        return f"{proc_type_name(self.proc_desc.kind)} {self.proc_desc.proc_id:06d}"

    def tick_positions(self) -> list[int]:
        """X positions of the time tick marks along the axis."""
        width = self.bounding_rect().width
        return list(range(0, math.ceil(width), _TICK_INCREMENT))