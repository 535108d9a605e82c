"""Viewer state: zoom, panel switching and loading of profiler logs."""

from __future__ import annotations

import math
import threading
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import IntEnum

from taskscope.common import StatusKind
from taskscope.graph import TimelineGraph
from taskscope.info_types import LegionProfData
from taskscope.log_parser import LogParseError, parse_log

StatusCallback = Callable[[StatusKind, str], None]

_TIMELINE_TIP = "Show Execution Timeline"
_STATS_TIP = "Show Statistics"


class Panel(IntEnum):
    """The panels that share the main area, in stacking order."""

    TIMELINE = 0
    STATS = 1
    HELP = 2


def file_names_from_argv(argv: Sequence[str]) -> list[str]:
    """Log file names from a full argument vector; argv[0] and options are skipped."""
    return [arg for arg in list(argv)[1:] if not arg.startswith("-")]


def status_message(kind: StatusKind, text: str) -> str:
    """Decorate a status text according to its severity."""
    if kind == StatusKind.WARN:
        return f"Warning [{text}]"
    if kind == StatusKind.ERR:
        return f"Error [{text}]"
    return text


def graph_stats_tooltip(pressed: bool) -> str:
    """Tooltip of the button that toggles between timeline and statistics."""
    return _TIMELINE_TIP if pressed else _STATS_TIP


class ZoomState:
    """Zoom level of the timeline view; the scale is 2 ** ((zoom - init) / 50)."""

    MIN_ZOOM = -512.0
    MAX_ZOOM = 512.0
    KEY_INCREMENT = 4.0
    FIT_FUDGE = 0.9

    def __init__(self, zoom: float = 0.0, init_zoom: float = 0.0) -> None:
        self.zoom = float(zoom)
        self.init_zoom = float(init_zoom)

    def scale(self) -> float:
        """Current scale factor of the view."""
        return 2.0 ** ((self.zoom - self.init_zoom) / 50.0)

    def recalibrate(self, target_scale: float) -> float:
        """Set the zoom value so that the view has the given scale."""
        if target_scale <= 0:
            raise ValueError(f"scale must be positive: {target_scale}")
        self.zoom = 50.0 * math.log2(target_scale) + self.init_zoom
        return self.scale()

    def zoom_in(self) -> float:
        """Zoom in one step unless at the upper limit."""
        if self.zoom < self.MAX_ZOOM:
            self.zoom += self.KEY_INCREMENT
        return self.scale()

    def zoom_out(self) -> float:
        """Zoom out one step unless at the lower limit."""
        if self.zoom > self.MIN_ZOOM:
            self.zoom -= self.KEY_INCREMENT
        return self.scale()

    def fit(self, view_height: float, scene_height: float) -> float:
        """Scale so that the scene fills most of the view's height."""
        if scene_height <= 0:
            raise ValueError(f"scene height must be positive: {scene_height}")
        return self.recalibrate(view_height * self.FIT_FUDGE / scene_height)


class PanelSwitcher:
    """Tracks which panel is shown and the state of the help toggle."""

    def __init__(self) -> None:
        self.current = Panel.TIMELINE
        self.help_checked = False
        self.graph_stats_tip = graph_stats_tooltip(False)
        self._previous = Panel.STATS

    def press_graph_stats(self, pressed: bool) -> Panel:
        """Show statistics when pressed, the timeline otherwise."""
        panel = Panel.STATS if pressed else Panel.TIMELINE
        if self.help_checked:
            self.press_help(False)
        self.graph_stats_tip = graph_stats_tooltip(pressed)
        self.current = panel
        return self.current

    def press_help(self, pressed: bool) -> Panel:
        """Show help when pressed; otherwise return to the panel shown before."""
        self.help_checked = pressed
        if pressed:
            self._previous = self.current
            self.current = Panel.HELP
        else:
            self.current = self._previous
        return self.current

    def timeline_in_focus(self) -> bool:
        """True while the timeline panel is shown."""
        return self.current == Panel.TIMELINE


class LogLoader:
    """Parses log files in parallel and plots them once all are read."""

    MAX_WORKERS = 8

    def __init__(
        self,
        graph: TimelineGraph | None = None,
        on_status: StatusCallback | None = None,
        max_workers: int = MAX_WORKERS,
    ) -> None:
        self.graph = graph if graph is not None else TimelineGraph()
        self._on_status = on_status
        self._max_workers = max_workers
        self._lock = threading.Lock()
        self._parsed = 0

    def _emit(self, kind: StatusKind, text: str) -> None:
        if self._on_status is not None:
            self._on_status(kind, text)

    def load(self, file_names: Iterable[str]) -> TimelineGraph:
        """Parse the files and add their data to the graph.

        Files are checked and plotted in name order. Raises the first
        LogParseError found, after reporting it, and ValueError when a
        file is named twice.
        """
        names = list(file_names)
        if not names:
            return self.graph
        seen: set[str] = set()
        for name in names:
            if name in seen:
                raise ValueError(f"log file given more than once: {name}")
            seen.add(name)

        count = len(names)
        self._emit(
            StatusKind.INFO,
            f"Processing {count} Log File{'s' if count > 1 else ''}",
        )
        self._parsed = 0
        results: dict[str, LegionProfData | LogParseError] = {}

        def work(name: str) -> None:
            outcome: LegionProfData | LogParseError
            try:
                outcome = parse_log(name)
            except LogParseError as err:
                outcome = err
            with self._lock:
                results[name] = outcome
                self._parsed += 1
                percent = self._parsed / count * 100.0
                self._emit(StatusKind.INFO, f"Parsing: {percent:.0f}% Done")

        with ThreadPoolExecutor(max_workers=min(self._max_workers, count)) as pool:
            futures = [pool.submit(work, name) for name in names]
            for future in futures:
                future.result()

        ordered = sorted(names)
        for name in ordered:
            outcome = results[name]
            if isinstance(outcome, LogParseError):
                self._emit(StatusKind.ERR, str(outcome))
                raise outcome
        for name in ordered:
            data = results[name]
            assert isinstance(data, LegionProfData)
            self.graph.add_plot_data(data)
        self.graph.plot()
        self._emit(StatusKind.INFO, "")
        return self.graph