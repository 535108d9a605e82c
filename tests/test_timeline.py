import pytest

from taskscope.common import MICROSECONDS_PER_PIXEL, ProcType
from taskscope.info_types import ProcDesc, TaskInfo
from taskscope.palette import Color
from taskscope.timeline import OverlapMap, ProcTimeline, Rect, TaskBar


def task(start, stop, func_id=0, task_id=1, proc_id=7):
    return TaskInfo(task_id, func_id, proc_id, 0, 0, start, stop)


def cpu_timeline(**kwargs):
    return ProcTimeline(ProcDesc(7, ProcType.LOC_PROC), **kwargs)


def coverage(segments, t):
    return sum(count for first, last, count in segments if first <= t <= last)


def test_overlap_map_single_window_is_one_segment():
    overlaps = OverlapMap()
    overlaps.add(0, 10)
    segments = overlaps.segments(0, 10)
    assert len(segments) == 1
    first, last, count = segments[0]
    assert count == 1
    assert first == 0 + 1
    assert last == 10 - 1


def test_overlap_map_counts_match_windows():
    windows = [(0, 10), (5, 20), (3, 7), (15, 30)]
    overlaps = OverlapMap()
    for window in windows:
        overlaps.add(*window)
    segments = overlaps.segments(-1, 40)
    for t in range(0, 40):
        expected = sum(1 for a, b in windows if a < t < b)
        assert coverage(segments, t) == expected


def test_overlap_map_segments_sorted_and_disjoint():
    overlaps = OverlapMap()
    for window in [(20, 50), (0, 30), (10, 15), (40, 60)]:
        overlaps.add(*window)
    segments = list(overlaps)
    for (_, last, _), (first, _, _) in zip(segments, segments[1:]):
        assert last < first
    assert all(first <= last for first, last, _ in segments)


def test_overlap_map_keeps_borders_of_adjacent_windows():
    overlaps = OverlapMap()
    overlaps.add(0, 10)
    overlaps.add(9, 20)
    segments = overlaps.segments(0, 20)
    assert len(segments) == 2
    assert all(count == 1 for _, _, count in segments)


def test_overlap_map_ignores_empty_window():
    overlaps = OverlapMap()
    overlaps.add(5, 6)
    assert overlaps.segments(0, 100) == []
    assert len(overlaps) == 0


def test_empty_timeline_bounding_rect():
    assert cpu_timeline().bounding_rect() == Rect(0.0, 0.0, 100.0, 35.0)


def test_short_task_is_skipped():
    timeline = cpu_timeline()
    assert timeline.add_task(task(0, MICROSECONDS_PER_PIXEL - 1)) is None
    assert timeline.bars == []
    assert len(timeline.intervals) == 0


def test_first_task_sets_level_and_height():
    timeline = cpu_timeline()
    bar = timeline.add_task(task(1000, 5000))
    assert bar.level == timeline.max_level - 1
    rect = timeline.bounding_rect()
    assert rect.height == timeline.max_level * TaskBar.HEIGHT + 5


def test_task_geometry_follows_times():
    timeline = cpu_timeline()
    bar = timeline.add_task(task(100_000, 500_000))
    assert timeline.bounding_rect().width == 500_000 // MICROSECONDS_PER_PIXEL
    assert bar.x == 100_000 // MICROSECONDS_PER_PIXEL
    assert bar.bounding_rect().width == 400_000 // MICROSECONDS_PER_PIXEL
    assert bar.bounding_rect().height == TaskBar.HEIGHT


def test_covering_task_is_sent_back():
    timeline = cpu_timeline()
    inner = timeline.add_task(task(10_000, 20_000))
    outer = timeline.add_task(task(0, 30_000))
    assert inner.z_value == 0.0
    assert outer.z_value < 0.0
    assert outer.level < inner.level


def test_layout_callback_only_on_level_change():
    calls = []
    timeline = cpu_timeline(on_layout_change=lambda: calls.append(True))
    timeline.add_task(task(0, 10_000))
    assert len(calls) == 1
    timeline.add_task(task(50_000, 60_000))
    assert len(calls) == 1


def test_propagate_position_update_moves_bars():
    timeline = cpu_timeline()
    timeline.add_task(task(0, 10_000))
    timeline.add_task(task(0, 30_000))
    timeline.y = 50.0
    timeline.propagate_position_update()
    for bar in timeline.bars:
        assert bar.y == 50 + bar.level * TaskBar.HEIGHT


def test_legend_pads_processor_id():
    assert cpu_timeline().legend() == "CPU 000007"


def test_tick_positions_span_width():
    timeline = cpu_timeline()
    timeline.add_task(task(0, 100_000))
    width = timeline.bounding_rect().width
    ticks = timeline.tick_positions()
    assert ticks[0] == 0
    assert all(b - a == 200 for a, b in zip(ticks, ticks[1:]))
    assert ticks[-1] < width
    assert ticks[-1] + 200 >= width


def test_palette_colors_bars_by_function():
    timeline = cpu_timeline()
    palette = [Color(1, 2, 3), Color(4, 5, 6)]
    timeline.color_palette = palette
    bar = timeline.add_task(task(0, 10_000, func_id=1))
    assert bar.fill_color == palette[1]
    assert bar.light_color == palette[1].lighter(128)
    cycled = timeline.add_task(task(20_000, 30_000, func_id=3))
    assert cycled.fill_color == palette[1]


def test_tooltip_describes_task():
    timeline = cpu_timeline()
    timeline.task_names = {1: "daxpy"}
    bar = timeline.add_task(task(1000, 2_501_000))
    text = bar.tooltip()
    assert text.startswith("Name: daxpy")
    assert "Executed on: CPU 7" in text
    assert "Start: 1000 \u03bcs" in text
    assert "End: 2501000 \u03bcs" in text
    assert "Duration: 2.5 s (2500000 \u03bcs)" in text


def test_paint_colors_swap_when_selected():
    timeline = cpu_timeline()
    bar = timeline.add_task(task(0, 10_000))
    resting = bar.z_value
    pen, fill = bar.paint_colors(True)
    assert pen == bar.fill_color
    assert fill == bar.light_color
    assert bar.z_value == TaskBar.MAX_Z_VALUE
    pen, fill = bar.paint_colors(False)
    assert pen == bar.light_color
    assert fill == bar.fill_color
    assert bar.z_value == resting


def test_update_z_value_sets_resting_order():
    timeline = cpu_timeline()
    bar = timeline.add_task(task(0, 10_000))
    bar.update_z_value(-1.5)
    assert bar.z_value == -1.5
    bar.paint_colors(True)
    bar.paint_colors(False)
    assert bar.z_value == -1.5


def test_rect_united_ignores_null():
    a = Rect(0.0, 0.0, 10.0, 5.0)
    b = Rect(5.0, 2.0, 10.0, 10.0)
    union = a.united(b)
    assert union.left == a.left
    assert union.top == a.top
    assert union.right == b.right
    assert union.bottom == b.bottom
    assert a.united(Rect(0.0, 0.0, 0.0, 0.0)) == a