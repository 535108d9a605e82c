import pytest

from taskscope.common import ProcType
from taskscope.graph import TimelineGraph
from taskscope.info_types import LegionProfData, ProcDesc, TaskInfo, TaskKind
from taskscope.palette import color_alphabet2
from taskscope.timeline import Rect, TaskBar


def task(proc_id, start, stop, task_id=1, func_id=0):
    return TaskInfo(task_id, func_id, proc_id, 0, 0, start, stop)


def sample_data():
    return LegionProfData(
        task_kinds={1: TaskKind(1, "daxpy")},
        task_infos=[
            task(2, 0, 10_000),
            task(2, 0, 30_000),
            task(1, 5_000, 20_000),
        ],
        meta_infos=[task(1, 40_000, 50_000, task_id=9)],
        proc_descs=[ProcDesc(2, ProcType.TOC_PROC), ProcDesc(1, ProcType.LOC_PROC)],
    )


def assert_stacked(graph):
    timelines = graph.timelines
    for upper, lower in zip(timelines, timelines[1:]):
        assert lower.y == upper.y + upper.bounding_rect().height + TimelineGraph.SPACING


def test_duplicate_timeline_is_not_added():
    graph = TimelineGraph()
    first = graph.add_proc_timeline(ProcDesc(3, ProcType.LOC_PROC))
    second = graph.add_proc_timeline(ProcDesc(3, ProcType.IO_PROC))
    assert first is second
    assert len(graph.timelines) == 1


def test_timelines_ordered_by_processor_id():
    graph = TimelineGraph()
    for proc_id in (30, 10, 20):
        graph.add_proc_timeline(ProcDesc(proc_id, ProcType.LOC_PROC))
    assert [t.proc_desc.proc_id for t in graph.timelines] == [10, 20, 30]
    assert graph.timelines[0].y == 0.0
    assert_stacked(graph)


def test_add_plot_data_places_tasks():
    graph = TimelineGraph()
    graph.add_plot_data(sample_data())
    by_id = {t.proc_desc.proc_id: t for t in graph.timelines}
    assert len(by_id[2].bars) == 2
    assert len(by_id[1].bars) == 2
    assert all(t.color_palette == color_alphabet2() for t in graph.timelines)


def test_layout_follows_level_changes():
    graph = TimelineGraph()
    graph.add_plot_data(sample_data())
    assert_stacked(graph)
    graph.plot()
    assert_stacked(graph)
    for timeline in graph.timelines:
        for bar in timeline.bars:
            assert bar.y == int(timeline.y) + bar.level * TaskBar.HEIGHT


def test_task_names_reach_tooltips():
    graph = TimelineGraph()
    graph.add_plot_data(sample_data())
    cpu = graph.timelines[0]
    assert cpu.bars[0].tooltip().startswith("Name: daxpy")


def test_unknown_processor_raises():
    data = LegionProfData(
        task_infos=[task(99, 0, 10_000)],
        proc_descs=[ProcDesc(1, ProcType.LOC_PROC)],
    )
    with pytest.raises(KeyError):
        TimelineGraph().add_plot_data(data)


def test_empty_scene_rect():
    assert TimelineGraph().scene_rect() == Rect(0.0, 0.0, 0.0, 0.0)


def test_scene_rect_holds_everything():
    graph = TimelineGraph()
    graph.add_plot_data(sample_data())
    graph.plot()
    scene = graph.scene_rect()
    for timeline in graph.timelines:
        own = timeline.bounding_rect()
        assert scene.left <= 0.0
        assert scene.bottom >= timeline.y + own.height
        assert scene.right >= own.width
        for bar in timeline.bars:
            assert scene.left <= bar.x
            assert scene.right >= bar.x + bar.width
            assert scene.bottom >= bar.y + TaskBar.HEIGHT