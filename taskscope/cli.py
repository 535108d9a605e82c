"""Command line entry: read profiler logs and draw their timelines as SVG."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from xml.sax.saxutils import escape

from taskscope.common import APP_NAME, APP_WIN_TITLE, StatusKind
from taskscope.frame import LogLoader, file_names_from_argv, status_message
from taskscope.graph import TimelineGraph
from taskscope.log_parser import LogParseError
from taskscope.palette import Color
from taskscope.timeline import TaskBar

_HELP_FLAGS = frozenset({"-help", "--help", "-h"})
_MARGIN = 5.0
_TICK_LEN = 4
_LEGEND_FIXUP = -1
_AXIS_COLOR = Color(160, 160, 164)
_TICK_COLOR = Color(0, 0, 0)


def needs_help(argv: Sequence[str]) -> bool:
    """True when any argument asks for help."""
    return any(arg in _HELP_FLAGS for arg in argv)


def usage() -> str:
    """One-line usage text."""
    return f"usage: {APP_NAME} [log ...]"


def _num(value: float) -> str:
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def _paint(attr: str, color: Color) -> str:
    text = f'{attr}="#{color.red:02X}{color.green:02X}{color.blue:02X}"'
    if color.alpha != 255:
        text += f' {attr}-opacity="{color.alpha / 255:.3f}"'
    return text


def render_svg(graph: TimelineGraph) -> str:
    """Draw every timeline and task bar of the graph as an SVG document."""
    scene = graph.scene_rect()
    width = max(scene.width, 1.0) + 2 * _MARGIN
    height = max(scene.height, 1.0) + 2 * _MARGIN
    parts = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{_num(width)}" '
        f'height="{_num(height)}" viewBox="{_num(scene.x - _MARGIN)} '
        f'{_num(scene.y - _MARGIN)} {_num(width)} {_num(height)}">',
        f"<title>{escape(APP_WIN_TITLE)}</title>",
    ]
    timelines = graph.timelines
    for timeline in timelines:
        box = timeline.bounding_rect()
        left, right = box.left, box.right
        bottom = timeline.y + box.bottom
        parts.append('<g class="timeline">')
        parts.append(
            f'<line x1="{_num(left)}" y1="{_num(bottom)}" x2="{_num(right)}" '
            f'y2="{_num(bottom)}" {_paint("stroke", _AXIS_COLOR)}/>'
        )
        parts.append(
            f'<text x="{_num(left)}" y="{_num(bottom + _LEGEND_FIXUP)}" '
            f'font-size="10">{escape(timeline.legend())}</text>'
        )
        for tick in timeline.tick_positions():
            parts.append(
                f'<line x1="{tick}" y1="{_num(bottom - _TICK_LEN)}" x2="{tick}" '
                f'y2="{_num(bottom + _TICK_LEN)}" {_paint("stroke", _TICK_COLOR)}/>'
            )
        parts.append("</g>")
    bars = sorted(
        (bar for timeline in timelines for bar in timeline.bars),
        key=lambda bar: bar.z_value,
    )
    for bar in bars:
        pen, fill = bar.paint_colors(False)
        parts.append(
            f'<rect x="{_num(bar.x)}" y="{_num(bar.y)}" width="{_num(bar.width)}" '
            f'height="{_num(TaskBar.HEIGHT)}" {_paint("fill", fill)} '
            f'{_paint("stroke", pen)}><title>{escape(bar.tooltip())}</title></rect>'
        )
    parts.append("</svg>")
    return "\n".join(parts) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the logs named on the command line and write their timeline as SVG."""
    args = list(sys.argv[1:] if argv is None else argv)
    full_argv = [APP_NAME, *args]
    if needs_help(full_argv):
        print(usage())
        return 0

    def report(kind: StatusKind, text: str) -> None:
        if text:
            print(status_message(kind, text), file=sys.stderr)

    loader = LogLoader(on_status=report)
    file_names = file_names_from_argv(full_argv)
    try:
        loader.load(file_names)
    except LogParseError:
        return 1
    except KeyError as err:
        print(status_message(StatusKind.ERR, str(err.args[0])), file=sys.stderr)
        return 1
    sys.stdout.write(render_svg(loader.graph))
    return 0