# taskscope

Tools for looking at how tasks ran on a parallel machine.

The main part reads Legion profiler logs and draws one timeline per
processor as an SVG image. It reads the `Prof Task Info`, `Prof Meta Info`,
`Prof Proc Desc`, `Prof Task Kind` and `Prof Meta Desc` lines. Tasks on the
same processor that overlap in time are stacked on separate levels. The
package also has a process table, a small interactive command terminal and
the state objects a timeline viewer needs: zoom and panel switching.

## Installing

```
pip install .
```

You need Python 3.10 or newer. The package has no runtime dependencies.

## Command line

```
taskscope-timeline run1.log run2.log > timeline.svg
taskscope-timeline --help
```

Arguments that start with `-` count as options and are skipped. Every other
argument is a log file. `-h`, `-help` and `--help` print
`usage: timeline [log ...]` and exit.

The logs are parsed in parallel and then plotted in file-name order. The SVG
document goes to standard output. Progress and error messages go to
standard error. The exit status is 1 when a log cannot be read, is not a
profiler log, or has a task on a processor the logs never describe.

## Library use

Parse a log:

```python
from taskscope.log_parser import parse_log, LogParseError

try:
    data = parse_log("prof.log")
except LogParseError as err:
    print(f"cannot read log: {err}")
else:
    print(data.n_processors(), "processors")
```

`parse_lines` takes any iterable of lines instead of a path. A log with no
processor descriptions raises `LogParseError("Invalid Log Format")`. A
missing file raises `LogParseError` too. The parser returns a
`taskscope.info_types.LegionProfData` holding:

- `task_kinds`
- `task_infos`
- `meta_infos`
- `proc_descs`
- `meta_descs`

Times in the log are in nanoseconds and are stored in microseconds.

Build the timelines and render them:

```python
from taskscope.graph import TimelineGraph
from taskscope.cli import render_svg

graph = TimelineGraph()
graph.add_plot_data(data)
graph.plot()
svg_text = render_svg(graph)
```

`taskscope.frame.LogLoader` does the same for a list of files. It parses up
to eight files at once and reports progress through an optional
`(StatusKind, text)` callback. It raises `ValueError` when a file is named
twice.

How tasks are placed:

- One horizontal pixel stands for 100 microseconds.
- Tasks shorter than that are not drawn.
- Every `ProcTimeline` exposes its `bars` (`TaskBar` objects with position,
  width, level, colours and a `tooltip()`).
- `legend()` returns the processor label, for example `CPU 000003`.
- `tick_positions()` returns one tick position every 20 ms.

Colours come from `taskscope.palette`:

- `color_alphabet()` returns a fixed palette of 26 distinguishable colours.
- `color_alphabet2()` returns a fixed palette of 64 colours.
- `golden_ratio_colors(count)` generates `count + 1` colours.
- `Color` parses hex text, converts from HSV and makes lighter shades.

## Tool front-end helpers

- `taskscope.process_table.ProcessTable` holds `ProcessEntry` records:
  host name, executable, pid and rank. `host_names()` gives the distinct
  hosts, and `dump_to(stream, prefix)` writes a listing.
- `ToolLeafInfo` packs connection information into a fixed-size record.
  Its `encode()` and `decode()` methods turn that record into base64 text
  and back.
- `session_key()` builds a `taskscope-<host>-<pid>` key.
- `taskscope.term_commands.TermCommands` is a registry of named commands
  with comma-separated aliases.
- `taskscope.terminal.Terminal` is an interactive prompt. It has these
  commands:
  - `help`
  - `quit`
  - `history`
  - `setenv`
  - `unsetenv`
  - `env`
  - `clear`
  - `modes`
  - `launch application [OPTION]... with launcher [OPTION]...`

  `!N` recalls history entry N as the next input line. The history is loaded
  from and saved to `history_file` when you give one.

```python
from taskscope.terminal import Terminal

term = Terminal(history_file="history")
term.init([])
term.interact()
```

By default, `launch` runs the launcher's arguments followed by the
application's arguments as one child process and waits for it to finish.

## What this package does not do

- There is no windowed viewer. The timeline is written as a static SVG, so
  you cannot zoom, select tasks, print or open files in a dialog.
  `ZoomState` and `PanelSwitcher` only track that state.
- `LegionProfData.analyze()` runs no analyses; its report is empty.
- The terminal's `launch` only starts the given command. It does not set up
  a tool network, load plugins or talk to back-end processes.
- The terminal has no console command of its own. Start it from Python as
  shown above.

## Running the tests

```
pip install .[test]
pytest
```