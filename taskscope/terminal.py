"""Interactive terminal: a read-eval-print loop over the registered commands."""

from __future__ import annotations

import os
import re
import shlex
import subprocess
import sys
from collections import deque
from collections.abc import Callable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import TextIO

from taskscope.process_table import not_in_path_message
from taskscope.term_commands import TermCommand, TermCommands, UserInterface

PACKAGE_NAME = "taskscope"

Launcher = Callable[[list[str], list[str]], int]

_LAUNCH_USAGE = "launch application [OPTION]... with launcher [OPTION]..."
_CLEAR_SCREEN = "\033[H\033[2J"


class LaunchUsageError(ValueError):
    """A launch command that does not have the expected form."""


def parse_launch(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split 'launch APP [OPT]... with LAUNCHER [OPT]...' into its two argument lists.

    argv[0] is the command name itself. Raises LaunchUsageError when the
    command is too short or malformed.
    """
    args = list(argv)
    if len(args) < 4:
        raise LaunchUsageError("")
    rest = args[1:]
    if "with" not in rest:
        raise LaunchUsageError("Malformed launch command... Please try again.")
    split = rest.index("with")
    app_argv, launcher_argv = rest[:split], rest[split + 1:]
    if not app_argv:
        raise LaunchUsageError("Malformed launch command... Please try again.")
    if not launcher_argv:
        raise LaunchUsageError("Launcher command not provided. 'with' what?")
    return app_argv, launcher_argv


_VIS_ESCAPE = re.compile(rb"\\(\\|[0-7]{3})")


def _vis(text: str) -> str:
    out = []
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch.isspace() or not ch.isprintable():
            out.extend(f"\\{byte:03o}" for byte in ch.encode("utf-8"))
        else:
            out.append(ch)
    return "".join(out)


def _unvis(text: str) -> str:
    def replace(match: re.Match[bytes]) -> bytes:
        code = match.group(1)
        if code == b"\\":
            return b"\\"
        return bytes([int(code, 8)])

    return _VIS_ESCAPE.sub(replace, text.encode("utf-8")).decode(
        "utf-8", errors="replace"
    )


class CommandHistory:
    """Numbered command history keeping the most recent entries.

    Event numbers start at 1 and keep growing as old entries are dropped.
    An entry equal to the one just before it is not added again.
    """

    MAGIC = "_HiStOrY_V2_"

    def __init__(self, max_size: int = 100) -> None:
        if max_size < 1:
            raise ValueError(f"history size must be positive: {max_size}")
        self._events: deque[tuple[int, str]] = deque(maxlen=max_size)
        self._next_number = 1

    def __iter__(self) -> Iterator[tuple[int, str]]:
        """(number, line) pairs, oldest first."""
        return iter(list(self._events))

    def __len__(self) -> int:
        return len(self._events)

    def add(self, line: str) -> int:
        """Record a line; returns its event number."""
        if self._events and self._events[-1][1] == line:
            return self._events[-1][0]
        number = self._next_number
        self._next_number += 1
        self._events.append((number, line))
        return number

    def recall(self, number: int) -> str:
        """The line of the given event; KeyError when it is not held."""
        for event_number, line in self._events:
            if event_number == number:
                return line
        raise KeyError(number)

    def load(self, path: str | PathLike[str]) -> None:
        """Append the entries saved in a history file."""
        lines = Path(path).read_text(encoding="utf-8").splitlines()
        if not lines or lines[0] != self.MAGIC:
            raise ValueError(f"not a history file: {path}")
        for line in lines[1:]:
            self.add(_unvis(line))

    def save(self, path: str | PathLike[str]) -> None:
        """Write the entries to a history file."""
        body = [self.MAGIC, *(_vis(line) for _, line in self._events)]
        Path(path).write_text("\n".join(body) + "\n", encoding="utf-8")


@dataclass
class _CommandArgs:
    terminal: Terminal
    argv: list[str] = field(default_factory=list)


def _echo_usage(args: _CommandArgs) -> None:
    name = args.argv[0] if args.argv else ""
    command = args.terminal.commands.get(name)
    if command is not None:
        args.terminal._warn(f"Usage: {command.short_usage}")


def _quit_command(args: _CommandArgs) -> bool:
    term = args.terminal
    term._warn("Quitting. Do you really want to proceed: [Y/n]: ", end="")
    answer = term.stdin.readline().rstrip("\r\n")
    return answer != "Y"


def _help_command(args: _CommandArgs) -> bool:
    term = args.terminal
    header = f"{PACKAGE_NAME} help"
    lines = ["", header, "-" * len(header), "o Available Commands"]
    lines.extend(f"- {name} : {usage}" for name, usage in term.command_pairs())
    lines.append("")
    term.stdout.write("\n".join(lines) + "\n")
    return True


def _modes_command(args: _CommandArgs) -> bool:
    return True


def _setenv_command(args: _CommandArgs) -> bool:
    if len(args.argv) != 3:
        _echo_usage(args)
        return True
    _, name, value = args.argv
    args.terminal.environ[name] = value
    return True


def _unsetenv_command(args: _CommandArgs) -> bool:
    if len(args.argv) != 2:
        _echo_usage(args)
        return True
    name = args.argv[1]
    if not name or "=" in name:
        args.terminal._warn("unsetenv Failed: Invalid argument")
        return True
    args.terminal.environ.pop(name, None)
    return True


def _history_command(args: _CommandArgs) -> bool:
    term = args.terminal
    for number, line in term.history:
        term.stdout.write(f"{number:4d} {line}\n")
    return True


def _launch_command(args: _CommandArgs) -> bool:
    term = args.terminal
    try:
        app_argv, launcher_argv = parse_launch(args.argv)
    except LaunchUsageError as err:
        if str(err):
            term._error(str(err))
        _echo_usage(args)
        return True
    try:
        term.launcher(app_argv, launcher_argv)
    except FileNotFoundError:
        term._error(not_in_path_message(launcher_argv[0]))
    except KeyboardInterrupt:
        term.stdout.write("\n")
    return True


def _clear_command(args: _CommandArgs) -> bool:
    args.terminal.stdout.write(_CLEAR_SCREEN)
    return True


def _env_command(args: _CommandArgs) -> bool:
    if len(args.argv) != 1:
        _echo_usage(args)
        return True
    term = args.terminal
    for name in sorted(term.environ):
        term.stdout.write(f"{name}={term.environ[name]}\n")
    return True


def _build_commands() -> list[TermCommand]:
    return [
        TermCommand("quit", "exit, q", "quit", "quit Help", _quit_command),
        TermCommand("help", "?", "help", "help Help", _help_command),
        TermCommand("launch", "l", _LAUNCH_USAGE, "launch Help", _launch_command),
        TermCommand("modes", "", "modes", "modes Help", _modes_command),
        TermCommand("history", "hist, h", "history", "history Help", _history_command),
        TermCommand("setenv", "", "setenv ENV_VAR VAL", "setenv Help", _setenv_command),
        TermCommand("unsetenv", "", "unsetenv ENV_VAR", "unsetenv Help", _unsetenv_command),
        TermCommand("clear", "", "clear", "clear", _clear_command),
        TermCommand("env", "", "env", "env Help", _env_command),
    ]


def _run_launcher(app_argv: list[str], launcher_argv: list[str]) -> int:
    return subprocess.call([*launcher_argv, *app_argv])


class Terminal(UserInterface):
    """Line-oriented command interpreter with numbered history and !N recall."""

    PROMPT = f"({PACKAGE_NAME}) "
    HISTORY_SIZE = 100
    HISTORY_FILE_NAME = "history"

    def __init__(
        self,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        environ: MutableMapping[str, str] | None = None,
        launcher: Launcher | None = None,
        history_file: str | PathLike[str] | None = None,
    ) -> None:
        super().__init__()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.environ: MutableMapping[str, str] = (
            os.environ if environ is None else environ
        )
        self.launcher: Launcher = launcher if launcher is not None else _run_launcher
        self.history_file = Path(history_file) if history_file is not None else None
        self.history = CommandHistory(self.HISTORY_SIZE)
        self.commands = TermCommands(_build_commands())
        self._pending: deque[str] = deque()

    def _warn(self, text: str, end: str = "\n") -> None:
        self.stderr.write(text + end)
        self.stderr.flush()

    def _error(self, text: str) -> None:
        self._warn(text)

    def init(self, args: Sequence[str]) -> None:
        """Remember the arguments and load the saved history, if any."""
        self.args = list(args)
        if self.history_file is not None and self.history_file.exists():
            try:
                self.history.load(self.history_file)
            except (OSError, ValueError):
                self._warn(
                    f"Command history couldn't be loaded from: {self.history_file}"
                )

    def interact(self) -> None:
        """Read and run commands until quit is confirmed or input ends."""
        try:
            self._repl()
        finally:
            self._save_history()

    def quit(self) -> bool:
        """Ask for confirmation; True when the user agreed to quit."""
        return not _quit_command(_CommandArgs(self, []))

    def command_pairs(self) -> list[tuple[str, str]]:
        """Sorted (command, short usage) pairs."""
        return self.commands.command_pairs()

    def evaluate_input(self, argv: Sequence[str]) -> bool:
        """Run one tokenised command line; returns whether to keep reading."""
        args = list(argv)
        if not args:
            raise ValueError("empty command line")
        first = args[0]
        recalled = self._history_recall(first)
        if recalled is not None:
            if recalled:
                self._pending.append(recalled.replace("\n", ""))
            return True
        command = self.commands.get(first)
        if command is None:
            self._error(f"'{first}' is not a valid command. Try 'help'.")
            return True
        return command.execute(_CommandArgs(self, args))

    def _history_recall(self, first: str) -> str | None:
        if not first.startswith("!"):
            return None
        try:
            number = int(first[1:])
        except ValueError:
            return None
        try:
            return self.history.recall(number)
        except KeyError:
            self._error(f"{first}: event not found")
            return ""

    def _read_line(self) -> str:
        self.stdout.write(self.PROMPT)
        if self._pending:
            line = self._pending.popleft()
            self.stdout.write(line + "\n")
            self.stdout.flush()
            return line + "\n"
        self.stdout.flush()
        return self.stdin.readline()

    def _repl(self) -> None:
        buffer = ""
        keep_going = True
        while keep_going:
            try:
                line = self._read_line()
            except KeyboardInterrupt:
                self.stdout.write("\n")
                buffer = ""
                continue
            if not line:
                break
            buffer += line
            try:
                argv = shlex.split(buffer)
            except ValueError:
                # Unfinished quoting: keep reading.
                continue
            entry, buffer = buffer.rstrip("\n"), ""
            if not argv:
                continue
            keep_going = self.evaluate_input(argv)
            if not entry.startswith("!"):
                self.history.add(entry)

    def _save_history(self) -> None:
        if self.history_file is None:
            return
        try:
            self.history.save(self.history_file)
        except OSError:
            self._warn(f"Command history couldn't be saved to: {self.history_file}")