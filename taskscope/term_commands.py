"""Command registry for the interactive terminal and the UI interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any


class UserInterface(ABC):
    """A user interface: set up once, then interact until asked to quit."""

    def __init__(self) -> None:
        self.args: list[str] = []

    @abstractmethod
    def init(self, args: Sequence[str]) -> None:
        """Prepare the interface with the program arguments."""

    @abstractmethod
    def interact(self) -> None:
        """Run the interaction with the user."""

    @abstractmethod
    def quit(self) -> bool:
        """Request a quit; True when the request was accepted."""


def split_aliases(csv: str) -> list[str]:
    """Aliases from comma-separated text, each trimmed of whitespace."""
    parts = csv.split(",")
    if parts and parts[-1] == "":
        parts.pop()
    return [part.strip() for part in parts]


@dataclass(frozen=True)
class TermCommand:
    """A terminal command: its name, aliases, usage text and action.

    The callback returns whether the read-eval-print loop continues.
    """

    command: str
    aliases: str
    short_usage: str
    long_usage: str
    callback: Callable[[Any], bool]

    def execute(self, args: Any) -> bool:
        """Run the command; True means keep reading input."""
        return bool(self.callback(args))


class TermCommands:
    """Lookup of commands by name or alias."""

    def __init__(self, commands: Iterable[TermCommand]) -> None:
        self._by_name: dict[str, TermCommand] = {}
        for command in commands:
            self._by_name[command.command] = command
            for alias in split_aliases(command.aliases):
                self._by_name[alias] = command

    def get(self, name: str) -> TermCommand | None:
        """The command called name, or None."""
        return self._by_name.get(name)

    def available_commands(self) -> list[TermCommand]:
        """One entry per name or alias, in name order."""
        return [self._by_name[name] for name in sorted(self._by_name)]

    def command_pairs(self) -> list[tuple[str, str]]:
        """Distinct (command, short usage) pairs, sorted."""
        return sorted(
            {(cmd.command, cmd.short_usage) for cmd in self._by_name.values()}
        )