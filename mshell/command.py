"""Parsed commands, shell state and leading variable assignments."""

from __future__ import annotations

import string
from dataclasses import dataclass, field

from .environment import Environment

_NAME_START = frozenset(string.ascii_letters + "_")
_NAME_CHARS = frozenset(string.ascii_letters + string.digits + "_")


@dataclass
class Command:
    """One simple command of a pipeline."""

    argv: list[str] = field(default_factory=list)
    infile: int | None = None
    outfile: int | None = None
    skip: bool = False


@dataclass
class ShellState:
    """State shared by the whole shell session."""

    env: Environment = field(default_factory=Environment)
    exit_code: int = 0
    exit_flag: bool = False
    commands: list[Command] = field(default_factory=list)


def is_assignment_word(word: str) -> bool:
    """Whether ``word`` has the form NAME=value."""
    name, sep, _ = word.partition("=")
    if not sep or not name or name[0] not in _NAME_START:
        return False
    return all(ch in _NAME_CHARS for ch in name)


def prepare_assignments(state: ShellState) -> None:
    """Apply and strip leading NAME=value words of every command.

    The assignments go into the shell's environment. A command left with
    no words is marked to be skipped and the exit status becomes 0.
    """
    for command in state.commands:
        count = 0
        for word in command.argv:
            if not is_assignment_word(word):
                break
            state.env.export(word)
            count += 1
        if count == 0:
            continue
        del command.argv[:count]
        if not command.argv:
            command.skip = True
            state.exit_code = 0