"""The interactive read, parse and execute loop."""

from __future__ import annotations

import sys
from typing import Callable

from .command import Command, ShellState
from .diagnostics import ErrorKind, report
from .pipeline import execute_pipeline

PROMPT = "minishell$ "
STATUS_SYNTAX = 2

Parser = Callable[[str, ShellState], "list[Command] | None"]
LineReader = Callable[[str], "str | None"]


def _default_reader(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _split_words(line: str, state: ShellState) -> list[Command] | None:
    words = line.split()
    if not words:
        return None
    return [Command(argv=words)]


def _has_unclosed_quote(line: str) -> bool:
    quote: str | None = None
    for ch in line:
        if quote is None:
            if ch in ("'", '"'):
                quote = ch
        elif ch == quote:
            quote = None
    return quote is not None


class Shell:
    """A shell session driving reading, parsing and execution of lines.

    ``parse`` turns a line into commands (None on a syntax error it has
    already reported); by default words are split on whitespace into a
    single command. ``read_line`` takes the prompt and returns a line, or
    None at end of input.
    """

    def __init__(
        self,
        state: ShellState | None = None,
        parse: Parser | None = None,
        read_line: LineReader | None = None,
    ) -> None:
        self.state = state if state is not None else ShellState()
        self._parse = parse if parse is not None else _split_words
        self._read_line = read_line if read_line is not None else _default_reader

    def parse_line(self, line: str) -> bool:
        """Check and parse ``line`` into the session's commands."""
        if _has_unclosed_quote(line):
            report(ErrorKind.UNCLOSED_QUOTE)
            self.state.exit_code = STATUS_SYNTAX
            return False
        commands = self._parse(line, self.state)
        if not commands:
            self.state.commands = []
            return False
        self.state.commands = list(commands)
        return True

    def execute(self) -> bool:
        """Run the parsed commands; False when there is nothing to run."""
        if not self.state.commands:
            return False
        return execute_pipeline(self.state)

    def step(self) -> bool:
        """Handle one line of input; False once the shell should stop."""
        try:
            line = self._read_line(PROMPT)
        except KeyboardInterrupt:
            sys.stdout.write("\n")
            sys.stdout.flush()
            return True
        if line is None:
            sys.stdout.write("exit\n")
            sys.stdout.flush()
            self.state.exit_flag = True
            return False
        if line == "":
            return True
        try:
            if self.parse_line(line):
                self.execute()
        finally:
            self.state.commands = []
        return not self.state.exit_flag

    def run(self) -> int:
        """Loop until end of input or ``exit``; return the final exit status."""
        try:
            while self.step():
                pass
        finally:
            self.state.commands = []
        return self.state.exit_code