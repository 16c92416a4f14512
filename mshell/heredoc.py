"""Reading here-documents and handing them to commands as input."""

from __future__ import annotations

import os
import tempfile
from typing import Callable

from .diagnostics import ErrorKind, report

PROMPT = "> "
INTERRUPT_STATUS = 130

Reader = Callable[[str], "str | None"]
Expander = Callable[[str], str]


class HeredocInterrupted(Exception):
    """Reading a here-document was interrupted by the user."""

    def __init__(self) -> None:
        super().__init__("here-document interrupted")
        self.status = INTERRUPT_STATUS


def _default_reader(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def read_heredoc(
    delimiter: str,
    reader: Reader | None = None,
    expander: Expander | None = None,
) -> str:
    """Read lines until ``delimiter`` and return the body, one line per '\\n'.

    ``reader`` is called with the prompt and returns a line or None at end
    of input; end of input ends the body with a warning. Each line goes
    through ``expander`` when one is given. A KeyboardInterrupt from the
    reader raises HeredocInterrupted.
    """
    read = reader if reader is not None else _default_reader
    lines: list[str] = []
    while True:
        try:
            line = read(PROMPT)
        except KeyboardInterrupt as exc:
            raise HeredocInterrupted() from exc
        if line is None:
            report(ErrorKind.HEREDOC_EOF, argument=delimiter)
            break
        if line == delimiter:
            break
        lines.append(expander(line) if expander is not None else line)
    return "".join(line + "\n" for line in lines)


def open_heredoc(
    delimiter: str,
    reader: Reader | None = None,
    expander: Expander | None = None,
) -> int:
    """Read a here-document and return a read-only descriptor on its body.

    The body lives in an already unlinked temporary file.
    """
    body = read_heredoc(delimiter, reader, expander)
    write_fd, path = tempfile.mkstemp(prefix="minishell_heredoc_")
    try:
        with os.fdopen(write_fd, "w", encoding="utf-8") as handle:
            handle.write(body)
        return os.open(path, os.O_RDONLY)
    finally:
        os.unlink(path)