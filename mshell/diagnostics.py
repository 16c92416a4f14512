"""Error kinds and the messages the shell prints for them."""

from __future__ import annotations

import enum
import os
import sys
from typing import TextIO

SHELL_NAME = "minishell"


class ErrorKind(enum.Enum):
    """Kinds of errors the shell reports."""

    GENERAL = enum.auto()
    NUMERIC_ARG = enum.auto()
    TOO_MANY_ARGS = enum.auto()
    INVALID_IDENTIFIER = enum.auto()
    CMD_NOT_FOUND = enum.auto()
    NO_SUCH_FILE = enum.auto()
    IS_DIRECTORY = enum.auto()
    UNCLOSED_QUOTE = enum.auto()
    CHDIR = enum.auto()
    ENV_NOT_SET = enum.auto()
    HOME_NOT_SET = enum.auto()
    OLDPWD_NOT_SET = enum.auto()
    ALLOCATION = enum.auto()
    EXECVE = enum.auto()
    HEREDOC_EOF = enum.auto()
    PIPE = enum.auto()
    FORK = enum.auto()


_FIXED_TEXT = {
    ErrorKind.NUMERIC_ARG: "numeric argument required",
    ErrorKind.TOO_MANY_ARGS: "too many arguments",
    ErrorKind.INVALID_IDENTIFIER: "not a valid identifier",
    ErrorKind.CMD_NOT_FOUND: "command not found",
    ErrorKind.NO_SUCH_FILE: "No such file or directory",
    ErrorKind.IS_DIRECTORY: "Is a directory",
    ErrorKind.UNCLOSED_QUOTE: "syntax error: unclosed quote",
    ErrorKind.ENV_NOT_SET: "environment not set",
    ErrorKind.HOME_NOT_SET: "HOME not set",
    ErrorKind.OLDPWD_NOT_SET: "OLDPWD not set",
    ErrorKind.ALLOCATION: "memory allocation failed",
}

# Used when a system error kind is reported without an errno value.
_SYSTEM_FALLBACK = {
    ErrorKind.GENERAL: "error",
    ErrorKind.CHDIR: "cannot change directory",
    ErrorKind.EXECVE: "cannot execute",
    ErrorKind.PIPE: "pipe failed",
    ErrorKind.FORK: "fork failed",
}

_DEFAULT_COMMAND = {
    ErrorKind.PIPE: "pipe",
    ErrorKind.FORK: "fork",
}


def format_message(
    kind: ErrorKind,
    command: str | None = None,
    argument: str | None = None,
    errno_value: int = 0,
) -> str:
    """Build the one-line message for an error, without a trailing newline."""
    if kind is ErrorKind.HEREDOC_EOF:
        wanted = argument if argument is not None else ""
        return (
            f"{SHELL_NAME}: warning: here-document delimited by "
            f"end-of-file (wanted `{wanted}')"
        )
    parts = [SHELL_NAME]
    name = command if command is not None else _DEFAULT_COMMAND.get(kind)
    if name is not None:
        parts.append(name)
    if argument is not None:
        if kind is ErrorKind.INVALID_IDENTIFIER:
            parts.append(f"`{argument}'")
        else:
            parts.append(argument)
    if kind in _FIXED_TEXT:
        parts.append(_FIXED_TEXT[kind])
    elif errno_value:
        parts.append(os.strerror(errno_value))
    else:
        parts.append(_SYSTEM_FALLBACK[kind])
    return ": ".join(parts)


def report(
    kind: ErrorKind,
    command: str | None = None,
    argument: str | None = None,
    errno_value: int = 0,
    stream: TextIO | None = None,
) -> str:
    """Write the error message to ``stream`` (standard error by default)."""
    message = format_message(kind, command, argument, errno_value)
    target = stream if stream is not None else sys.stderr
    target.write(message + "\n")
    target.flush()
    return message