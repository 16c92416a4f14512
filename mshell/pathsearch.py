"""Locating the program a command names and checking it can be run."""

from __future__ import annotations

import errno
import os
import stat
from typing import Sequence

from .diagnostics import ErrorKind, format_message
from .environment import Environment

STATUS_NOT_FOUND = 127
STATUS_NOT_EXECUTABLE = 126
STATUS_USAGE = 2


class CommandNotRunnable(Exception):
    """A command cannot be started; carries its message and exit status."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.message = message
        self.status = status

    @classmethod
    def from_kind(
        cls,
        kind: ErrorKind,
        status: int,
        command: str | None = None,
        argument: str | None = None,
        errno_value: int = 0,
    ) -> "CommandNotRunnable":
        return cls(format_message(kind, command, argument, errno_value), status)


def _search_path(name: str, path_value: str) -> str | None:
    for directory in path_value.split(":"):
        if not directory:
            continue
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.X_OK):
            return candidate
    return None


def find_command(env: Environment, name: str) -> str:
    """Return the path that runs ``name``, searching PATH when it has no '/'.

    Raises CommandNotRunnable (status 127) when nothing is found.
    """
    if not name:
        raise CommandNotRunnable.from_kind(
            ErrorKind.CMD_NOT_FOUND, STATUS_NOT_FOUND, name
        )
    if "/" in name:
        return name
    path_value = env.get("PATH")
    if not path_value:
        raise CommandNotRunnable.from_kind(
            ErrorKind.NO_SUCH_FILE, STATUS_NOT_FOUND, name
        )
    found = _search_path(name, path_value)
    if found is None:
        raise CommandNotRunnable.from_kind(
            ErrorKind.CMD_NOT_FOUND, STATUS_NOT_FOUND, name
        )
    return found


def _ensure_executable(path: str) -> None:
    if not os.access(path, os.F_OK):
        raise CommandNotRunnable.from_kind(
            ErrorKind.GENERAL, STATUS_NOT_FOUND, None, path, errno.ENOENT
        )
    try:
        info = os.stat(path)
    except OSError as exc:
        raise CommandNotRunnable.from_kind(
            ErrorKind.GENERAL, STATUS_NOT_EXECUTABLE, None, path, exc.errno or 0
        ) from exc
    if stat.S_ISDIR(info.st_mode):
        raise CommandNotRunnable.from_kind(
            ErrorKind.IS_DIRECTORY, STATUS_NOT_EXECUTABLE, path
        )
    if not os.access(path, os.X_OK):
        raise CommandNotRunnable.from_kind(
            ErrorKind.GENERAL, STATUS_NOT_EXECUTABLE, None, path, errno.EACCES
        )


def resolve_command(env: Environment, name: str) -> str:
    """Find ``name`` and make sure it is an executable regular file.

    Raises CommandNotRunnable with status 127 when it does not exist and
    126 when it is a directory or cannot be executed.
    """
    path = name if "/" in name else find_command(env, name)
    _ensure_executable(path)
    return path


def check_single_dot(argv: Sequence[str]) -> None:
    """Reject a lone '.' command, which needs a file argument (status 2)."""
    if not argv or argv[0] != ".":
        return
    raise CommandNotRunnable(
        ".: filename argument required\n.: usage: . filename [arguments]",
        STATUS_USAGE,
    )