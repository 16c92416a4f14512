"""Built-in commands and their dispatch."""

from __future__ import annotations

import os
import sys
from typing import Callable, Iterable, Sequence, TextIO

from .command import Command, ShellState
from .diagnostics import ErrorKind, report
from .environment import Environment, is_valid_export_identifier, is_valid_name

BUILTIN_NAMES = frozenset(
    {"echo", "cd", "pwd", "export", "unset", "env", "exit", "clear", ":"}
)

_CLEAR_SEQUENCE = "\033[2J\033[H"
_BLANKS = "\t\n\v\f\r "
_WORD_BITS = 64
_LONG_MAX = 2**63 - 1


def _stream(stream: TextIO | None, default: TextIO) -> TextIO:
    return stream if stream is not None else default


def _is_n_flag(word: str) -> bool:
    return len(word) > 1 and word[0] == "-" and set(word[1:]) == {"n"}


def echo(args: Sequence[str], out: TextIO | None = None) -> int:
    """Print the arguments separated by spaces; leading -n flags drop the newline."""
    out = _stream(out, sys.stdout)
    words = list(args[1:])
    newline = True
    while words and _is_n_flag(words[0]):
        newline = False
        words.pop(0)
    out.write(" ".join(words))
    if newline:
        out.write("\n")
    out.flush()
    return 0


def print_env(env: Iterable[str], out: TextIO | None = None) -> int:
    """Print every environment entry on its own line."""
    out = _stream(out, sys.stdout)
    for entry in env:
        out.write(entry + "\n")
    out.flush()
    return 0


def parse_exit_status(text: str) -> int:
    """Turn the argument of ``exit`` into a status in 0..255.

    Raises ValueError when the argument is not an acceptable number.
    """
    rest = text.lstrip(_BLANKS)
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    digits_end = 0
    while digits_end < len(rest) and rest[digits_end].isascii() and rest[digits_end].isdigit():
        digits_end += 1
    digits = rest[:digits_end]
    after = rest[digits_end:]
    trailing = len(after) - len(after.lstrip(_BLANKS))
    leftover = after[trailing:]
    value = int(digits) % 2**_WORD_BITS if digits else 0
    if negative:
        overflow = (value - 1) % 2**_WORD_BITS > _LONG_MAX
    else:
        overflow = value > _LONG_MAX
    if leftover or len(digits) + trailing > 20 or overflow:
        raise ValueError(f"numeric argument required: {text!r}")
    signed = -value if negative else value
    return signed % 256


def exit_builtin(
    state: ShellState,
    args: Sequence[str],
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run ``exit``: set the exit status and ask the shell to stop."""
    out = _stream(out, sys.stdout)
    out.write("exit\n")
    out.flush()
    status = state.exit_code
    if len(args) > 1:
        try:
            status = parse_exit_status(args[1])
        except ValueError:
            report(ErrorKind.NUMERIC_ARG, "exit", args[1], stream=err)
            status = 255
    if len(args) > 2:
        report(ErrorKind.TOO_MANY_ARGS, "exit", stream=err)
        state.exit_code = 1
        return 1
    state.exit_code = status
    state.exit_flag = True
    return status


def pwd(out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print the current working directory."""
    out = _stream(out, sys.stdout)
    try:
        cwd = os.getcwd()
    except OSError as exc:
        report(ErrorKind.GENERAL, "pwd", errno_value=exc.errno or 0, stream=err)
        return 1
    out.write(cwd + "\n")
    out.flush()
    return 0


def _current_dir(err: TextIO | None) -> str | None:
    try:
        return os.getcwd()
    except OSError as exc:
        report(ErrorKind.GENERAL, "cd", "getcwd", exc.errno or 0, stream=err)
        return None


def _change_dir(path: str, err: TextIO | None) -> bool:
    try:
        os.chdir(path)
    except OSError as exc:
        report(ErrorKind.CHDIR, "cd", path, exc.errno or 0, stream=err)
        return False
    return True


def cd(args: Sequence[str], env: Environment, err: TextIO | None = None) -> int:
    """Change directory and update OLDPWD and PWD."""
    if env is None or len(env) == 0:
        report(ErrorKind.ENV_NOT_SET, "cd", stream=err)
        return 1
    old_pwd = _current_dir(err)
    if old_pwd is None:
        return 1
    if len(args) < 2:
        home = env.get("HOME")
        if home is None:
            report(ErrorKind.HOME_NOT_SET, "cd", stream=err)
            return 1
        if not _change_dir(home, err):
            return 1
    elif len(args) > 2:
        report(ErrorKind.TOO_MANY_ARGS, "cd", stream=err)
        return 1
    elif args[1] == "-":
        report(ErrorKind.OLDPWD_NOT_SET, "cd", stream=err)
        return 1
    elif not _change_dir(args[1], err):
        return 1
    new_pwd = _current_dir(err)
    if new_pwd is None:
        return 1
    env.set("OLDPWD", old_pwd)
    env.set("PWD", new_pwd)
    return 0


def export_builtin(
    args: Sequence[str],
    env: Environment,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run ``export``: list the environment or store NAME[=value] entries."""
    if len(args) < 2:
        out = _stream(out, sys.stdout)
        for line in env.export_listing():
            out.write(line + "\n")
        out.flush()
        return 0
    status = 0
    for arg in args[1:]:
        if not is_valid_export_identifier(arg):
            report(ErrorKind.INVALID_IDENTIFIER, "export", arg, stream=err)
            status = 1
            continue
        env.export(arg)
    return status


def unset_builtin(
    args: Sequence[str], env: Environment, err: TextIO | None = None
) -> int:
    """Run ``unset``: remove each named variable; bad names are reported."""
    for name in args[1:]:
        if is_valid_name(name):
            env.unset(name)
        else:
            report(ErrorKind.INVALID_IDENTIFIER, "unset", name, stream=err)
    return 0


def is_builtin(name: str | None) -> bool:
    """Whether ``name`` is one of the shell's built-in commands."""
    return name in BUILTIN_NAMES


def _clear(out: TextIO) -> int:
    out.write(_CLEAR_SEQUENCE)
    out.flush()
    return 0


def _dispatch(
    name: str,
    state: ShellState,
    argv: list[str],
    out: TextIO,
    err: TextIO | None,
) -> int | None:
    handlers: dict[str, Callable[[], int]] = {
        "echo": lambda: echo(argv, out),
        "cd": lambda: cd(argv, state.env, err),
        "pwd": lambda: pwd(out, err),
        "export": lambda: export_builtin(argv, state.env, out, err),
        "unset": lambda: unset_builtin(argv, state.env, err),
        "env": lambda: print_env(state.env, out),
        "clear": lambda: _clear(out),
        ":": lambda: 0,
    }
    handler = handlers.get(name)
    return handler() if handler is not None else None


def run_builtin(
    state: ShellState,
    command: Command,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run a built-in in the shell itself, honouring its redirections.

    Returns the resulting exit status, which is also stored in ``state``.
    """
    out = _stream(out, sys.stdout)
    if command.infile is not None:
        # Built-ins never read their input; the descriptor is just released.
        try:
            os.close(command.infile)
        except OSError:
            pass
        command.infile = None

    target = out
    redirected: TextIO | None = None
    if command.outfile is not None:
        fd = command.outfile
        command.outfile = None
        try:
            redirected = os.fdopen(fd, "w", closefd=True)
        except OSError:
            try:
                os.close(fd)
            except OSError:
                pass
            state.exit_code = 1
            return state.exit_code
        target = redirected

    name = command.argv[0] if command.argv else ""
    try:
        status = _dispatch(name, state, command.argv, target, err)
    finally:
        if redirected is not None:
            redirected.close()
    if status is not None:
        state.exit_code = status
    elif name == "exit":
        exit_builtin(state, command.argv, out, err)
    return state.exit_code