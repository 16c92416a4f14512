"""Running a parsed pipeline: built-ins in the shell, programs as child processes."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import threading
from dataclasses import dataclass, field

from .builtins import is_builtin, run_builtin
from .command import Command, ShellState, prepare_assignments
from .diagnostics import ErrorKind, report
from .environment import Environment
from .pathsearch import CommandNotRunnable, check_single_dot, resolve_command

SIGNAL_BASE = 128
STATUS_EXEC_FAILED = 126


def exit_status_from_returncode(returncode: int) -> int:
    """Shell exit status for a child's return code (signals map to 128 + n)."""
    if returncode >= 0:
        return returncode
    return SIGNAL_BASE - returncode


@dataclass
class _Stage:
    process: subprocess.Popen | None = None
    status: int = 0
    writers: list[threading.Thread] = field(default_factory=list)


def _close(fd: int | None) -> None:
    if fd is None:
        return
    try:
        os.close(fd)
    except OSError:
        pass


def _child_environment(env: Environment) -> dict[str, str]:
    result: dict[str, str] = {}
    for entry in env:
        name, sep, value = entry.partition("=")
        if sep:
            result[name] = value
    return result


def _write_all(fd: int, data: bytes) -> None:
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
    except OSError:
        pass


def _run_isolated_builtin(
    state: ShellState, command: Command, stdout_fd: int | None
) -> _Stage:
    """Run a built-in as a pipeline member; it cannot change the shell itself."""
    child = ShellState(
        env=Environment(state.env.entries()), exit_code=state.exit_code
    )
    isolated = Command(argv=list(command.argv))
    buffer = io.StringIO()
    try:
        cwd = os.getcwd()
    except OSError:
        cwd = None
    try:
        status = run_builtin(child, isolated, out=buffer)
    finally:
        if cwd is not None:
            try:
                os.chdir(cwd)
            except OSError:
                pass
    stage = _Stage(status=status)
    text = buffer.getvalue()
    if stdout_fd is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return stage
    # The reader may not exist yet, so the pipe is filled from a thread.
    writer = threading.Thread(
        target=_write_all, args=(os.dup(stdout_fd), text.encode()), daemon=True
    )
    writer.start()
    stage.writers.append(writer)
    return stage


def _launch(state: ShellState, command: Command, stdout_fd: int | None) -> _Stage:
    if command.skip or not command.argv:
        return _Stage(status=state.exit_code or 1)
    try:
        check_single_dot(command.argv)
    except CommandNotRunnable as exc:
        sys.stderr.write(exc.message + "\n")
        sys.stderr.flush()
        return _Stage(status=exc.status)
    if is_builtin(command.argv[0]):
        return _run_isolated_builtin(state, command, stdout_fd)
    try:
        path = resolve_command(state.env, command.argv[0])
    except CommandNotRunnable as exc:
        sys.stderr.write(exc.message + "\n")
        sys.stderr.flush()
        return _Stage(status=exc.status)
    try:
        process = subprocess.Popen(
            command.argv,
            executable=path,
            stdin=command.infile,
            stdout=stdout_fd,
            env=_child_environment(state.env),
            close_fds=True,
        )
    except OSError as exc:
        report(ErrorKind.EXECVE, argument=path, errno_value=exc.errno or 0)
        return _Stage(status=STATUS_EXEC_FAILED)
    return _Stage(process=process)


def _wait(process: subprocess.Popen) -> int:
    while True:
        try:
            return process.wait()
        except KeyboardInterrupt:
            continue


def _finish(stages: list[_Stage]) -> int:
    """Wait for every stage and return the status of the last one."""
    last_status = 0
    for index, stage in enumerate(stages):
        for writer in stage.writers:
            writer.join()
        if stage.process is None:
            status = stage.status
            returncode = None
        else:
            returncode = _wait(stage.process)
            status = exit_status_from_returncode(returncode)
        if index != len(stages) - 1:
            continue
        if returncode is not None and returncode < 0:
            signum = -returncode
            if signum == signal.SIGQUIT:
                sys.stdout.write("Quit: 3\n")
            elif signum == signal.SIGINT:
                sys.stdout.write("\n")
            sys.stdout.flush()
        last_status = status
    return last_status


def execute_pipeline(state: ShellState) -> bool:
    """Run ``state.commands`` as one pipeline and store the exit status.

    A lone built-in runs in the shell itself; everything else runs isolated,
    connected by pipes. Returns False when a pipe could not be created.
    """
    commands = state.commands
    if not commands:
        return True
    prepare_assignments(state)
    if len(commands) == 1 and not commands[0].argv:
        return True
    if len(commands) == 1 and is_builtin(commands[0].argv[0]):
        run_builtin(state, commands[0])
        return True

    sys.stdout.flush()
    sys.stderr.flush()
    stages: list[_Stage] = []
    completed = True
    for index, command in enumerate(commands):
        following = commands[index + 1] if index + 1 < len(commands) else None
        read_fd: int | None = None
        write_fd: int | None = None
        if following is not None:
            try:
                read_fd, write_fd = os.pipe()
            except OSError as exc:
                report(ErrorKind.PIPE, errno_value=exc.errno or 0)
                _close(command.infile)
                command.infile = None
                completed = False
                break
        stdout_fd = command.outfile if command.outfile is not None else write_fd
        stages.append(_launch(state, command, stdout_fd))
        _close(command.infile)
        command.infile = None
        _close(command.outfile)
        command.outfile = None
        _close(write_fd)
        if read_fd is not None and following is not None:
            if following.infile is None:
                following.infile = read_fd
            else:
                _close(read_fd)

    status = _finish(stages)
    if not completed:
        for command in commands:
            _close(command.infile)
            command.infile = None
        return False
    state.exit_code = status
    return True