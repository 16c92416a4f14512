import io
import os

import pytest

from mshell.builtins import (
    cd,
    echo,
    exit_builtin,
    export_builtin,
    is_builtin,
    parse_exit_status,
    print_env,
    pwd,
    run_builtin,
    unset_builtin,
)
from mshell.command import Command, ShellState
from mshell.environment import Environment


def test_echo_plain():
    out = io.StringIO()
    assert echo(["echo", "hello", "world"], out) == 0
    assert out.getvalue() == "hello world\n"


def test_echo_no_args_prints_newline():
    out = io.StringIO()
    echo(["echo"], out)
    assert out.getvalue() == "\n"


def test_echo_n_flags():
    out = io.StringIO()
    echo(["echo", "-n", "-nnn", "a", "-n"], out)
    assert out.getvalue() == "a -n"


def test_echo_bad_flag_is_text():
    out = io.StringIO()
    echo(["echo", "-nx", "a"], out)
    assert out.getvalue() == "-nx a\n"


def test_echo_single_dash_is_text():
    out = io.StringIO()
    echo(["echo", "-", "b"], out)
    assert out.getvalue() == "- b\n"


def test_print_env():
    out = io.StringIO()
    env = Environment(["A=1", "B"])
    assert print_env(env, out) == 0
    assert out.getvalue().splitlines() == ["A=1", "B"]


@pytest.mark.parametrize("value", [0, 1, 42, 255])
def test_parse_exit_status_in_range(value):
    assert parse_exit_status(str(value)) == value


def test_parse_exit_status_wraps_invariant():
    for n in (256, 1000, 123456):
        assert parse_exit_status(str(n)) == parse_exit_status(str(n + 256))


def test_parse_exit_status_negative_one():
    assert parse_exit_status("-1") == 255


def test_parse_exit_status_whitespace():
    assert parse_exit_status("  +7  ") == 7


@pytest.mark.parametrize(
    "text", ["abc", "12a", "9223372036854775808", "1" * 21, "-", "-0"]
)
def test_parse_exit_status_errors(text):
    with pytest.raises(ValueError):
        parse_exit_status(text)


def test_exit_sets_flag_and_code():
    state = ShellState()
    out, err = io.StringIO(), io.StringIO()
    exit_builtin(state, ["exit", "3"], out, err)
    assert out.getvalue() == "exit\n"
    assert state.exit_flag is True
    assert state.exit_code == 3


def test_exit_without_args_keeps_code():
    state = ShellState(exit_code=5)
    exit_builtin(state, ["exit"], io.StringIO(), io.StringIO())
    assert state.exit_flag is True
    assert state.exit_code == 5


def test_exit_numeric_error():
    state = ShellState()
    err = io.StringIO()
    exit_builtin(state, ["exit", "zz"], io.StringIO(), err)
    assert state.exit_code == 255
    assert state.exit_flag is True
    assert "numeric argument required" in err.getvalue()


def test_exit_too_many_args():
    state = ShellState()
    err = io.StringIO()
    exit_builtin(state, ["exit", "1", "2"], io.StringIO(), err)
    assert state.exit_flag is False
    assert state.exit_code == 1
    assert "too many arguments" in err.getvalue()


def test_pwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    out = io.StringIO()
    assert pwd(out, io.StringIO()) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_cd_to_path_updates_vars(tmp_path, monkeypatch):
    start = tmp_path / "start"
    dest = tmp_path / "dest"
    start.mkdir()
    dest.mkdir()
    monkeypatch.chdir(start)
    before = os.getcwd()
    env = Environment(["X=1"])
    assert cd(["cd", str(dest)], env, io.StringIO()) == 0
    assert os.getcwd() == os.path.realpath(dest)
    assert env.get("OLDPWD") == before
    assert env.get("PWD") == os.getcwd()


def test_cd_home(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    home = tmp_path / "home"
    home.mkdir()
    env = Environment([f"HOME={home}"])
    assert cd(["cd"], env, io.StringIO()) == 0
    assert os.getcwd() == os.path.realpath(home)


def test_cd_home_not_set(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    err = io.StringIO()
    assert cd(["cd"], Environment(["A=1"]), err) == 1
    assert "HOME not set" in err.getvalue()


def test_cd_empty_env():
    err = io.StringIO()
    assert cd(["cd", "/"], Environment(), err) == 1
    assert err.getvalue() != ""


def test_cd_dash_and_too_many(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    err = io.StringIO()
    assert cd(["cd", "-"], Environment(["A=1"]), err) == 1
    assert "OLDPWD not set" in err.getvalue()
    err = io.StringIO()
    assert cd(["cd", "a", "b"], Environment(["A=1"]), err) == 1
    assert err.getvalue() == "minishell: cd: too many arguments\n"


def test_cd_missing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = Environment(["A=1"])
    err = io.StringIO()
    assert cd(["cd", str(tmp_path / "nope")], env, err) == 1
    assert env.get("OLDPWD") is None
    assert os.getcwd() == os.path.realpath(tmp_path)


def test_export_sets_and_reports_invalid():
    env = Environment()
    err = io.StringIO()
    assert export_builtin(["export", "A=1", "1bad", "B"], env, io.StringIO(), err) == 1
    assert env.entries() == ["A=1", "B"]
    assert "not a valid identifier" in err.getvalue()


def test_export_listing():
    env = Environment(["B=2", "A"])
    out = io.StringIO()
    assert export_builtin(["export"], env, out, io.StringIO()) == 0
    assert out.getvalue().splitlines() == ["declare -x A", 'declare -x B="2"']


def test_unset():
    env = Environment(["A=1", "B=2"])
    err = io.StringIO()
    assert unset_builtin(["unset", "A", "9x"], env, err) == 0
    assert env.entries() == ["B=2"]
    assert "not a valid identifier" in err.getvalue()


@pytest.mark.parametrize(
    "name, expected",
    [("echo", True), ("cd", True), (":", True), ("clear", True), ("ls", False), (None, False)],
)
def test_is_builtin(name, expected):
    assert is_builtin(name) is expected


def test_run_builtin_sets_exit_code():
    state = ShellState(env=Environment(["A=1"]))
    out = io.StringIO()
    assert run_builtin(state, Command(argv=["export", "!"]), out, io.StringIO()) == 1
    assert state.exit_code == 1
    assert run_builtin(state, Command(argv=[":"]), out, io.StringIO()) == 0
    assert state.exit_code == 0


def test_run_builtin_env_and_clear():
    state = ShellState(env=Environment(["A=1"]))
    out = io.StringIO()
    run_builtin(state, Command(argv=["env"]), out, io.StringIO())
    assert out.getvalue() == "A=1\n"
    out = io.StringIO()
    run_builtin(state, Command(argv=["clear"]), out, io.StringIO())
    assert out.getvalue() == "\033[2J\033[H"


def test_run_builtin_redirects_output(tmp_path):
    path = tmp_path / "out.txt"
    fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644)
    state = ShellState()
    command = Command(argv=["echo", "hi"], outfile=fd)
    out = io.StringIO()
    assert run_builtin(state, command, out, io.StringIO()) == 0
    assert path.read_text() == "hi\n"
    assert out.getvalue() == ""
    assert command.outfile is None


def test_run_builtin_exit_writes_to_original_out(tmp_path):
    path = tmp_path / "out.txt"
    fd = os.open(path, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, 0o644)
    state = ShellState()
    out = io.StringIO()
    run_builtin(state, Command(argv=["exit", "4"], outfile=fd), out, io.StringIO())
    assert out.getvalue() == "exit\n"
    assert path.read_text() == ""
    assert state.exit_flag is True
    assert state.exit_code == 4