import pytest

from mshell.command import Command, ShellState, is_assignment_word, prepare_assignments
from mshell.environment import Environment


@pytest.mark.parametrize(
    "word, expected",
    [
        ("A=1", True),
        ("_a=", True),
        ("A=b=c", True),
        ("=1", False),
        ("1A=2", False),
        ("A", False),
        ("A-B=1", False),
        ("", False),
    ],
)
def test_is_assignment_word(word, expected):
    assert is_assignment_word(word) is expected


def test_leading_assignments_are_applied_and_removed():
    state = ShellState(
        env=Environment(["HOME=/h"]),
        commands=[Command(argv=["A=1", "echo", "B=2"])],
    )
    prepare_assignments(state)
    assert state.commands[0].argv == ["echo", "B=2"]
    assert state.commands[0].skip is False
    assert state.env.get("A") == "1"
    assert state.env.get("B") is None


def test_only_assignments_marks_skip_and_resets_status():
    state = ShellState(exit_code=5, commands=[Command(argv=["A=1", "B=2"])])
    prepare_assignments(state)
    assert state.commands[0].argv == []
    assert state.commands[0].skip is True
    assert state.exit_code == 0
    assert state.env.entries() == ["A=1", "B=2"]


def test_no_assignments_leaves_everything():
    state = ShellState(exit_code=3, commands=[Command(argv=["ls", "-l"])])
    prepare_assignments(state)
    assert state.commands[0].argv == ["ls", "-l"]
    assert state.commands[0].skip is False
    assert state.exit_code == 3
    assert len(state.env) == 0


def test_assignment_replaces_existing_variable():
    state = ShellState(
        env=Environment(["A=old"]), commands=[Command(argv=["A=new", "env"])]
    )
    prepare_assignments(state)
    assert state.env.entries() == ["A=new"]


def test_every_command_in_pipeline_is_processed():
    state = ShellState(
        commands=[Command(argv=["X=1", "cat"]), Command(argv=["Y=2", "wc"])]
    )
    prepare_assignments(state)
    assert [c.argv for c in state.commands] == [["cat"], ["wc"]]
    assert state.env.get("X") == "1"
    assert state.env.get("Y") == "2"


def test_empty_argv_is_not_skipped():
    state = ShellState(exit_code=4, commands=[Command()])
    prepare_assignments(state)
    assert state.commands[0].skip is False
    assert state.exit_code == 4