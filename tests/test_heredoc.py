import os

import pytest

from mshell.diagnostics import ErrorKind, format_message
from mshell.heredoc import HeredocInterrupted, open_heredoc, read_heredoc


def make_reader(lines, prompts=None):
    feed = iter(lines)

    def reader(prompt):
        if prompts is not None:
            prompts.append(prompt)
        return next(feed, None)

    return reader


def test_reads_until_delimiter():
    prompts = []
    reader = make_reader(["one", "two", "EOF", "after"], prompts)
    assert read_heredoc("EOF", reader) == "one\ntwo\n"
    assert prompts == ["> ", "> ", "> "]


def test_immediate_delimiter_gives_empty_body():
    assert read_heredoc("END", make_reader(["END"])) == ""


def test_delimiter_must_match_whole_line():
    reader = make_reader(["END ", " END", "END"])
    assert read_heredoc("END", reader) == "END \n END\n"


def test_expander_applied_to_body_not_delimiter():
    reader = make_reader(["a", "b", "stop"])
    body = read_heredoc("stop", reader, lambda line: line.upper())
    assert body == "A\nB\n"


def test_end_of_input_warns_and_keeps_body(capsys):
    body = read_heredoc("EOF", make_reader(["x"]))
    assert body == "x\n"
    captured = capsys.readouterr()
    assert captured.err == format_message(ErrorKind.HEREDOC_EOF, argument="EOF") + "\n"


def test_interrupt_raises():
    def reader(prompt):
        raise KeyboardInterrupt

    with pytest.raises(HeredocInterrupted) as info:
        read_heredoc("EOF", reader)
    assert info.value.status == 130


def test_open_heredoc_gives_readable_unlinked_descriptor():
    fd = open_heredoc("EOF", make_reader(["hello", "world", "EOF"]))
    try:
        assert os.fstat(fd).st_nlink == 0
        with os.fdopen(fd, "r", closefd=False) as handle:
            assert handle.read() == "hello\nworld\n"
    finally:
        os.close(fd)


def test_open_heredoc_interrupted_creates_nothing():
    def reader(prompt):
        raise KeyboardInterrupt

    with pytest.raises(HeredocInterrupted):
        open_heredoc("EOF", reader)


def test_open_heredoc_with_expander():
    fd = open_heredoc("x", make_reader(["$A", "x"]), lambda line: line.replace("$A", "val"))
    try:
        assert os.read(fd, 100) == b"val\n"
    finally:
        os.close(fd)