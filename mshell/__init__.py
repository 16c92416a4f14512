"""Execution core of a small interactive command shell."""

__version__ = "0.1.0"

__all__ = [
    "builtins",
    "command",
    "diagnostics",
    "environment",
    "heredoc",
    "pathsearch",
    "pipeline",
    "shell",
]