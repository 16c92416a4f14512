# mshell

`mshell` is the execution core of a small POSIX-style command shell. It
takes commands that are already split into words and runs them: builtins
in the shell itself, everything else as child processes joined by pipes.

## Modules

- **`mshell.environment`**: `Environment`, an ordered list of `NAME` or
  `NAME=value` entries with `get`, `set`, `export`, `unset`, `entries`
  and `export_listing` (the sorted `declare -x` lines that `export`
  prints with no arguments). It can be iterated and has a length.
  `is_valid_name` checks a name the way `unset` does,
  `is_valid_export_identifier` checks the part before `=` the way
  `export` does, and `var_name` returns that part.
- **`mshell.diagnostics`**: `ErrorKind` and `format_message`, which
  builds messages such as `minishell: cd: HOME not set`; `report` writes
  one to standard error (or a given stream).
- **`mshell.command`**: the `Command` dataclass (`argv`, `infile`,
  `outfile` descriptors, `skip`) and `ShellState` (`env`, `exit_code`,
  `exit_flag`, `commands`). `prepare_assignments` moves leading
  `NAME=value` words of every command into the environment; a command
  left with no words is marked `skip` and the status becomes 0.
  `is_assignment_word` tells whether a word has that form.
- **`mshell.builtins`**: `echo` (leading `-n`, `-nnn`, ... drop the
  newline), `cd`, `pwd`, `export_builtin`, `unset_builtin`, `print_env`
  and `exit_builtin`, plus `clear` and `:` through `run_builtin`.
  `is_builtin` tells whether a name is a builtin. `run_builtin` runs one
  against a `ShellState`, writing to the command's `outfile` when it has
  one (an `infile` is simply closed), and stores the status.
  `parse_exit_status` turns the argument of `exit` into a status in
  0–255 and raises `ValueError` for non-numeric or out-of-range text.
- **`mshell.pathsearch`**: `find_command` searches `PATH` for a name
  without `/`; `resolve_command` also checks that the result exists, is
  not a directory and is executable. Both raise `CommandNotRunnable`,
  whose `message` and `status` (127 or 126) say why. `check_single_dot`
  rejects a lone `.` with status 2.
- **`mshell.heredoc`**: `read_heredoc` collects lines up to a delimiter
  from a reader function (default: `input`), passing each through an
  optional expander; end of input ends the body with a warning.
  `open_heredoc` does the same and returns a read-only file descriptor
  on the body, suitable as a `Command.infile`. A `KeyboardInterrupt`
  while reading becomes `HeredocInterrupted` (status 130).
- **`mshell.pipeline`**: `execute_pipeline` applies assignments, runs
  every command of `state.commands` connected by pipes, waits for them
  and stores the status of the last one. A lone builtin runs in the shell
  itself, so `cd`, `export` and `exit` affect the session; builtins
  inside a longer pipeline run on a copy of the environment.
  `exit_status_from_returncode` maps a signal death to `128 + n`.
- **`mshell.shell`**: `Shell` reads a line, rejects unclosed quotes
  (status 2), parses it, executes it and repeats until `exit` or end of
  input; `run` returns the final status.

## Example

```python
from mshell.environment import Environment, is_valid_name

env = Environment(["HOME=/home/user", "PATH=/usr/bin:/bin"])
env.export("GREETING=hello")
env.set("EDITOR", "vi")

print(env.get("GREETING"))      # hello
env.unset("EDITOR")
print(is_valid_name("2BAD"))    # False

for line in env.export_listing():
    print(line)
```

```python
import sys
from mshell.builtins import echo, parse_exit_status

echo(["echo", "-n", "no", "newline"], sys.stdout)
print(parse_exit_status("300"))  # 44
```

## Running a shell

`Shell(state, parse, read_line)` takes all three arguments optionally.
`parse(line, state)` returns the commands of one pipeline (or `None`);
`read_line(prompt)` returns a line or `None` at end of input.

```python
import os
from mshell.command import Command, ShellState
from mshell.environment import Environment
from mshell.shell import Shell

def parse(line, state):
    return [Command(argv=part.split()) for part in line.split("|")]

state = ShellState(env=Environment(f"{k}={v}" for k, v in os.environ.items()))
status = Shell(state, parse).run()
```

## What it does not do

There is no full command-line parser. The default parser of `Shell` only
splits a line on whitespace into a single command: it does not remove
quotes, expand `$` variables or `~`, or recognise `|`, `<`, `>`, `>>` or
`<<`. Supply your own `parse` function for that, setting `infile` and
`outfile` on the commands (for example from `open_heredoc`). There is no
line editing or history, and no installed command; `cd -` always reports
that `OLDPWD` is not set.

## Exit statuses

`0` on success, `1` for builtin errors, `2` for an unclosed quote or a
lone `.`, `126` for a command that is found but cannot be executed, `127`
for a command that is not found, `130` for an interrupted here-document,
and `128 + n` for a command killed by signal `n`.