# reasons

Building blocks for an interactive shell around the Reasons decision-tree
DSL, together with file and CSV helpers. The package is a library; it has
no modules beyond those listed here and needs nothing outside the standard
library.

| Module                | What it provides                                              |
|-----------------------|---------------------------------------------------------------|
| `reasons.history`     | `CommandHistory`: navigation, persistence, `!` expansion       |
| `reasons.prompt`      | `PromptGenerator`: prompt templates with `%` variables         |
| `reasons.completion`  | `Completer`: context-aware tab completion                      |
| `reasons.csv_io`      | `CsvParser`, `parse_all`, `parse_value`, `import_as_dataset`   |
| `reasons.fileio`      | cached reads, atomic writes, locks, checksums, listing         |

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Command history

```python
from reasons.history import CommandHistory

history = CommandHistory(max_size=1000)
history.add("x = 1")
history.add("y = 2")
history.expand("!!")      # -> "y = 2"
history.expand("!1")      # -> "x = 1"
history.expand("!x")      # -> "x = 1"  (newest command starting with "x")
history.previous()        # -> "y = 2"
history.save(".reasons_history")
```

`add` skips empty lines, lines starting with `!`, dot-commands other than
`.help`, `.env`, `.history`, `.license` and `.version`, and any command
already among the last five entries. It returns whether the command was
stored. Files are written as `timestamp|session|command` lines after a
few `#` header lines; `load` appends the entries of such a file, sorts
the entries newest first and returns `False` if the file does not exist.
`search`, `last`, `remove` and `format_stats` round out the class.

## Prompts

```python
from reasons.prompt import PromptGenerator, prompt_help

prompts = PromptGenerator()
prompts.configure_from_env()          # REASONS_PROMPT, REASONS_SECONDARY_PROMPT, REASONS_DEBUG_PROMPT
prompts.expand("%u@%h:%w [%n] %D> ", shell_state)
print(prompt_help())                  # every supported variable
```

`generate(state)` picks the secondary template while `state.input_buffer`
is non-empty, the debug template while `state.debug_mode` is true, and the
primary one otherwise; with `None` it returns `"> "`. The `state` object
only needs whichever of `line_count`, `last_error`, `current_script`,
`debug_mode` and `input_buffer` the template uses. `%g` and `%m` run
`git` when a `.git` directory is present and cache the answer for five
seconds; pass `git_runner=` to supply another way of running git.

## Tab completion

`Completer(state, node_ids=...)` returns candidates for a word from the
whole input line: dot-commands at the start of a line, debugger commands
or node identifiers when `state.debug_mode` is true, file names after
`load`/`save`, and otherwise language keywords followed by
`state.variable_names()`. `readline_hook` has the signature the
`readline` module's `set_completer` expects.

## CSV

```python
from reasons.csv_io import CsvOptions, CsvParser, parse_all, parse_value

rows = parse_all("data.csv")                        # header row skipped
rows = parse_all("data.tsv", CsvOptions(delimiter="\t"))
parse_value("42")       # -> 42
parse_value("2.5")      # -> 2.5
parse_value("true")     # -> True
parse_value("hello")    # -> "hello"

with CsvParser("data.csv") as parser:
    print(parser.header)
    for row in parser:
        ...
```

A blank line ends the data. Rows whose width differs from the header are
reported to the `error_handler` given to `CsvParser`, or logged as a
warning. `import_as_dataset` returns a `Dataset` whose columns are named
`col_0`, `col_1`, and so on. Failure to open a file raises `CsvError`.

## File helpers

```python
from reasons.fileio import FileCache, FileLock, LockType, checksum, read_file, write_file

cache = FileCache()
write_file("out/data.txt", "hello", atomic=True, cache=cache)   # creates out/
data = read_file("out/data.txt", cache)                          # b"hello"
checksum(data)                                                   # CRC-32

with FileLock("out/data.txt", LockType.WRITE):
    ...
```

`FileLock.acquire` does not block and returns `False` when the lock is
held elsewhere; entering the lock as a context manager raises
`FileIOError` instead. `map_file`, `list_directory`, `move_file`,
`remove_file`, `file_exists` and `modification_time` complete the set.

## What this package does not do

There is no interactive shell and no command to start one: nothing here
reads lines from a terminal, dispatches dot-commands or runs a main loop.
The package also has no parser or evaluator for the DSL itself, so it
cannot run decision trees or scripts. The pieces above are meant to be
wired into a shell that supplies those parts.