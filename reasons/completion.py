"""Tab completion for the interactive shell."""

from __future__ import annotations

import enum
import fnmatch
import os

REPL_COMMANDS = (
    "help", "exit", "quit", "verbose", "debug", "run", "load", "save",
    "env", "history", "clear", "license", "version", "reset", "coverage", "profile",
)

DEBUGGER_COMMANDS = (
    "help", "break", "run", "step", "next", "continue", "print", "watch",
    "backtrace", "coverage", "explain", "history", "quit", "list", "where",
)

LANGUAGE_KEYWORDS = (
    "if", "else", "match", "case", "default", "let", "fn", "return",
    "true", "false", "null", "import", "export", "for", "while", "break",
    "continue", "try", "catch", "throw", "in", "as", "is", "not", "and", "or",
)

_FILE_COMMANDS = (".load", ".save", "load", "save")
_NODE_COMMANDS = ("break", "watch")


class CompletionContext(enum.Enum):
    """What kind of word is being completed."""

    REPL_COMMAND = "repl_command"
    DEBUGGER_COMMAND = "debugger_command"
    EXPRESSION = "expression"
    FILENAME = "filename"
    NODE_ID = "node_id"


def detect_context(line, start, debug_mode=False) -> CompletionContext:
    """Decide what to complete from the whole line and the word's start offset."""
    if start == 0 and line.startswith("."):
        return CompletionContext.REPL_COMMAND

    if debug_mode:
        first_space = line.find(" ")
        if first_space == -1 or first_space > start:
            return CompletionContext.DEBUGGER_COMMAND
        if line[:first_space] in _NODE_COMMANDS:
            return CompletionContext.NODE_ID

    for command in _FILE_COMMANDS:
        found = line.find(command)
        if found != -1 and found <= start:
            after = found + len(command)
            while line[after:after + 1] == " ":
                after += 1
            if after <= start:
                return CompletionContext.FILENAME

    return CompletionContext.EXPRESSION


def complete_words(text, words) -> list[str]:
    """Words that begin with ``text``, in their given order."""
    return [word for word in words if word.startswith(text)]


def complete_filename(text) -> list[str]:
    """Directory entries whose names match ``text`` taken as a glob pattern."""
    slash = text.rfind("/")
    if slash != -1:
        dir_path, pattern = text[:slash + 1], text[slash + 1:]
    else:
        dir_path, pattern = "./", text
    try:
        entries = sorted(os.scandir(dir_path), key=lambda entry: entry.name)
    except OSError:
        return []
    matches = []
    for entry in entries:
        if not pattern.startswith(".") and entry.name.startswith("."):
            continue
        if fnmatch.fnmatchcase(entry.name, pattern):
            full = dir_path + entry.name
            if entry.is_dir():
                full += "/"
            matches.append(full)
    return matches


class Completer:
    """Context-aware completer bound to a shell and, optionally, tree node ids."""

    def __init__(self, repl=None, node_ids=None):
        self.repl = repl
        self.node_ids = node_ids
        self._matches: list[str] = []

    def _node_ids(self) -> list[str]:
        source = self.node_ids
        if source is None:
            return []
        if callable(source):
            source = source()
        return list(source or ())

    def complete(self, text, start, line) -> list[str]:
        """All candidates for ``text`` beginning at ``start`` within ``line``."""
        if self.repl is None:
            return []
        context = detect_context(line, start, bool(getattr(self.repl, "debug_mode", False)))
        if context is CompletionContext.REPL_COMMAND:
            return complete_words(text, REPL_COMMANDS)
        if context is CompletionContext.DEBUGGER_COMMAND:
            return complete_words(text, DEBUGGER_COMMANDS)
        if context is CompletionContext.FILENAME:
            return complete_filename(text)
        if context is CompletionContext.NODE_ID:
            return [node for node in self._node_ids() if node and node.startswith(text)]
        keywords = complete_words(text, LANGUAGE_KEYWORDS)
        variables = complete_words(text, self.repl.variable_names())
        return keywords + variables

    def readline_hook(self, text, state):
        """Completion function in the form the readline module expects."""
        if state == 0:
            import readline

            line = readline.get_line_buffer()
            start = readline.get_begidx()
            self._matches = self.complete(text, start, line)
        if state < len(self._matches):
            return self._matches[state]
        return None