"""Command history for the interactive shell: navigation, persistence and expansion."""

from __future__ import annotations

import logging
import os
import re
import time
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

HISTORY_FILE = ".reasons_history"
MAX_HISTORY_SIZE = 1000

_KEPT_DOT_COMMANDS = ("help", "env", "history", "license", "version")
_DUPLICATE_WINDOW = 5
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _leading_int(text: str) -> int:
    """Integer at the start of ``text``, or 0 when there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def should_save_command(command) -> bool:
    """Whether a line typed at the prompt belongs in the history."""
    if not command:
        return False
    if command.startswith("."):
        rest = command[1:]
        return any(rest.startswith(name) for name in _KEPT_DOT_COMMANDS)
    if command.startswith("!"):
        return False
    return True


@dataclass
class HistoryEntry:
    """One remembered command."""

    command: str
    timestamp: int = field(default_factory=lambda: int(time.time()))
    session_id: int = 1


class CommandHistory:
    """Ordered list of commands with up/down navigation and file persistence."""

    def __init__(self, max_size=MAX_HISTORY_SIZE):
        self.max_size = max_size
        self.entries: list[HistoryEntry] = []
        self.next_id = 1
        self.current_index = 0
        self.session_id = 1
        self.enabled = True

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.commands())

    def _is_duplicate(self, command: str) -> bool:
        return any(entry.command == command for entry in self.entries[-_DUPLICATE_WINDOW:])

    def add(self, command) -> bool:
        """Remember ``command``; return whether it was stored."""
        if not self.enabled or command is None:
            return False
        if not should_save_command(command) or self._is_duplicate(command):
            return False
        self.entries.append(HistoryEntry(command, int(time.time()), self.session_id))
        self.next_id += 1
        if len(self.entries) > self.max_size:
            del self.entries[0]
        self.current_index = len(self.entries)
        return True

    def previous(self) -> str | None:
        """Step back one entry and return it."""
        if not self.entries:
            return None
        if self.current_index > 0:
            self.current_index -= 1
        if self.current_index < len(self.entries):
            return self.entries[self.current_index].command
        return None

    def next(self) -> str | None:
        """Step forward one entry; past the end the input is cleared."""
        if not self.entries:
            return None
        if self.current_index < len(self.entries) - 1:
            self.current_index += 1
            return self.entries[self.current_index].command
        self.current_index = len(self.entries)
        return ""

    def reset_navigation(self) -> None:
        self.current_index = len(self.entries)

    def save(self, path=HISTORY_FILE) -> None:
        """Write every entry to ``path`` as ``timestamp|session|command`` lines."""
        with open(path, "w", encoding="utf-8") as handle:
            handle.write("# Reasons REPL Command History\n")
            handle.write(f"# Saved at: {int(time.time())}\n")
            handle.write("# Format: <timestamp>|<session>|<command>\n")
            for entry in self.entries:
                handle.write(f"{entry.timestamp}|{entry.session_id}|{entry.command}\n")

    def load(self, path=HISTORY_FILE) -> bool:
        """Append the entries stored in ``path``; return False if it does not exist."""
        if not os.path.exists(path):
            logger.debug("History file not found: %s", path)
            return False
        count = 0
        with open(path, "r", encoding="utf-8") as handle:
            for raw in handle:
                if raw.startswith("#"):
                    continue
                line = raw[:-1] if raw.endswith("\n") else raw
                parts = line.lstrip("|").split("|", 1)
                if len(parts) < 2:
                    continue
                timestamp_text = parts[0]
                rest = parts[1].lstrip("|").split("|", 1)
                if len(rest) < 2 or not rest[0] or not rest[1]:
                    continue
                session_text, command = rest
                entry = HistoryEntry(command, _leading_int(timestamp_text), _leading_int(session_text))
                self.entries.append(entry)
                count += 1
                if entry.session_id >= self.session_id:
                    self.session_id = entry.session_id + 1
        self.next_id += count
        self.entries.sort(key=lambda entry: entry.timestamp, reverse=True)
        logger.info("Loaded %d history entries from %s", count, path)
        return True

    def clear(self) -> None:
        self.entries.clear()
        self.current_index = 0
        self.next_id = 1

    def search(self, pattern) -> list[str]:
        """Commands containing ``pattern``; an empty pattern finds nothing."""
        if not pattern:
            return []
        return [entry.command for entry in self.entries if pattern in entry.command]

    def commands(self) -> list[str]:
        return [entry.command for entry in self.entries]

    def last(self, count) -> list[str]:
        """The ``count`` most recently appended commands, oldest first."""
        if count <= 0:
            return []
        return [entry.command for entry in self.entries[-count:]]

    def remove(self, index) -> None:
        """Drop the entry at ``index``; out-of-range indices are ignored."""
        if index < 0 or index >= len(self.entries):
            return
        del self.entries[index]
        if self.current_index > index:
            self.current_index -= 1

    def expand(self, text):
        """Expand ``!!``, ``!n`` and ``!prefix``; anything else comes back unchanged."""
        if not text or not text.startswith("!"):
            return text
        body = text[1:]
        if body.startswith("!"):
            if self.entries:
                return self.entries[-1].command
        elif body[:1].isdigit():
            index = _leading_int(body)
            if 0 < index <= len(self.entries):
                return self.entries[index - 1].command
        else:
            for entry in reversed(self.entries):
                if entry.command.startswith(body):
                    return entry.command
        return text

    def format_stats(self) -> str:
        """A short report of how many commands there are and over what time."""
        count = len(self.entries)
        lines = ["Command History Statistics:", f"  Total commands:    {count}"]
        if count:
            first = self.entries[0].timestamp
            last = self.entries[-1].timestamp
            stamp = "%Y-%m-%d %H:%M:%S"
            lines.append(f"  First command:     {time.strftime(stamp, time.localtime(first))}")
            lines.append(f"  Last command:      {time.strftime(stamp, time.localtime(last))}")
            days = (last - first) / (60 * 60 * 24)
            per_day = count / days if days > 0 else float(count)
            lines.append(f"  Timespan:          {days:.1f} days")
            lines.append(f"  Commands per day:  {per_day:.1f}")
        return "\n".join(lines) + "\n"