"""Prompt generation for the interactive shell, with %-variable expansion."""

from __future__ import annotations

import os
import socket
import subprocess
import time
from typing import Callable, Mapping

VERSION = "0.1.0"

ANSI_RESET = "\x1b[0m"
ANSI_RED = "\x1b[31m"
ANSI_GREEN = "\x1b[32m"
ANSI_YELLOW = "\x1b[33m"
ANSI_BOLD = "\x1b[1m"

DEFAULT_PRIMARY_PROMPT = ANSI_BOLD + ANSI_GREEN + "reasons> " + ANSI_RESET
DEFAULT_SECONDARY_PROMPT = ANSI_BOLD + ANSI_YELLOW + "...> " + ANSI_RESET
DEFAULT_DEBUG_PROMPT = ANSI_BOLD + ANSI_RED + "debug> " + ANSI_RESET

GIT_REFRESH_INTERVAL = 5

_VALUE_LIMIT = 127
_BRANCH_COMMAND = ("git", "branch", "--show-current")
_STATUS_COMMAND = ("git", "status", "--porcelain")

GitRunner = Callable[[list], "str | None"]

_HELP = (
    "Prompt Format Variables:\n"
    "  %u - Username\n"
    "  %h - Hostname (short)\n"
    "  %d - Current directory (full)\n"
    "  %w - Current directory (basename)\n"
    "  %t - Time (HH:MM:SS)\n"
    "  %n - Line number\n"
    "  %s - Session ID\n"
    "  %g - Git branch\n"
    "  %m - Git modification status (* if changes)\n"
    "  %c - Command count\n"
    "  %e - Error indicator (! if last command failed)\n"
    "  %v - Version\n"
    "  %l - Current script name\n"
    "  %D - Debugger indicator\n"
    "  %% - Literal %\n"
    "\n"
    'Example: "%u@%h:%w [%n] %D> "\n'
)


def prompt_help() -> str:
    """Description of the variables a prompt format may use."""
    return _HELP


def _run_git(args) -> str | None:
    """Run a git command and return its standard output, or None if it cannot start."""
    try:
        completed = subprocess.run(
            list(args), capture_output=True, text=True, check=False
        )
    except OSError:
        return None
    return completed.stdout


def _current_dir() -> str:
    try:
        return os.getcwd()
    except OSError:
        return "?"


def _username() -> str:
    try:
        import pwd

        return pwd.getpwuid(os.getuid()).pw_name
    except (ImportError, KeyError, AttributeError):
        try:
            import getpass

            return getpass.getuser()
        except Exception:
            return "?"


def _hostname() -> str:
    try:
        name = socket.gethostname()
    except OSError:
        return "?"
    return name.split(".", 1)[0]


class PromptGenerator:
    """Builds prompt strings from format templates and shell state."""

    def __init__(self, history=None, git_runner=None):
        self.history = history
        self.git_runner: GitRunner = git_runner or _run_git
        self.show_colors = True
        self.show_git_info = True
        self.last_git_check = 0.0
        self.cached_git_branch: str | None = None
        self.cached_git_status: str | None = None
        self.reset_formats()

    def reset_formats(self) -> None:
        """Restore the three built-in prompt formats."""
        self.primary_format = DEFAULT_PRIMARY_PROMPT
        self.secondary_format = DEFAULT_SECONDARY_PROMPT
        self.debug_format = DEFAULT_DEBUG_PROMPT

    def configure_from_env(self, environ: Mapping[str, str] | None = None) -> None:
        """Take prompt formats from REASONS_PROMPT and its siblings when set."""
        env = os.environ if environ is None else environ
        primary = env.get("REASONS_PROMPT")
        if primary is not None:
            self.primary_format = primary
        secondary = env.get("REASONS_SECONDARY_PROMPT")
        if secondary is not None:
            self.secondary_format = secondary
        debug = env.get("REASONS_DEBUG_PROMPT")
        if debug is not None:
            self.debug_format = debug

    def format_for(self, repl) -> str:
        """The template that applies to the shell's current state."""
        if getattr(repl, "input_buffer", None):
            return self.secondary_format
        if getattr(repl, "debug_mode", False):
            return self.debug_format
        return self.primary_format

    def git_branch(self) -> str | None:
        """Current git branch, refreshed at most every few seconds."""
        if not self.show_git_info:
            return None
        now = time.time()
        if self.cached_git_branch is not None and now - self.last_git_check < GIT_REFRESH_INTERVAL:
            return self.cached_git_branch
        self.cached_git_branch = None
        if not os.path.exists(".git"):
            self.last_git_check = now
            return None
        output = self.git_runner(list(_BRANCH_COMMAND))
        if output is None:
            return None
        if output:
            self.cached_git_branch = output.split("\n", 1)[0]
        self.last_git_check = now
        return self.cached_git_branch

    def git_status(self) -> str | None:
        """``*`` when the working tree has changes, an empty string when clean."""
        if not self.show_git_info:
            return None
        if self.git_branch() is None:
            return None
        now = time.time()
        if self.cached_git_status is not None and now - self.last_git_check < GIT_REFRESH_INTERVAL:
            return self.cached_git_status
        self.cached_git_status = None
        output = self.git_runner(list(_STATUS_COMMAND))
        if output is None:
            return None
        changes = sum(1 for line in output.splitlines() if line)
        self.cached_git_status = "*" if changes > 0 else ""
        return self.cached_git_status

    def refresh(self) -> None:
        """Forget cached git information."""
        self.last_git_check = 0.0
        self.cached_git_branch = None
        self.cached_git_status = None

    def _variable(self, var: str, repl) -> str:
        if var == "u":
            return _username()
        if var == "h":
            return _hostname()
        if var == "d":
            return _current_dir()
        if var == "w":
            cwd = _current_dir()
            return cwd.rsplit("/", 1)[-1]
        if var == "t":
            return time.strftime("%H:%M:%S")
        if var == "n":
            return str(getattr(repl, "line_count", 0) if repl is not None else 0)
        if var == "s":
            return str(self.history.session_id if self.history is not None else 0)
        if var == "g":
            return self.git_branch() or ""
        if var == "m":
            return self.git_status() or ""
        if var == "c":
            return str(len(self.history) if self.history is not None else 0)
        if var == "e":
            return "!" if repl is not None and getattr(repl, "last_error", None) else ""
        if var == "v":
            return VERSION
        if var == "l":
            script = getattr(repl, "current_script", None) if repl is not None else None
            return script.rsplit("/", 1)[-1] if script else ""
        if var == "D":
            return "DEBUG" if repl is not None and getattr(repl, "debug_mode", False) else ""
        if var == "%":
            return "%"
        return "%" + var

    def expand(self, template, repl=None) -> str:
        """Replace each ``%x`` in ``template`` with its value."""
        parts: list[str] = []
        chars = iter(template)
        for char in chars:
            if char != "%":
                parts.append(char)
                continue
            var = next(chars, None)
            if var is None:
                break
            parts.append(self._variable(var, repl)[:_VALUE_LIMIT])
        return "".join(parts)

    def generate(self, repl) -> str:
        """The prompt to show for the shell's current state."""
        if repl is None:
            return "> "
        return self.expand(self.format_for(repl), repl)