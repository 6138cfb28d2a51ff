"""History, prompts, completion, CSV import and file helpers for a Reasons DSL shell."""

__version__ = "0.1.0"