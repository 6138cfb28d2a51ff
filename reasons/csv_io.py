"""Streaming CSV reading with quoting, custom delimiters and value typing."""

from __future__ import annotations

import enum
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

_INTMAX = 2**63 - 1
_INTMIN = -(2**63)
_SPACE = "[ \t\n\v\f\r]*"
_INT_RE = re.compile(_SPACE + r"[+-]?[0-9]+")
_DEC_RE = re.compile(
    _SPACE + r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
)
_HEX_RE = re.compile(
    _SPACE + r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)(?:[pP][+-]?[0-9]+)?"
)
_SPECIAL_RE = re.compile(
    _SPACE + r"([+-]?)(inf(?:inity)?|nan(?:\([0-9A-Za-z_]*\))?)", re.IGNORECASE
)


class CsvErrorKind(enum.Enum):
    """What went wrong while reading a CSV file."""

    FILE_IO = "file_io"
    MISSING_HEADER = "missing_header"
    COLUMN_MISMATCH = "column_mismatch"


class CsvError(Exception):
    """Raised when a CSV file cannot be read."""

    def __init__(self, kind: CsvErrorKind, message: str, row: int = 0):
        super().__init__(message)
        self.kind = kind
        self.row = row


@dataclass(frozen=True)
class CsvOptions:
    """How a CSV file is to be read."""

    delimiter: str = ","
    has_header: bool = True
    encoding: str = "utf-8"


ErrorHandler = Callable[["CsvParser", CsvErrorKind, str, int], None]


def _split_fields(line: str, delimiter: str) -> list[str]:
    fields: list[str] = []
    start = 0
    in_quote = was_quote = False
    for pos, char in enumerate(line):
        if char == '"':
            if was_quote:
                was_quote = False
            else:
                in_quote = not in_quote
                was_quote = True
        elif char == delimiter and not in_quote:
            fields.append(line[start:pos])
            start = pos + 1
            was_quote = False
        else:
            was_quote = False
    fields.append(line[start:])
    return fields


class CsvParser:
    """Reads a CSV file one row at a time; a blank line ends the data."""

    def __init__(self, path, options=None, error_handler=None):
        self.path = os.fspath(path)
        self.options = options or CsvOptions()
        self.error_handler: ErrorHandler | None = error_handler
        self.header: list[str] = []
        self.row_count = 0
        self.column_count = 0
        self._pushback = ""
        try:
            self._file = open(self.path, "r", encoding=self.options.encoding, newline="")
        except OSError as exc:
            logger.error("Failed to open CSV file: %s", self.path)
            raise CsvError(CsvErrorKind.FILE_IO, f"failed to open CSV file: {self.path}") from exc

        if self.options.has_header:
            line = self._read_line()
            if line is None:
                self.close()
                raise CsvError(CsvErrorKind.MISSING_HEADER, f"no header row in: {self.path}")
            self.header = _split_fields(line, self.options.delimiter)
            self.column_count = len(self.header)

    @property
    def closed(self) -> bool:
        return self._file is None

    def _getc(self) -> str:
        if self._pushback:
            char, self._pushback = self._pushback, ""
            return char
        return self._file.read(1)

    def _read_line(self) -> str | None:
        if self._file is None:
            return None
        chars: list[str] = []
        in_quote = was_quote = False
        while True:
            char = self._getc()
            if not char:
                break
            if char == "\r":
                following = self._getc()
                if following and following != "\n":
                    self._pushback = following
                char = "\n"
            if char == '"':
                if was_quote:
                    was_quote = False
                else:
                    in_quote = not in_quote
                    was_quote = True
                    continue
            else:
                was_quote = False
            if char == "\n" and not in_quote:
                break
            chars.append(char)
        return "".join(chars) if chars else None

    def next_row(self) -> list[str] | None:
        """The next row's fields, or None once the data has ended."""
        line = self._read_line()
        if line is None:
            return None
        row = _split_fields(line, self.options.delimiter)
        self.row_count += 1
        if self.column_count == 0:
            self.column_count = len(row)
        elif len(row) != self.column_count:
            if self.error_handler is not None:
                self.error_handler(
                    self, CsvErrorKind.COLUMN_MISMATCH, "Column count mismatch", self.row_count
                )
            else:
                logger.warning("Column count mismatch on row %d", self.row_count)
        return row

    def __iter__(self) -> Iterator[list[str]]:
        while (row := self.next_row()) is not None:
            yield row

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "CsvParser":
        return self

    def __exit__(self, *args) -> None:
        self.close()


@dataclass
class Dataset:
    """Named columns of string values with their rows."""

    columns: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    def add_column(self, name) -> None:
        self.columns.append(name)

    def append_row(self, values) -> None:
        self.rows.append(list(values))


def parse_all(path, options=None) -> list[list[str]]:
    """Every data row of a CSV file."""
    with CsvParser(path, options) as parser:
        return list(parser)


def _parse_double(text: str) -> float | None:
    if _DEC_RE.fullmatch(text):
        return float(text)
    if _HEX_RE.fullmatch(text):
        return float.fromhex(text.lstrip(" \t\n\v\f\r"))
    special = _SPECIAL_RE.fullmatch(text)
    if special:
        sign, name = special.groups()
        kind = "nan" if name.lower().startswith("nan") else "inf"
        return float(("-" if sign == "-" else "") + kind)
    return None


def parse_value(text):
    """Type a field: integer, then float, then boolean, otherwise the string itself."""
    if text is None:
        return None
    if text == "":
        return 0
    if _INT_RE.fullmatch(text):
        return max(_INTMIN, min(_INTMAX, int(text)))
    number = _parse_double(text)
    if number is not None:
        return number
    lowered = text.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    return text


def import_as_dataset(path, options=None) -> Dataset:
    """Load a CSV file into a dataset with columns named col_0, col_1, ..."""
    try:
        rows = parse_all(path, options)
    except CsvError as exc:
        logger.error("CSV import failed: %s", exc)
        raise
    dataset = Dataset()
    width = len(rows[0]) if rows else 0
    for index in range(width):
        dataset.add_column(f"col_{index}")
    for row in rows:
        dataset.append_row(row)
    return dataset