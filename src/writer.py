#!/usr/bin/env python3
"""Cell writer: classifies fields and places them at the worksheet cursor."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

import structlog

from classifier import Numeric, classify

logger = structlog.get_logger()

# XlsxWriter write_*() return codes
WRITE_OK = 0
WRITE_OUT_OF_RANGE = -1
WRITE_STRING_TRUNCATED = -2

_WRITE_STATUS = {
    WRITE_OUT_OF_RANGE: "cell outside worksheet limits",
    WRITE_STRING_TRUNCATED: "string longer than 32767 characters, truncated",
}


@dataclass
class Cursor:
    row: int = 0
    col: int = 0


@dataclass
class WriteStats:
    fields: int = 0
    rows: int = 0
    numeric: int = 0
    text: int = 0
    rejected: int = 0


class CellWriter:
    """Writes one field per call at the cursor; header row cells get `header_format`."""

    def __init__(self, worksheet: Any, header_format: Optional[Any] = None) -> None:
        self.worksheet = worksheet
        self.header_format = header_format
        self.cursor = Cursor()
        self.stats = WriteStats()

    def write_field(self, value: str) -> None:
        row, col = self.cursor.row, self.cursor.col
        fmt = self.header_format if row == 0 else None
        cell = classify(value)
        if isinstance(cell, Numeric):
            rc = self.worksheet.write_number(row, col, cell.value, fmt)
            self.stats.numeric += 1
            if rc == WRITE_OK and not math.isfinite(cell.value):
                # more digits than a double holds; the sink stores an error cell
                self._reject(row, col, rc, "number outside double range, written as an error cell")
        else:
            if cell.value:
                rc = self.worksheet.write_string(row, col, cell.value, fmt)
            else:
                # empty text: blank cell, only kept by the sink when formatted
                rc = self.worksheet.write_blank(row, col, None, fmt)
            self.stats.text += 1
        self._check(rc, row, col)
        self.stats.fields += 1
        self.cursor.col += 1

    def end_row(self) -> None:
        self.cursor.col = 0
        self.cursor.row += 1
        self.stats.rows += 1

    def _check(self, rc: int, row: int, col: int) -> None:
        if rc != WRITE_OK:
            self._reject(row, col, rc, _WRITE_STATUS.get(rc, "unknown sink status"))

    def _reject(self, row: int, col: int, rc: int, reason: str) -> None:
        self.stats.rejected += 1
        logger.warning("cell_write_failed", row=row, col=col, status=rc, reason=reason)
