#!/usr/bin/env python3
"""CSV → XLSX conversion driver (v1.0.0)
Chunked read, tab-delimited tokenizing, one worksheet in constant-memory mode, bold header row.
Open failures raise; parse and read problems are logged and the workbook is still written.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

import structlog
import xlsxwriter
from xlsxwriter.exceptions import XlsxWriterException

from settings import Settings
from tokenizer import ChunkReader, Field, ParseProblem, RowEnd, Token, Tokenizer
from writer import CellWriter

logger = structlog.get_logger()

PathLike = Union[str, Path]


class ConversionError(RuntimeError):
    pass


class SourceOpenError(ConversionError):
    def __init__(self, path: PathLike, reason: str) -> None:
        super().__init__(f"Failed to open {path}: {reason}")
        self.path = str(path)
        self.reason = reason


class SinkError(ConversionError):
    pass


@dataclass(frozen=True)
class ConversionReport:
    source: str
    destination: str
    rows: int
    fields: int
    numeric_cells: int
    text_cells: int
    bytes_read: int
    parse_problems: int
    rejected_cells: int
    read_error: Optional[str] = None

    def as_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


def write_tokens(tokens: Iterable[Token], writer: CellWriter) -> int:
    """Drive `writer` from a token stream; returns the number of parse problems."""
    problems = 0
    for tok in tokens:
        if isinstance(tok, Field):
            writer.write_field(tok.value)
        elif isinstance(tok, RowEnd):
            writer.end_row()
        elif isinstance(tok, ParseProblem):
            problems += 1
            logger.warning("parse_error", line=tok.line, error=tok.message)
    return problems


def _workbook_options(settings: Settings) -> Dict[str, Any]:
    # inf from overlong digit runs becomes an error cell instead of a TypeError
    opts: Dict[str, Any] = {"constant_memory": settings.constant_memory, "nan_inf_to_errors": True}
    if settings.tmpdir:
        opts["tmpdir"] = settings.tmpdir
    return opts


def convert(source: PathLike, destination: PathLike, settings: Optional[Settings] = None) -> ConversionReport:
    settings = settings or Settings()
    try:
        fp = open(source, "rb")
    except OSError as e:
        raise SourceOpenError(source, e.strerror or str(e)) from e

    with fp:
        workbook = xlsxwriter.Workbook(str(destination), _workbook_options(settings))
        try:
            # constant_memory opens a temp file under tmpdir here
            worksheet = workbook.add_worksheet()
        except OSError as e:
            raise SinkError(f"Failed to create worksheet for {destination}: {e.strerror or e}") from e
        try:
            bold = workbook.add_format({"bold": True})
            writer = CellWriter(worksheet, bold)

            reader = ChunkReader(fp, settings.chunk_size)
            tokenizer = Tokenizer(
                encoding=settings.encoding,
                errors=settings.encoding_errors,
                field_size_limit=settings.field_size_limit,
            )
            problems = write_tokens(tokenizer.tokens(reader), writer)

            if reader.error is not None:
                logger.warning("read_error", path=str(source), error=reader.error.strerror or str(reader.error))
        finally:
            # always serialize whatever was written
            try:
                workbook.close()
            except (XlsxWriterException, OSError) as e:
                raise SinkError(f"Failed to write {destination}: {e}") from e

    report = ConversionReport(
        source=str(source),
        destination=str(destination),
        rows=writer.stats.rows,
        fields=writer.stats.fields,
        numeric_cells=writer.stats.numeric,
        text_cells=writer.stats.text,
        bytes_read=reader.bytes_read,
        parse_problems=problems,
        rejected_cells=writer.stats.rejected,
        read_error=(reader.error.strerror or str(reader.error)) if reader.error else None,
    )
    logger.info("conversion_complete", **report.as_dict())
    return report
