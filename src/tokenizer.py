#!/usr/bin/env python3
"""Chunked input reader and tab-delimited tokenizer.

The tokenizer turns a stream of byte chunks into an explicit token stream:
one Field per cell, a RowEnd after each record, and a ParseProblem whenever
the csv reader rejects a record (the stream carries on after it).
"""
from __future__ import annotations

import codecs
import csv
import re
from dataclasses import dataclass
from typing import BinaryIO, Iterable, Iterator, List, Optional, Union

SPACE = " "
# largest value csv.field_size_limit accepts on every platform (C long)
MAX_FIELD_SIZE = 2**31 - 1
_LINE_END = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Field:
    value: str


@dataclass(frozen=True)
class RowEnd:
    pass


@dataclass(frozen=True)
class ParseProblem:
    message: str
    line: int


Token = Union[Field, RowEnd, ParseProblem]

ROW_END = RowEnd()


class TabDialect(csv.Dialect):
    delimiter = "\t"
    quotechar = '"'
    doublequote = True
    skipinitialspace = True
    lineterminator = "\n"
    quoting = csv.QUOTE_MINIMAL
    strict = False


class ChunkReader:
    """Iterates fixed-size chunks of a binary file until EOF or a read error.

    A read error ends the iteration quietly; callers inspect `error` afterwards.
    """

    def __init__(self, fp: BinaryIO, chunk_size: int = 1024) -> None:
        self._fp = fp
        self._chunk_size = chunk_size
        self.error: Optional[OSError] = None
        self.bytes_read = 0

    def __iter__(self) -> Iterator[bytes]:
        while True:
            try:
                chunk = self._fp.read(self._chunk_size)
            except OSError as e:
                self.error = e
                return
            if not chunk:
                return
            self.bytes_read += len(chunk)
            yield chunk


class Tokenizer:
    def __init__(self, *, encoding: str = "utf-8", errors: str = "replace", field_size_limit: int = MAX_FIELD_SIZE) -> None:
        self.encoding = encoding
        self.errors = errors
        self.field_size_limit = field_size_limit
        self._line = ""

    def _lines(self, chunks: Iterable[bytes]) -> Iterator[str]:
        decoder = codecs.getincrementaldecoder(self.encoding)(errors=self.errors)
        pending = ""
        for chunk in chunks:
            pending += decoder.decode(chunk)
            start = 0
            for m in _LINE_END.finditer(pending):
                # a trailing "\r" may be the first half of "\r\n" in the next chunk
                if m.group() == "\r" and m.end() == len(pending):
                    break
                self._line = pending[start:m.end()]
                yield self._line
                start = m.end()
            pending = pending[start:]
        # flush: a last record without a trailing newline
        pending += decoder.decode(b"", final=True)
        if pending:
            self._line = pending
            yield pending

    def _is_blank(self, row: List[str], lines_used: int) -> bool:
        if not row:
            return True
        # a lone empty field only counts as blank when its single line held nothing but padding
        return row == [""] and lines_used == 1 and not self._line.strip(SPACE + "\r\n")

    def tokens(self, chunks: Iterable[bytes]) -> Iterator[Token]:
        reader = csv.reader(self._lines(chunks), dialect=TabDialect)
        previous_limit = csv.field_size_limit(self.field_size_limit)
        try:
            while True:
                before = reader.line_num
                try:
                    row = next(reader)
                except StopIteration:
                    return
                except csv.Error as e:
                    yield ParseProblem(str(e), reader.line_num)
                    continue
                except UnicodeDecodeError as e:
                    # the line source is exhausted once decoding fails
                    yield ParseProblem(f"cannot decode input as {self.encoding}: {e.reason}", reader.line_num)
                    return
                if self._is_blank(row, reader.line_num - before):
                    continue
                for value in row:
                    yield Field(value.rstrip(SPACE))
                yield ROW_END
        finally:
            csv.field_size_limit(previous_limit)
