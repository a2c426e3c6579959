#!/usr/bin/env python3
"""Numeric vs. text classification of CSV fields.

The numeric test is deliberately loose: an optional leading '-', ASCII digits
and at most one '.', in any order. That lets "." and "-" through as numbers
(they convert to 0.0). Downstream workbooks rely on this exact behaviour, so
do not tighten it here.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

_DIGITS = frozenset("0123456789")
# strtod-style prefix for the strings is_numeric() accepts
_NUMBER_PREFIX = re.compile(r"-?[0-9]*(?:\.[0-9]*)?")


@dataclass(frozen=True)
class Numeric:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


Cell = Union[Numeric, Text]


def is_numeric(s: str) -> bool:
    if not s:
        return False
    dots = 0
    scanned = 0
    for ch in s:
        if ch == ".":
            dots += 1
            if dots > 1:
                return False
        elif ch == "-":
            if scanned > 0:
                return False
        elif ch not in _DIGITS:
            return False
        scanned += 1
    return True


def parse_number(s: str) -> float:
    """Convert the longest numeric prefix of `s`, C-locale strtod style.

    Trailing garbage is ignored; a prefix without any digit yields 0.0.
    """
    prefix = _NUMBER_PREFIX.match(s).group(0)
    if not any(ch in _DIGITS for ch in prefix):
        return 0.0
    return float(prefix)


def classify(s: str) -> Cell:
    if is_numeric(s):
        return Numeric(parse_number(s))
    return Text(s)
