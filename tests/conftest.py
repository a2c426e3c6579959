from pathlib import Path
from typing import Any, Dict, Tuple

import openpyxl
import pytest

SRC = Path(__file__).resolve().parent.parent / "src"


def read_cells(path: Path) -> Dict[Tuple[int, int], Any]:
    """Zero-based (row, col) -> value for every non-empty cell of the only worksheet."""
    wb = openpyxl.load_workbook(path)
    assert len(wb.worksheets) == 1
    ws = wb.worksheets[0]
    return {
        (c.row - 1, c.column - 1): c.value
        for row in ws.iter_rows()
        for c in row
        if c.value is not None
    }


def bold_cells(path: Path) -> set:
    wb = openpyxl.load_workbook(path)
    ws = wb.worksheets[0]
    return {(c.row - 1, c.column - 1) for row in ws.iter_rows() for c in row if c.font is not None and c.font.b}


@pytest.fixture
def write_tsv(tmp_path: Path):
    def _write(text: str, name: str = "input.csv", encoding: str = "utf-8") -> Path:
        p = tmp_path / name
        p.write_bytes(text.encode(encoding))
        return p
    return _write


@pytest.fixture
def cells():
    return read_cells


@pytest.fixture
def bold():
    return bold_cells
