"""Tabular sources for inventory loading.

The loader only needs a header row, 1-based cell access and the table
extents; cell values surface as numbers or text.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, Iterable, Sequence

from luminaria.common.errors import InventoryError

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}


class TableSource:
    def __init__(self, rows: Iterable[Sequence[Any]], name: str = "<memory>") -> None:
        self.name = name
        self._rows = [list(row) for row in rows]
        self.max_row = len(self._rows)
        self.max_column = max((len(row) for row in self._rows), default=0)

    def header(self) -> list[Any]:
        if not self._rows:
            return []
        return [self.cell(1, column) for column in range(1, self.max_column + 1)]

    def cell(self, row: int, column: int) -> Any:
        if row < 1 or column < 1 or row > self.max_row:
            return None
        values = self._rows[row - 1]
        if column > len(values):
            return None
        return values[column - 1]

    @property
    def is_empty(self) -> bool:
        return self.max_row == 0 or self.max_column == 0


def read_xlsx(path: Path, sheet_index: int = 0) -> TableSource:
    from openpyxl import load_workbook

    workbook = load_workbook(filename=path, read_only=True, data_only=True)
    try:
        sheets = workbook.worksheets
        if sheet_index >= len(sheets):
            raise InventoryError(f"Workbook {path} has no sheet at index {sheet_index}")
        rows = list(sheets[sheet_index].iter_rows(values_only=True))
    finally:
        workbook.close()
    return TableSource(rows, name=str(path))


def read_csv(path: Path) -> TableSource:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        rows = [[value if value != "" else None for value in row] for row in csv.reader(f)]
    return TableSource(rows, name=str(path))


def open_table_source(path: Path, sheet_index: int = 0) -> TableSource:
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return read_xlsx(path, sheet_index=sheet_index)
    if suffix in CSV_SUFFIXES:
        return read_csv(path)
    raise InventoryError(f"Unsupported inventory format: {path.suffix or path.name}")
