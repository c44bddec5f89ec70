import logging
import math
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import xlrd
from xlrd.sheet import Cell
from xlrd.xldate import xldate_as_datetime
from openpyxl import load_workbook

from excel_analytics.core.config import settings
from excel_analytics.core.exceptions import InvalidFormatError, NoValidDataError

logger = logging.getLogger(__name__)

Grid = List[List[Any]]

SECONDS_PER_DAY = 24 * 60 * 60


def normalize_cell(value: Any) -> Any:
    """
    Convert a raw workbook cell into a JSON-safe scalar.

    Empty cells and non-finite numbers become None, an empty string stays
    an empty string (it is a value, not a gap). Dates and times become ISO
    strings, durations become a number of days the way Excel stores them,
    and anything else is stored as its text.
    """
    if value is None:
        return None
    if isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds() / SECONDS_PER_DAY
    return str(value)


def _normalize_row(row) -> List[Any]:
    cells = [normalize_cell(value) for value in row]
    # Rows come back padded to the sheet width; trailing empty cells carry
    # no data and would inflate the header length
    while cells and cells[-1] is None:
        cells.pop()
    return cells


def _build_grid(rows) -> Grid:
    grid = [_normalize_row(row) for row in rows]
    # Formatting alone can stretch a sheet's dimensions past its last value
    while grid and not grid[-1]:
        grid.pop()
    return grid


def xls_cell_value(cell: Cell, datemode: int) -> Any:
    """Unpack a legacy .xls cell into the same raw types openpyxl hands back"""
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xldate_as_datetime(cell.value, datemode)
    if cell.ctype == xlrd.XL_CELL_ERROR:
        return xlrd.error_text_from_code.get(cell.value, "#N/A")
    # .xls stores every number as a float
    if cell.ctype == xlrd.XL_CELL_NUMBER and float(cell.value).is_integer():
        return int(cell.value)
    return cell.value


def _read_xlsx(file_path: str) -> Dict[str, Grid]:
    # read_only streams the sheets; data_only returns cached formula results
    wb = load_workbook(file_path, read_only=True, data_only=True)
    try:
        workbook: Dict[str, Grid] = {}
        for ws in wb.worksheets:
            # Stored dimensions are often wrong in files from other writers
            ws.reset_dimensions()
            workbook[ws.title] = _build_grid(ws.iter_rows(values_only=True))
        return workbook
    finally:
        wb.close()


def _read_xls(file_path: str) -> Dict[str, Grid]:
    book = xlrd.open_workbook(file_path, on_demand=True)
    try:
        workbook: Dict[str, Grid] = {}
        for sheet in book.sheets():
            rows = (
                [xls_cell_value(cell, book.datemode) for cell in sheet.row(index)]
                for index in range(sheet.nrows)
            )
            workbook[sheet.name] = _build_grid(rows)
        return workbook
    finally:
        book.release_resources()


def read_workbook(file_path: str) -> Dict[str, Grid]:
    """
    Decode a workbook into {sheet name: 2-D cell grid}, in sheet order.

    Headers are not inferred so the first row comes back verbatim,
    duplicates and blanks included. Cells keep their stored types: only
    cells with no value count as missing, while empty strings and "N/A"
    style text stay strings.
    """
    reader = _read_xls if Path(file_path).suffix.lower() == ".xls" else _read_xlsx
    try:
        return reader(file_path)
    except Exception as e:
        logger.warning(f"Could not decode workbook {file_path}: {str(e)}")
        raise InvalidFormatError() from e


def build_sheet_preview(name: str, grid: Grid, row_limit: int) -> Dict[str, Any]:
    headers = list(grid[0])
    data_rows = grid[1:]
    return {
        "name": name,
        "rowCount": len(data_rows),
        "columnCount": len(headers),
        "headers": headers,
        "data": [list(row) for row in data_rows[:row_limit]],
    }


def build_sheet_previews(workbook: Mapping[str, Grid], row_limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """
    Build one preview per non-empty sheet, keeping the workbook's sheet order.

    rowCount and columnCount describe the whole sheet; only the first
    row_limit data rows are kept in "data". Raises NoValidDataError when
    every sheet is empty.
    """
    if row_limit is None:
        row_limit = settings.PREVIEW_ROW_LIMIT

    previews = []
    for name, grid in workbook.items():
        if len(grid) == 0:
            logger.debug(f"Skipping empty sheet '{name}'")
            continue
        previews.append(build_sheet_preview(name, grid, row_limit))

    if not previews:
        raise NoValidDataError()

    return previews


def ingest_workbook(file_path: str, row_limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Decode a stored workbook and return its sheet previews"""
    return build_sheet_previews(read_workbook(file_path), row_limit=row_limit)
