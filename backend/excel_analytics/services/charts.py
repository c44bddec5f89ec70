import math
import re
from typing import Any, Dict, List, Sequence

from excel_analytics.core.exceptions import UnknownColumnError

COLOR_PALETTE = [
    "#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0", "#9966FF",
    "#FF9F40", "#FF6384", "#C9CBCF", "#4BC0C0", "#FF6384",
]

# Chart types that color every data point separately
PER_POINT_COLOR_CHART_TYPES = {"pie"}

# Leading numeric prefix, e.g. "12.5kg" -> 12.5
_NUMERIC_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def generate_colors(count: int) -> List[str]:
    """
    Return `count` colors: the fixed palette first, then golden-angle HSL
    hues for anything past it. The same count always yields the same list.
    """
    if count <= len(COLOR_PALETTE):
        return COLOR_PALETTE[:max(count, 0)]

    additional = []
    for i in range(len(COLOR_PALETTE), count):
        hue = (i * 137.5) % 360
        additional.append(f"hsl({hue:g}, 70%, 50%)")
    return COLOR_PALETTE + additional


def resolve_column(headers: Sequence[Any], column: str) -> int:
    """Exact, case-sensitive header lookup; first occurrence wins"""
    for index, header in enumerate(headers):
        if header == column:
            return index
    raise UnknownColumnError(column)


def to_label(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> float:
    """Coerce a cell to float; anything unparseable becomes 0.0"""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if not match:
            return 0.0
        number = float(match.group(0))
    else:
        return 0.0

    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def _cell(row: Sequence[Any], index: int) -> Any:
    return row[index] if index < len(row) else None


def derive_chart_data(sheet: Dict[str, Any], x_column: str, y_column: str, chart_type: str) -> Dict[str, Any]:
    """
    Build {labels, datasets} for a chart from a stored sheet preview.

    Only the preview's stored rows are read, so charts of sheets longer than
    the preview limit reflect the stored subset. Rows missing either cell
    are skipped; a y cell that isn't numeric counts as 0.
    """
    headers = sheet.get("headers") or []
    x_index = resolve_column(headers, x_column)
    y_index = resolve_column(headers, y_column)

    labels: List[str] = []
    values: List[float] = []
    for row in sheet.get("data") or []:
        x_value = _cell(row, x_index)
        y_value = _cell(row, y_index)
        if x_value is None or y_value is None:
            continue
        labels.append(to_label(x_value))
        values.append(to_number(y_value))

    colors = generate_colors(len(values))
    if chart_type in PER_POINT_COLOR_CHART_TYPES:
        color = colors
    else:
        color = colors[0] if colors else None

    return {
        "labels": labels,
        "datasets": [{
            "label": "Data",
            "data": values,
            "backgroundColor": color,
            "borderColor": color,
            "borderWidth": 1,
        }],
    }
