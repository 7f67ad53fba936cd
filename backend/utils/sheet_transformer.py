import re
from typing import Any, Dict, List, Optional

TOTAL_HEADER = "total"
_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")


def parse_number(value: Any) -> Optional[float]:
    """Sheet cells arrive as display strings: strip currency symbols, commas and %."""
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    negative = text.startswith("(") and text.endswith(")")
    text = re.sub(r"[₹$,%\s()]", "", text)
    if text.lower().startswith("rs."):
        text = text[3:]
    if not _NUMBER_RE.match(text):
        return None
    number = float(text)
    return -number if negative else number


def _is_numeric_or_blank(value: Any) -> bool:
    return value is None or str(value).strip() == "" or parse_number(value) is not None


def transform_sheet_data(rows: List[List[Any]]) -> Dict[str, Any]:
    """
    Turn raw sheet values into a chartable structure.

    A sheet whose first column holds labels and whose remaining body cells are
    all numeric becomes "financial": one row per category with a value per time
    point plus a total. Anything else is returned as "tabular" rows keyed by header.

    Raises:
        ValueError: empty input or a missing header row.
    """
    if not rows:
        raise ValueError("Sheet has no data")
    headers = [str(h).strip() for h in rows[0]]
    if not any(headers):
        raise ValueError("Sheet has no header row")

    body = [row for row in rows[1:] if any(str(cell).strip() for cell in row)]
    is_financial = len(headers) > 1 and bool(body) and all(
        _is_numeric_or_blank(cell) for row in body for cell in row[1:]
    )

    if not is_financial:
        return {
            "type": "tabular",
            "headers": headers,
            "rows": [
                {header: (row[i] if i < len(row) else "") for i, header in enumerate(headers)}
                for row in body
            ],
        }

    total_index = next((i for i, h in enumerate(headers) if i > 0 and h.lower() == TOTAL_HEADER), None)
    point_indexes = [i for i in range(1, len(headers)) if i != total_index]
    time_points = [headers[i] for i in point_indexes]

    result_rows = []
    for row in body:
        values = {headers[i]: (parse_number(row[i]) or 0.0) if i < len(row) else 0.0 for i in point_indexes}
        if total_index is not None and total_index < len(row) and parse_number(row[total_index]) is not None:
            total = parse_number(row[total_index])
        else:
            total = sum(values.values())
        result_rows.append({"category": str(row[0]).strip(), **values, "total": total})

    return {
        "type": "financial",
        "headers": headers,
        "timePoints": time_points,
        "rows": result_rows,
    }
