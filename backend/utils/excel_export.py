from io import BytesIO
from typing import List, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

header_fill = PatternFill(start_color="FF6600", end_color="FF6600", fill_type="solid")
total_fill = PatternFill(start_color="FFFF00", end_color="FFFF00", fill_type="solid")
bold_font_white = Font(bold=True, color="FFFFFF")
bold_font_black = Font(bold=True, color="000000")


def build_workbook(title: str, subtitle: str, headers: Sequence[str], rows: List[Sequence],
                   totals: Sequence = None) -> bytes:
    """Single-sheet report: title row, subtitle row, coloured header, body and an optional totals row."""
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.append([title])
    ws.cell(row=1, column=1).font = Font(bold=True, size=14)
    ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=len(headers))
    ws.cell(row=1, column=1).alignment = Alignment(horizontal='center')
    ws.append([subtitle])
    ws.append(list(headers))

    for col_idx, cell in enumerate(ws[3], start=1):
        cell.fill = header_fill
        cell.font = bold_font_white
        ws.column_dimensions[get_column_letter(col_idx)].width = 18

    for row in rows:
        ws.append([float(v) if hasattr(v, "as_tuple") else v for v in row])

    if totals is not None:
        ws.append([float(v) if hasattr(v, "as_tuple") else v for v in totals])
        for cell in ws[ws.max_row]:
            cell.fill = total_fill
            cell.font = bold_font_black

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
