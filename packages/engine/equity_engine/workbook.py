"""Excel export of a cap table snapshot.

Two sheets:
- Ownership: one row per holder (largest stake first) with a SUM total row
- By Kind: founder / team / investor aggregates

Values are written as numbers, totals as live formulas, so the workbook can be
audited in Excel against the engine's own totals.
"""

from __future__ import annotations

from typing import List, Optional

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from .reporting import ownership_by_kind_frame, ownership_frame
from .schemas import CapTableSnapshot

OWNERSHIP_SHEET = "Ownership"
BY_KIND_SHEET = "By Kind"

PERCENT_FORMAT = "0.00"
SHARES_FORMAT = "#,##0"

# Header row sits below the title and a blank spacer row
HEADER_ROW = 3


def _cell_value(value):
    # numpy scalars -> plain Python for openpyxl
    return value.item() if hasattr(value, "item") else value


class OwnershipWorkbookRenderer:
    """Render a snapshot to an .xlsx workbook."""

    def __init__(self, snapshot: CapTableSnapshot, title: Optional[str] = None):
        self.snapshot = snapshot
        self.title = title or "Cap Table"

        self.bold_font = Font(bold=True)
        self.header_font = Font(bold=True, color="FFFFFF")  # White on dark blue
        self.header_fill = PatternFill(start_color="1F4E78", end_color="1F4E78", fill_type="solid")
        self.total_border = Border(top=Side(style='medium'))
        self.center_align = Alignment(horizontal='center', vertical='center')

    def render(self, output_path: str) -> str:
        wb = self.build_workbook()
        wb.save(output_path)
        return output_path

    def build_workbook(self) -> Workbook:
        wb = Workbook()
        wb.remove(wb.active)

        self._render_frame(
            wb.create_sheet(title=OWNERSHIP_SHEET),
            ownership_frame(self.snapshot),
            headers=["Holder", "Kind", "Equity %", "Shares"],
            columns=["name", "kind", "equity_percent", "shares"],
        )
        self._render_frame(
            wb.create_sheet(title=BY_KIND_SHEET),
            ownership_by_kind_frame(self.snapshot),
            headers=["Kind", "Holders", "Equity %", "Shares"],
            columns=["kind", "entries", "equity_percent", "shares"],
        )
        return wb

    # ------------------------------------------------------------------ #

    def _render_frame(
        self,
        sheet: Worksheet,
        df: pd.DataFrame,
        headers: List[str],
        columns: List[str],
    ) -> None:
        """Write a title, a header row, one row per frame row and a total row.

        The last two columns are always equity % and shares; they get number
        formats and SUM formulas in the total row.
        """
        sheet.sheet_view.showGridLines = False

        title_cell = sheet["A1"]
        title_cell.value = f"{self.title} - {sheet.title}"
        title_cell.font = Font(size=14, bold=True)

        for col_idx, header in enumerate(headers, start=1):
            cell = sheet.cell(row=HEADER_ROW, column=col_idx, value=header)
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.center_align

        first_data_row = HEADER_ROW + 1
        for row_offset, record in enumerate(df[columns].itertuples(index=False)):
            row = first_data_row + row_offset
            for col_idx, value in enumerate(record, start=1):
                sheet.cell(row=row, column=col_idx, value=_cell_value(value))
            sheet.cell(row=row, column=len(columns) - 1).number_format = PERCENT_FORMAT
            sheet.cell(row=row, column=len(columns)).number_format = SHARES_FORMAT

        total_row = first_data_row + len(df)
        label = sheet.cell(row=total_row, column=1, value="Total")
        label.font = self.bold_font
        for col_idx in range(1, len(columns) + 1):
            sheet.cell(row=total_row, column=col_idx).border = self.total_border

        for col_idx, number_format in (
            (len(columns) - 1, PERCENT_FORMAT),
            (len(columns), SHARES_FORMAT),
        ):
            letter = get_column_letter(col_idx)
            if len(df):
                formula = f"=SUM({letter}{first_data_row}:{letter}{total_row - 1})"
            else:
                formula = 0
            cell = sheet.cell(row=total_row, column=col_idx, value=formula)
            cell.font = self.bold_font
            cell.number_format = number_format

        sheet.column_dimensions["A"].width = 28
        for col_idx in range(2, len(columns) + 1):
            sheet.column_dimensions[get_column_letter(col_idx)].width = 14


def write_ownership_workbook(
    snapshot: CapTableSnapshot, output_path: str, title: Optional[str] = None
) -> str:
    """Render a snapshot to ``output_path`` and return the path."""
    return OwnershipWorkbookRenderer(snapshot, title=title).render(output_path)


__all__ = ["OwnershipWorkbookRenderer", "write_ownership_workbook"]
