# simple_ledger/services/report_excel.py
from __future__ import annotations

from datetime import date, datetime
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from simple_ledger.services.transaction_report import (
    ENTITY_LINE,
    GroupedReport,
    counterparty_header,
    export_lines,
)

INR_ACCOUNTING_FMT = '_("₹"* #,##0.00_);_("₹"* (#,##0.00);_("₹"* "-"??_);_(@_)'


def build_report_workbook(
    report: GroupedReport,
    company_name: str,
    title: str,
    start: date,
    end: date,
    txn_type: str = "sale",
) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    bold = Font(bold=True)
    money_fmt = INR_ACCOUNTING_FMT

    # Title
    ws["A1"] = company_name
    ws["A1"].font = bold
    ws["A2"] = f"{title} Report"
    ws["A2"].font = bold
    ws["A3"] = f"{start.strftime('%d %b %Y')} - {end.strftime('%d %b %Y')}"

    # Headers
    header_row = 5
    for col, label in enumerate((counterparty_header(txn_type), "Entries", "Amount"), start=1):
        c = ws.cell(header_row, col)
        c.value = label
        c.font = bold
        if col > 1:
            c.alignment = Alignment(horizontal="center")

    def write_amount(r: int, val: float, is_bold: bool = False):
        cell = ws.cell(r, 3)
        cell.value = float(val or 0.0)
        cell.number_format = money_fmt
        if is_bold:
            cell.font = bold

    r = header_row + 1

    for line in export_lines(report):
        # blank row ahead of each product group and the grand total
        if line.kind != ENTITY_LINE and r > header_row + 1:
            r += 1

        label_cell = ws.cell(r, 1)
        label_cell.value = line.label
        if line.kind == ENTITY_LINE:
            label_cell.alignment = Alignment(indent=2)
        else:
            label_cell.font = bold

        ws.cell(r, 2).value = line.count
        if line.kind != ENTITY_LINE:
            ws.cell(r, 2).font = bold

        write_amount(r, line.amount, is_bold=line.kind != ENTITY_LINE)
        r += 1

    # Footer
    r += 2
    ws.cell(r, 1).value = datetime.now().strftime("%A, %b. %d, %Y %I:%M:%S %p")

    # Column widths
    ws.column_dimensions["A"].width = 50
    for c in range(2, 4):
        ws.column_dimensions[get_column_letter(c)].width = 18

    return wb


def workbook_to_bytes(wb: Workbook) -> bytes:
    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()
