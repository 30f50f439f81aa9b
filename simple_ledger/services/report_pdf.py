# simple_ledger/services/report_pdf.py
from __future__ import annotations

from datetime import date, datetime
from io import BytesIO
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from simple_ledger.services.transaction_report import (
    ENTITY_LINE,
    GroupedReport,
    counterparty_header,
    export_lines,
    format_subtotal,
)
from simple_ledger.utils.money import format_currency

# Built-in PDF fonts have no rupee glyph
PDF_CURRENCY_SYMBOL = "Rs. "


def pdf_table_rows(report: GroupedReport, txn_type: str = "sale", symbol: str = PDF_CURRENCY_SYMBOL):
    """Table cells for the report plus the indexes of the bold rows."""
    data = [[counterparty_header(txn_type), "Amount"]]
    bold_rows = []
    for line in export_lines(report):
        if line.kind == ENTITY_LINE:
            data.append([f"    {line.label}", format_subtotal(line.entity, symbol)])
        else:
            bold_rows.append(len(data))
            data.append([line.label, format_currency(line.amount, symbol)])
    return data, bold_rows


def build_report_pdf(
    report: GroupedReport,
    company_name: str,
    title: str,
    start: date,
    end: date,
    txn_type: str = "sale",
    symbol: str = PDF_CURRENCY_SYMBOL,
) -> bytes:
    """Render the grouped report as a paginated A4 document.

    The table header repeats on every page.
    """
    bio = BytesIO()
    doc = SimpleDocTemplate(
        bio,
        pagesize=A4,
        leftMargin=15 * mm,
        rightMargin=15 * mm,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        title=f"{title} Report",
        author=company_name,
    )
    styles = getSampleStyleSheet()

    story = [
        Paragraph(escape(company_name), styles["Title"]),
        Paragraph(
            f"{title} Report: {start.strftime('%d %b %Y')} - {end.strftime('%d %b %Y')}",
            styles["Heading2"],
        ),
        Spacer(1, 6 * mm),
    ]

    data, bold_rows = pdf_table_rows(report, txn_type, symbol)

    table = Table(data, colWidths=[120 * mm, 55 * mm], repeatRows=1)
    style = [
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1f2937")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("LINEABOVE", (0, -1), (-1, -1), 1, colors.black),
    ]
    for row in bold_rows:
        style.append(("FONTNAME", (0, row), (-1, row), "Helvetica-Bold"))
    table.setStyle(TableStyle(style))
    story.append(table)

    story.append(Spacer(1, 6 * mm))
    story.append(Paragraph(datetime.now().strftime("%A, %b. %d, %Y %I:%M:%S %p"), styles["Normal"]))

    doc.build(story)
    return bio.getvalue()
