# simple_ledger/routes/reports_api.py
from __future__ import annotations

from datetime import date
from io import BytesIO

from flask import Blueprint, jsonify, request, send_file
from flask_login import current_user, login_required

import simple_ledger.common as common
from simple_ledger.errors import LedgerError, ValidationError, unknown_transaction_type
from simple_ledger.models.transaction import TRANSACTION_TYPES
from simple_ledger.services.profiles import get_profile
from simple_ledger.services.report_excel import build_report_workbook, workbook_to_bytes
from simple_ledger.services.report_pdf import build_report_pdf
from simple_ledger.services.transaction_report import (
    delete_transaction,
    fetch_report_rows,
    group_transactions,
    grouped_report_to_dict,
    report_filename,
    report_title,
)
from simple_ledger.utils.dates import month_bounds, parse_iso_date

bp = Blueprint("reports_api", __name__, url_prefix="/reports")

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _report_params():
    """(start, end, type) from the query string; defaults to this month's sales."""
    default_start, default_end = month_bounds(date.today())

    raw_start = request.args.get("start")
    raw_end = request.args.get("end")
    start = parse_iso_date(raw_start) if raw_start else default_start
    end = parse_iso_date(raw_end) if raw_end else default_end
    if start is None or end is None:
        raise ValidationError("Invalid 'start' or 'end' (expected YYYY-MM-DD)")

    txn_type = request.args.get("type") or "sale"
    if txn_type not in TRANSACTION_TYPES:
        raise ValidationError(unknown_transaction_type(txn_type))

    return start, end, txn_type


def _company_name():
    profile = get_profile(current_user.id)
    return profile.company_name if profile else "My Business"


@bp.route("", methods=["GET"])
@login_required
def report_json():
    try:
        start, end, txn_type = _report_params()
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    rows = fetch_report_rows(current_user.id, start, end, txn_type)
    grouped = group_transactions(rows)

    return jsonify({
        "title": report_title(txn_type),
        "type": txn_type,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "transactions": [r.to_dict() for r in rows],
        "report": grouped_report_to_dict(grouped, common.currency_symbol()),
    })


@bp.route("/export.xlsx", methods=["GET"])
@login_required
def report_excel():
    try:
        start, end, txn_type = _report_params()
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    grouped = group_transactions(fetch_report_rows(current_user.id, start, end, txn_type))
    wb = build_report_workbook(grouped, _company_name(), report_title(txn_type), start, end, txn_type=txn_type)

    return send_file(
        BytesIO(workbook_to_bytes(wb)),
        as_attachment=True,
        download_name=report_filename(txn_type, start, end, "xlsx"),
        mimetype=XLSX_MIMETYPE,
    )


@bp.route("/export.pdf", methods=["GET"])
@login_required
def report_pdf():
    try:
        start, end, txn_type = _report_params()
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    grouped = group_transactions(fetch_report_rows(current_user.id, start, end, txn_type))
    pdf = build_report_pdf(grouped, _company_name(), report_title(txn_type), start, end, txn_type=txn_type)

    return send_file(
        BytesIO(pdf),
        as_attachment=True,
        download_name=report_filename(txn_type, start, end, "pdf"),
        mimetype="application/pdf",
    )


@bp.route("/transactions/<int:transaction_id>", methods=["DELETE"])
@login_required
def remove_transaction(transaction_id: int):
    try:
        delete_transaction(current_user.id, transaction_id)
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({"status": "ok"}), 200
