from datetime import date

from flask import Blueprint, current_app, jsonify, redirect, request
from flask_login import current_user, login_required

import simple_ledger.common as common
from simple_ledger.errors import LedgerError
from simple_ledger.services.monthly_stats import load_dashboard_stats
from simple_ledger.services.profiles import create_profile, get_profile
from simple_ledger.utils.money import format_currency

bp = Blueprint("dashboard_api", __name__)

QUICK_LINKS = {
    "sale": "/entry/sale",
    "purchase": "/entry/purchase",
    "bulk": "/entry/bulk",
    "reports": "/reports",
    "entities": "/entities",
    "products": "/products",
}


@bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard():
    profile = get_profile(current_user.id)
    if not profile:
        return redirect(current_app.config["ONBOARDING_PATH"])

    result = load_dashboard_stats(current_user.id, date.today())
    stats = result.stats
    symbol = common.currency_symbol()

    body = {
        "company_name": profile.company_name,
        "period": {"start": stats.start.isoformat(), "end": stats.end.isoformat()},
        "total_sales": stats.total_sales,
        "total_purchases": stats.total_purchases,
        "total_sales_display": format_currency(stats.total_sales, symbol),
        "total_purchases_display": format_currency(stats.total_purchases, symbol),
        "links": QUICK_LINKS,
    }
    if result.error:
        body["error"] = result.error
    return jsonify(body)


@bp.route("/onboarding", methods=["GET"])
@login_required
def onboarding_status():
    profile = get_profile(current_user.id)
    return jsonify({
        "has_profile": profile is not None,
        "company_name": profile.company_name if profile else None,
    })


@bp.route("/onboarding", methods=["POST"])
@login_required
def onboarding():
    payload = request.get_json(silent=True) or request.form.to_dict() or {}

    try:
        create_profile(current_user.id, payload.get("company_name"))
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({
        "success": True,
        "redirectUrl": current_app.config["DASHBOARD_PATH"],
    }), 201
