from datetime import date

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from simple_ledger.errors import LedgerError, ValidationError
from simple_ledger.services.entities import delete_entity, get_entities, get_entity_detail
from simple_ledger.services.products import delete_product, get_product_detail, get_products
from simple_ledger.utils.dates import parse_iso_date

bp = Blueprint("catalog_api", __name__)

CONFIRM_VALUES = ("1", "true", "yes", "on")


def _search(items, text):
    """Case-insensitive substring filter on name."""
    needle = (text or "").strip().lower()
    if not needle:
        return items
    return [i for i in items if needle in i.name.lower()]


def _confirmed():
    payload = request.get_json(silent=True) or {}
    value = payload.get("confirm", request.args.get("confirm", ""))
    return str(value).strip().lower() in CONFIRM_VALUES


def _entity_json(e):
    return {"id": e.id, "name": e.name, "type": e.type}


def _product_json(p):
    return {"id": p.id, "name": p.name}


@bp.route("/entities", methods=["GET"])
@login_required
def list_entities():
    entities = _search(get_entities(current_user.id), request.args.get("q"))
    return jsonify([_entity_json(e) for e in entities])


@bp.route("/entities/<int:entity_id>", methods=["GET"])
@login_required
def entity_detail(entity_id: int):
    today = date.today()
    raw_start = request.args.get("start")
    raw_end = request.args.get("end")

    try:
        start = parse_iso_date(raw_start) if raw_start else today.replace(day=1)
        end = parse_iso_date(raw_end) if raw_end else today
        if start is None or end is None:
            raise ValidationError("Invalid 'start' or 'end' (expected YYYY-MM-DD)")
        detail = get_entity_detail(current_user.id, entity_id, start, end)
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({
        "entity": _entity_json(detail.entity),
        "start": detail.start.isoformat(),
        "end": detail.end.isoformat(),
        "total": detail.total,
        "transactions": [
            {
                "id": t.id,
                "date": t.date.isoformat(),
                "product_name": t.product_name,
                "value": t.value,
                "type": t.type,
            }
            for t in detail.transactions
        ],
    })


@bp.route("/entities/<int:entity_id>", methods=["DELETE"])
@login_required
def remove_entity(entity_id: int):
    if not _confirmed():
        return jsonify({"error": "Deletion must be confirmed (confirm=true)"}), 400

    try:
        delete_entity(current_user.id, entity_id)
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({"status": "ok"}), 200


@bp.route("/products", methods=["GET"])
@login_required
def list_products():
    products = _search(get_products(current_user.id), request.args.get("q"))
    return jsonify([_product_json(p) for p in products])


@bp.route("/products/<int:product_id>", methods=["GET"])
@login_required
def product_detail(product_id: int):
    try:
        detail = get_product_detail(current_user.id, product_id)
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({
        "product": _product_json(detail.product),
        "total_sales": detail.total_sales,
        "total_purchases": detail.total_purchases,
        "customers": detail.customers,
        "vendors": detail.vendors,
    })


@bp.route("/products/<int:product_id>", methods=["DELETE"])
@login_required
def remove_product(product_id: int):
    if not _confirmed():
        return jsonify({"error": "Deletion must be confirmed (confirm=true)"}), 400

    try:
        delete_product(current_user.id, product_id)
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({"status": "ok"}), 200
