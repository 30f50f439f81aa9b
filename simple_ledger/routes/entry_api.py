# simple_ledger/routes/entry_api.py

from flask import Blueprint, abort, jsonify, request
from flask_login import current_user, login_required

from simple_ledger.errors import LedgerError
from simple_ledger.models.transaction import ENTITY_TYPE_FOR, TRANSACTION_TYPES
from simple_ledger.services.bulk_entry import submit_bulk
from simple_ledger.services.transaction_entry import EntryForm, form_from_payload
import simple_ledger.common as common

bp = Blueprint("entry_api", __name__, url_prefix="/entry")


def _payload():
    return request.get_json(silent=True) or request.form.to_dict() or {}


def _suggestions_json(suggestions):
    return {
        "query": suggestions.query,
        "matches": suggestions.matches,
        "create_new": suggestions.create_new,
    }


@bp.route("/bulk", methods=["POST"])
@login_required
def bulk_entry():
    payload = _payload()

    try:
        created = submit_bulk(
            current_user.id,
            payload.get("rows"),
            duration=payload.get("duration"),
            txn_type=payload.get("type") or "sale",
        )
    except LedgerError as e:
        return jsonify({"error": str(e)}), e.status_code

    return jsonify({"success": True, "count": len(created)}), 201


@bp.route("/<txn_type>", methods=["GET"])
@login_required
def entry_form(txn_type: str):
    if txn_type not in TRANSACTION_TYPES:
        abort(404)

    form = EntryForm(user_id=current_user.id, type=txn_type)
    form.load_suggestions()

    return jsonify({
        "type": txn_type,
        "entity_type": ENTITY_TYPE_FOR[txn_type],
        "date": form.date.isoformat(),
        "state": form.state,
        "entities": _suggestions_json(form.suggest_entities(request.args.get("entity_q", ""))),
        "products": _suggestions_json(form.suggest_products(request.args.get("product_q", ""))),
    })


@bp.route("/<txn_type>", methods=["POST"])
@login_required
def create_entry(txn_type: str):
    form = form_from_payload(current_user.id, txn_type, _payload())

    if not form.submit():
        return jsonify({
            "error": "; ".join(form.errors),
            "errors": form.errors,
            "state": form.state,
        }), form.error_status

    common.logger.debug(f"Entry {form.saved_transaction_id} saved via /entry/{txn_type}")

    return jsonify({
        "success": True,
        "state": form.state,
        "transaction_id": form.saved_transaction_id,
        # the date carries over to the next entry
        "date": form.date.isoformat(),
        "entity_names": form.entity_names,
        "product_names": form.product_names,
    }), 201
