"""Tests for bulk entry filtering and submission."""

from datetime import date

import pytest

from simple_ledger.accounting_db import db
from simple_ledger.errors import ValidationError
from simple_ledger.models import Entity, Transaction
from simple_ledger.services import procedures
from simple_ledger.services.bulk_entry import parse_rows, submit_bulk, valid_entries


def test_valid_entries_filters_incomplete_rows():
    rows = parse_rows([
        {"entity": "X", "product": "A", "value": "100"},
        {"entity": "", "product": "A", "value": "100"},
        {"entity": "X", "product": "  ", "value": "100"},
        {"entity": "X", "product": "A", "value": "0"},
        {"entity": "X", "product": "A", "value": "-3"},
        {"entity": "X", "product": "A", "value": "ten"},
        {"entity": " Y ", "product": "B", "value": 12.5},
        "not a row",
    ])

    entries = valid_entries(rows, "sale", date(2025, 11, 1))

    assert [(e.entity_name, e.product_name, e.value) for e in entries] == [("X", "A", 100.0), ("Y", "B", 12.5)]
    assert all(e.entity_type == "customer" and e.type == "sale" for e in entries)


def test_zero_valid_rows_is_an_error_without_db_call(monkeypatch):
    calls = []
    monkeypatch.setattr(procedures, "process_bulk_entries", lambda *a: calls.append(a))

    with pytest.raises(ValidationError):
        submit_bulk("u1", [{"entity": "X", "product": "", "value": "5"}], duration="2025-11")

    assert calls == []


def test_bad_month_rejected():
    with pytest.raises(ValidationError):
        submit_bulk("u1", [{"entity": "X", "product": "A", "value": "5"}], duration="November")


def test_bad_type_rejected():
    with pytest.raises(ValidationError):
        submit_bulk("u1", [{"entity": "X", "product": "A", "value": "5"}], txn_type="gift")


def test_rows_dated_first_of_duration_month(ctx, user_id):
    created = submit_bulk(
        user_id,
        [
            {"entity": "X", "product": "A", "value": "100"},
            {"entity": "X", "product": "A", "value": "50"},
            {"entity": "Y", "product": "", "value": "50"},
        ],
        duration="2025-10",
    )

    assert len(created) == 2
    dates = {t.date for t in db.session.query(Transaction).filter_by(user_id=user_id)}
    assert dates == {date(2025, 10, 1)}
    assert db.session.query(Entity).filter_by(user_id=user_id).count() == 1


def test_purchase_bulk_creates_vendors(ctx, user_id):
    submit_bulk(user_id, [{"entity": "Mill Co", "product": "Yarn", "value": "80"}], duration="2025-10", txn_type="purchase")

    entity = db.session.query(Entity).filter_by(user_id=user_id).one()
    assert entity.type == "vendor"


def test_sub_cent_row_is_skipped_not_fatal(ctx, user_id):
    created = submit_bulk(
        user_id,
        [
            {"entity": "X", "product": "A", "value": "0.004"},
            {"entity": "Y", "product": "B", "value": "75"},
        ],
        duration="2025-10",
    )

    assert len(created) == 1
    assert [t.value for t in db.session.query(Transaction).filter_by(user_id=user_id)] == [75.0]
