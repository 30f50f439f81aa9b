"""Tests for report fetching, grouping and the in-memory report view."""

from datetime import date

import pytest

from simple_ledger.accounting_db import db
from simple_ledger.errors import NotFoundError
from simple_ledger.models import Transaction
from simple_ledger.services import procedures
from simple_ledger.services.entities import delete_entity
from simple_ledger.services.transaction_report import (
    EntityTotal,
    ReportRow,
    ReportView,
    delete_transaction,
    fetch_report_rows,
    format_subtotal,
    group_transactions,
    grouped_report_to_dict,
    report_filename,
)


def _row(id, product, entity, value, txn_type="sale", product_id=None, entity_id=None):
    return ReportRow(
        id=id,
        date=date(2025, 11, 1),
        type=txn_type,
        value=value,
        entity_id=entity_id,
        entity_name=entity,
        product_id=product_id,
        product_name=product,
    )


@pytest.fixture
def example_rows():
    return [
        _row(1, "A", "X", 100, product_id=1, entity_id=10),
        _row(2, "A", "X", 50, product_id=1, entity_id=10),
        _row(3, "A", "Y", 30, product_id=1, entity_id=11),
        _row(4, "B", "X", 10, product_id=2, entity_id=10),
    ]


class TestGroupTransactions:
    def test_worked_example(self, example_rows):
        report = group_transactions(example_rows)

        assert [g.name for g in report.products] == ["A", "B"]
        a, b = report.products
        assert a.total == 180
        assert [(s.name, s.total, s.count) for s in a.entities] == [("X", 150, 2), ("Y", 30, 1)]
        assert b.total == 10
        assert [(s.name, s.total, s.count) for s in b.entities] == [("X", 10, 1)]
        assert report.grand_total == 190

    def test_products_sorted_by_total_descending(self):
        rows = [
            _row(1, "Small", "X", 5, product_id=1, entity_id=1),
            _row(2, "Big", "X", 500, product_id=2, entity_id=1),
            _row(3, "Mid", "X", 50, product_id=3, entity_id=1),
        ]

        report = group_transactions(rows)

        assert [g.name for g in report.products] == ["Big", "Mid", "Small"]

    def test_totals_are_consistent(self):
        rows = [
            _row(i, f"P{i % 3}", f"E{i % 4}", 10.25 * (i + 1), product_id=i % 3, entity_id=i % 4)
            for i in range(20)
        ]

        report = group_transactions(rows)

        assert report.grand_total == pytest.approx(sum(g.total for g in report.products))
        for group in report.products:
            assert group.total == pytest.approx(sum(s.total for s in group.entities))
        assert sum(s.count for g in report.products for s in g.entities) == 20

    def test_missing_names_fall_back_to_unknown(self):
        rows = [
            _row(1, None, None, 20),
            _row(2, None, "X", 5, entity_id=3),
        ]

        report = group_transactions(rows)

        assert len(report.products) == 1
        group = report.products[0]
        assert group.key == "unknown"
        assert group.name == "Unknown"
        assert [s.name for s in group.entities] == ["Unknown", "X"]

    def test_groups_by_id_not_name(self):
        rows = [
            _row(1, "Shirt", "X", 5, product_id=1, entity_id=1),
            _row(2, "Shirt", "X", 7, product_id=2, entity_id=1),
        ]

        report = group_transactions(rows)

        assert len(report.products) == 2

    def test_empty(self):
        report = group_transactions([])

        assert report.products == []
        assert report.grand_total == 0


def test_subtotal_display_rule():
    assert format_subtotal(EntityTotal(key=1, name="X", total=150, count=2)) == "₹150 (2x)"
    assert format_subtotal(EntityTotal(key=1, name="Y", total=30, count=1)) == "₹30"


def test_grouped_report_dict(example_rows):
    body = grouped_report_to_dict(group_transactions(example_rows))

    assert body["grand_total"] == 190
    assert body["grand_total_display"] == "₹190"
    assert body["products"][0]["entities"][0]["display"] == "₹150 (2x)"


def test_report_filename():
    assert report_filename("sale", date(2025, 11, 1), date(2025, 11, 30), "xlsx") == \
        "Sales_Report_2025-11-01_to_2025-11-30.xlsx"
    assert report_filename("purchase", date(2025, 11, 1), date(2025, 11, 30), "pdf") == \
        "Purchases_Report_2025-11-01_to_2025-11-30.pdf"


class TestFetchReportRows:
    @pytest.fixture
    def seeded(self, ctx, user_id, other_user_id):
        procedures.create_transaction_atomic(user_id, date(2025, 11, 1), "X", "customer", "A", 100.0, "sale")
        procedures.create_transaction_atomic(user_id, date(2025, 11, 15), "Y", "customer", "A", 30.0, "sale")
        procedures.create_transaction_atomic(user_id, date(2025, 11, 30), "V", "vendor", "B", 20.0, "purchase")
        procedures.create_transaction_atomic(user_id, date(2025, 12, 1), "X", "customer", "A", 5.0, "sale")
        procedures.create_transaction_atomic(other_user_id, date(2025, 11, 2), "X", "customer", "A", 999.0, "sale")
        return user_id

    def test_inclusive_range_and_type(self, seeded):
        rows = fetch_report_rows(seeded, date(2025, 11, 1), date(2025, 11, 30), "sale")

        assert [r.value for r in rows] == [30.0, 100.0]
        assert {r.entity_name for r in rows} == {"X", "Y"}

    def test_all_types(self, seeded):
        rows = fetch_report_rows(seeded, date(2025, 11, 1), date(2025, 11, 30))

        assert len(rows) == 3
        assert rows[0].date == date(2025, 11, 30)

    def test_start_after_end_is_empty(self, seeded):
        assert fetch_report_rows(seeded, date(2025, 12, 1), date(2025, 11, 1), "sale") == []

    def test_other_users_rows_never_visible(self, seeded, other_user_id):
        rows = fetch_report_rows(other_user_id, date(2025, 1, 1), date(2025, 12, 31))

        assert [r.value for r in rows] == [999.0]

    def test_deleted_entity_shows_unknown(self, seeded):
        x = fetch_report_rows(seeded, date(2025, 11, 1), date(2025, 11, 1))[0]

        delete_entity(seeded, x.entity_id)
        rows = fetch_report_rows(seeded, date(2025, 11, 1), date(2025, 11, 1))

        assert len(rows) == 1
        assert rows[0].entity_name is None
        assert rows[0].to_dict()["entity_name"] == "Unknown"


class TestDeleteTransaction:
    def test_delete_own_transaction(self, ctx, user_id):
        txn = procedures.create_transaction_atomic(user_id, date(2025, 11, 1), "X", "customer", "A", 10.0, "sale")

        delete_transaction(user_id, txn.id)

        assert db.session.query(Transaction).count() == 0

    def test_cannot_delete_other_users_transaction(self, ctx, user_id, other_user_id):
        txn = procedures.create_transaction_atomic(user_id, date(2025, 11, 1), "X", "customer", "A", 10.0, "sale")

        with pytest.raises(NotFoundError):
            delete_transaction(other_user_id, txn.id)

        assert db.session.query(Transaction).count() == 1


class TestReportView:
    def _rows(self):
        return [
            _row(1, "A", "X", 100, "sale"),
            _row(2, "A", "V", 40, "purchase"),
            _row(3, "B", "Y", 30, "sale"),
        ]

    def test_apply_partitions_by_type(self):
        view = ReportView()
        assert view.apply(view.begin_fetch(), self._rows()) is True

        assert [r.id for r in view.transactions] == [1, 2, 3]
        assert [r.id for r in view.sales] == [1, 3]
        assert [r.id for r in view.purchases] == [2]

    def test_stale_fetch_is_dropped(self):
        view = ReportView()
        older = view.begin_fetch()
        newer = view.begin_fetch()

        assert view.apply(newer, self._rows()[:1]) is True
        assert view.apply(older, self._rows()) is False
        assert [r.id for r in view.transactions] == [1]

    def test_remove_drops_from_every_collection(self):
        view = ReportView()
        view.apply(view.begin_fetch(), self._rows())

        view.remove(1)
        view.remove(2)

        assert [r.id for r in view.transactions] == [3]
        assert [r.id for r in view.sales] == [3]
        assert view.purchases == []
        assert view.grouped("sale").grand_total == 30

    def test_fetch_in_flight_during_remove_cannot_resurrect(self):
        view = ReportView()
        view.apply(view.begin_fetch(), self._rows())
        in_flight = view.begin_fetch()

        view.remove(1)

        assert view.apply(in_flight, self._rows()) is False
        assert 1 not in [r.id for r in view.transactions]

    def test_refetch_after_delete_does_not_resurrect(self, ctx, user_id):
        txn = procedures.create_transaction_atomic(user_id, date(2025, 11, 1), "X", "customer", "A", 10.0, "sale")
        procedures.create_transaction_atomic(user_id, date(2025, 11, 2), "X", "customer", "A", 20.0, "sale")
        view = ReportView()
        view.load(user_id, date(2025, 11, 1), date(2025, 11, 30))

        delete_transaction(user_id, txn.id)
        view.remove(txn.id)
        view.load(user_id, date(2025, 11, 1), date(2025, 11, 30))

        assert [r.value for r in view.transactions] == [20.0]
        assert [r.value for r in view.sales] == [20.0]
