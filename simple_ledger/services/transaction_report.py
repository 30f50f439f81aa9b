# simple_ledger/services/transaction_report.py
"""
Report queries, grouping and the rows shared by the Excel and PDF exports.

ReportView is not used by the HTTP routes, which are stateless. It models the
collections a report page keeps on the client (all rows, sales, purchases)
and how fetch results and local deletes update them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from simple_ledger.accounting_db import db
from simple_ledger.errors import NotFoundError, transaction_not_found
from simple_ledger.models.entity import Entity
from simple_ledger.models.product import Product
from simple_ledger.models.transaction import Transaction
from simple_ledger.utils.money import format_currency, money
import simple_ledger.common as common

UNKNOWN_LABEL = "Unknown"
UNKNOWN_KEY = "unknown"

REPORT_TITLES = {
    "sale": "Sales",
    "purchase": "Purchases",
}


@dataclass
class ReportRow:
    id: int
    date: date
    type: str
    value: float
    entity_id: Optional[int]
    entity_name: Optional[str]
    product_id: Optional[int]
    product_name: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "type": self.type,
            "value": money(self.value),
            "entity_id": self.entity_id,
            "entity_name": self.entity_name or UNKNOWN_LABEL,
            "product_id": self.product_id,
            "product_name": self.product_name or UNKNOWN_LABEL,
        }


@dataclass
class EntityTotal:
    key: Any
    name: str
    total: float = 0.0
    count: int = 0


@dataclass
class ProductGroup:
    key: Any
    name: str
    total: float = 0.0
    entities: List[EntityTotal] = field(default_factory=list)


@dataclass
class GroupedReport:
    products: List[ProductGroup] = field(default_factory=list)
    grand_total: float = 0.0


def fetch_report_rows(user_id, start: date, end: date, txn_type: Optional[str] = None) -> List[ReportRow]:
    """
    The user's transactions with start <= date <= end, newest first, with
    counterparty and product names outer-joined (None once deleted).
    """
    if start and end and start > end:
        return []

    query = (
        db.session.query(
            Transaction.id,
            Transaction.date,
            Transaction.type,
            Transaction.value,
            Transaction.entity_id,
            Entity.name.label("entity_name"),
            Transaction.product_id,
            Product.name.label("product_name"),
        )
        .select_from(Transaction)
        .outerjoin(Entity, Transaction.entity_id == Entity.id)
        .outerjoin(Product, Transaction.product_id == Product.id)
        .filter(Transaction.user_id == user_id)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
    )

    if start:
        query = query.filter(Transaction.date >= start)

    if end:
        query = query.filter(Transaction.date <= end)

    if txn_type:
        query = query.filter(Transaction.type == txn_type)

    return [
        ReportRow(
            id=r.id,
            date=r.date,
            type=r.type,
            value=float(r.value or 0.0),
            entity_id=r.entity_id,
            entity_name=r.entity_name,
            product_id=r.product_id,
            product_name=r.product_name,
        )
        for r in query.all()
    ]


def _group_key(row_id, name):
    if row_id is not None:
        return row_id
    return name or UNKNOWN_KEY


def group_transactions(rows: Iterable[ReportRow]) -> GroupedReport:
    """Group by product, then by counterparty within each product.

    Products are ordered by total and counterparties by sub-total, both
    descending; ties keep the order rows were first seen in.
    """
    products: Dict[Any, ProductGroup] = {}
    entities: Dict[Any, Dict[Any, EntityTotal]] = {}
    grand_total = 0.0

    for row in rows:
        value = float(row.value or 0.0)
        grand_total += value

        product_key = _group_key(row.product_id, row.product_name)
        group = products.get(product_key)
        if group is None:
            group = products[product_key] = ProductGroup(
                key=product_key,
                name=row.product_name or UNKNOWN_LABEL,
            )
            entities[product_key] = {}
        group.total += value

        entity_key = _group_key(row.entity_id, row.entity_name)
        sub = entities[product_key].get(entity_key)
        if sub is None:
            sub = entities[product_key][entity_key] = EntityTotal(
                key=entity_key,
                name=row.entity_name or UNKNOWN_LABEL,
            )
        sub.total += value
        sub.count += 1

    ordered = []
    for key, group in products.items():
        group.total = money(group.total)
        subs = sorted(entities[key].values(), key=lambda s: s.total, reverse=True)
        for sub in subs:
            sub.total = money(sub.total)
        group.entities = subs
        ordered.append(group)

    ordered.sort(key=lambda g: g.total, reverse=True)
    return GroupedReport(products=ordered, grand_total=money(grand_total))


def format_subtotal(sub: EntityTotal, symbol: str = "₹") -> str:
    """Sub-totals built from more than one entry carry the entry count."""
    amount = format_currency(sub.total, symbol)
    if sub.count > 1:
        return f"{amount} ({sub.count}x)"
    return amount


COUNTERPARTY_LABELS = {
    "sale": "Customer",
    "purchase": "Vendor",
}

PRODUCT_LINE = "product"
ENTITY_LINE = "entity"
TOTAL_LINE = "total"


@dataclass
class ExportLine:
    kind: str
    label: str
    count: int
    amount: float
    entity: Optional[EntityTotal] = None


def counterparty_header(txn_type: Optional[str]) -> str:
    return f"Product / {COUNTERPARTY_LABELS.get(txn_type, 'Counterparty')}"


def export_lines(report: GroupedReport) -> List[ExportLine]:
    """Flatten a grouped report into the rows every export writes.

    Each product line is followed by its counterparty lines; a single
    grand total line closes the list.
    """
    lines = []
    for group in report.products:
        lines.append(ExportLine(
            kind=PRODUCT_LINE,
            label=group.name,
            count=sum(s.count for s in group.entities),
            amount=group.total,
        ))
        for sub in group.entities:
            lines.append(ExportLine(
                kind=ENTITY_LINE,
                label=sub.name,
                count=sub.count,
                amount=sub.total,
                entity=sub,
            ))
    lines.append(ExportLine(
        kind=TOTAL_LINE,
        label="Grand Total",
        count=sum(line.count for line in lines if line.kind == ENTITY_LINE),
        amount=report.grand_total,
    ))
    return lines


def grouped_report_to_dict(report: GroupedReport, symbol: str = "₹") -> Dict[str, Any]:
    return {
        "grand_total": report.grand_total,
        "grand_total_display": format_currency(report.grand_total, symbol),
        "products": [
            {
                "key": g.key,
                "name": g.name,
                "total": g.total,
                "total_display": format_currency(g.total, symbol),
                "entities": [
                    {
                        "key": s.key,
                        "name": s.name,
                        "total": s.total,
                        "count": s.count,
                        "display": format_subtotal(s, symbol),
                    }
                    for s in g.entities
                ],
            }
            for g in report.products
        ],
    }


def report_title(txn_type: Optional[str]) -> str:
    return REPORT_TITLES.get(txn_type, "Transactions")


def report_filename(txn_type: Optional[str], start: date, end: date, ext: str) -> str:
    """e.g. Sales_Report_2025-11-01_to_2025-11-30.xlsx"""
    return f"{report_title(txn_type)}_Report_{start.isoformat()}_to_{end.isoformat()}.{ext}"


def delete_transaction(user_id, transaction_id) -> None:
    txn = (
        db.session.query(Transaction)
        .filter(Transaction.id == transaction_id, Transaction.user_id == user_id)
        .one_or_none()
    )
    if not txn:
        raise NotFoundError(transaction_not_found(transaction_id))

    db.session.delete(txn)
    db.session.commit()
    common.logger.info(f"Transaction {transaction_id} deleted by user {user_id}")


class ReportView:
    """In-memory report collections for one viewer.

    Holds the raw rows plus the sales and purchases partitions. Fetch results
    are applied through generation tokens: only the newest fetch may replace
    the collections, and a removal invalidates every fetch already in flight.
    """

    def __init__(self):
        self.generation = 0
        self.transactions: List[ReportRow] = []
        self.sales: List[ReportRow] = []
        self.purchases: List[ReportRow] = []

    def begin_fetch(self) -> int:
        self.generation += 1
        return self.generation

    def apply(self, token: int, rows: Iterable[ReportRow]) -> bool:
        """Install a fetch result. Returns False for a superseded fetch."""
        if token != self.generation:
            common.logger.debug(f"Dropping stale report fetch {token} (current {self.generation})")
            return False
        self._replace(list(rows))
        return True

    def load(self, user_id, start: date, end: date) -> bool:
        token = self.begin_fetch()
        return self.apply(token, fetch_report_rows(user_id, start, end))

    def remove(self, transaction_id: int) -> None:
        """Drop a transaction from all three collections at once."""
        self.generation += 1
        self._replace([r for r in self.transactions if r.id != transaction_id])

    def _replace(self, rows: List[ReportRow]) -> None:
        sales = [r for r in rows if r.type == "sale"]
        purchases = [r for r in rows if r.type == "purchase"]
        self.transactions, self.sales, self.purchases = rows, sales, purchases

    def grouped(self, txn_type: Optional[str] = None) -> GroupedReport:
        if txn_type == "sale":
            return group_transactions(self.sales)
        if txn_type == "purchase":
            return group_transactions(self.purchases)
        return group_transactions(self.transactions)
