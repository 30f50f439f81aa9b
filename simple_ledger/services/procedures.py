# simple_ledger/services/procedures.py
"""
Server-side ledger operations.

Each public function here is one unit of work: it either commits every row
it touches or rolls the whole session back. Entry views never write the
entities/products/transactions tables any other way.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from simple_ledger.accounting_db import db
from simple_ledger.errors import BackendError, ValidationError, unknown_transaction_type
from simple_ledger.models.entity import ENTITY_TYPES, Entity
from simple_ledger.models.product import Product
from simple_ledger.models.transaction import TRANSACTION_TYPES, Transaction
from simple_ledger.utils.dates import month_bounds
from simple_ledger.utils.money import money
import simple_ledger.common as common


@dataclass
class MonthlyStats:
    start: date
    end: date
    total_sales: float = 0.0
    total_purchases: float = 0.0


@dataclass
class LedgerEntry:
    """One resolved-by-name row to insert."""

    date: date
    entity_name: str
    entity_type: str
    product_name: str
    value: float
    type: str


def _check_entry(entry: LedgerEntry) -> None:
    if entry.type not in TRANSACTION_TYPES:
        raise ValidationError(unknown_transaction_type(entry.type))
    if entry.entity_type not in ENTITY_TYPES:
        raise ValidationError(f"Unknown entity type {entry.entity_type!r}")
    if not (entry.entity_name or "").strip():
        raise ValidationError("Entity name is required")
    if not (entry.product_name or "").strip():
        raise ValidationError("Product name is required")
    # rows are stored rounded to cents
    if entry.value is None or not math.isfinite(entry.value) or money(entry.value) <= 0:
        raise ValidationError("Value must be a positive number")
    if not isinstance(entry.date, date):
        raise ValidationError("Missing or invalid date")


def resolve_or_create_entity(user_id: str, name: str, entity_type: str) -> Entity:
    """Return the user's (name, type) counterparty, creating it if needed.

    Must run inside a caller-owned transaction; only flushes.
    """
    name = name.strip()
    query = db.session.query(Entity).filter(
        Entity.user_id == user_id,
        Entity.name == name,
        Entity.type == entity_type,
    )
    entity = query.one_or_none()
    if entity:
        return entity

    entity = Entity(user_id=user_id, name=name, type=entity_type)
    db.session.add(entity)
    # A concurrent insert of the same key fails here and aborts the caller's unit of work
    db.session.flush()
    common.logger.debug(f"Created {entity_type} {name!r} for user {user_id}")
    return entity


def resolve_or_create_product(user_id: str, name: str) -> Product:
    name = name.strip()
    query = db.session.query(Product).filter(
        Product.user_id == user_id,
        Product.name == name,
    )
    product = query.one_or_none()
    if product:
        return product

    product = Product(user_id=user_id, name=name)
    db.session.add(product)
    db.session.flush()
    common.logger.debug(f"Created product {name!r} for user {user_id}")
    return product


def _insert_entry(user_id: str, entry: LedgerEntry) -> Transaction:
    entity = resolve_or_create_entity(user_id, entry.entity_name, entry.entity_type)
    product = resolve_or_create_product(user_id, entry.product_name)

    txn = Transaction(
        user_id=user_id,
        date=entry.date,
        entity_id=entity.id,
        product_id=product.id,
        value=money(entry.value),
        type=entry.type,
    )
    db.session.add(txn)
    db.session.flush()
    return txn


def create_transaction_atomic(
    user_id: str,
    txn_date: date,
    entity_name: str,
    entity_type: str,
    product_name: str,
    value: float,
    txn_type: str,
) -> Transaction:
    """Resolve-or-create counterparty and product, then insert the transaction.

    All three writes commit together or not at all.
    """
    entry = LedgerEntry(
        date=txn_date,
        entity_name=entity_name,
        entity_type=entity_type,
        product_name=product_name,
        value=value,
        type=txn_type,
    )
    _check_entry(entry)

    try:
        txn = _insert_entry(user_id, entry)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        common.logger.warning(f"create_transaction_atomic failed for user {user_id}: {e}")
        raise BackendError("Could not save the transaction") from e

    common.logger.info(f"Transaction {txn.id} ({txn.type} {txn.value}) saved for user {user_id}")
    return txn


def process_bulk_entries(user_id: str, entries: Iterable[LedgerEntry]) -> List[Transaction]:
    """Insert a batch of entries as one unit of work."""
    entries = list(entries)
    if not entries:
        raise ValidationError("No entries to save")
    for entry in entries:
        _check_entry(entry)

    try:
        created = [_insert_entry(user_id, entry) for entry in entries]
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        common.logger.warning(f"process_bulk_entries failed for user {user_id}: {e}")
        raise BackendError("Could not save the entries") from e

    common.logger.info(f"Bulk saved {len(created)} transactions for user {user_id}")
    return created


def get_monthly_stats(user_id: str, today: date) -> MonthlyStats:
    """Sales and purchase totals for the calendar month containing ``today``."""
    start, end = month_bounds(today)

    sales_sum = func.sum(
        case(
            (Transaction.type == "sale", Transaction.value),
            else_=0,
        )
    ).label("total_sales")

    purchases_sum = func.sum(
        case(
            (Transaction.type == "purchase", Transaction.value),
            else_=0,
        )
    ).label("total_purchases")

    row = (
        db.session.query(sales_sum, purchases_sum)
        .filter(Transaction.user_id == user_id)
        .filter(Transaction.date >= start)
        .filter(Transaction.date <= end)
        .one()
    )

    return MonthlyStats(
        start=start,
        end=end,
        total_sales=money(row.total_sales),
        total_purchases=money(row.total_purchases),
    )
