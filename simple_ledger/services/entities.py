from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from sqlalchemy import func

from simple_ledger.accounting_db import db
from simple_ledger.errors import NotFoundError, entity_not_found
from simple_ledger.models.entity import Entity
from simple_ledger.models.product import Product
from simple_ledger.models.transaction import Transaction
from simple_ledger.utils.money import money
import simple_ledger.common as common

UNKNOWN_LABEL = "Unknown"


@dataclass
class EntityTransactionRow:
    id: int
    date: date
    product_name: str
    value: float
    type: str


@dataclass
class EntityDetail:
    entity: Entity
    start: date
    end: date
    transactions: List[EntityTransactionRow] = field(default_factory=list)

    @property
    def total(self) -> float:
        return money(sum(t.value for t in self.transactions))


def get_entities(user_id, entity_type=None):
    """The user's counterparties ordered by name, optionally one type only."""
    query = db.session.query(Entity).filter(Entity.user_id == user_id)
    if entity_type:
        query = query.filter(Entity.type == entity_type)
    return query.order_by(func.lower(Entity.name), Entity.name, Entity.id).all()


def get_entity(user_id, entity_id):
    """
    Return a single Entity owned by the user, or None if not found.
    """
    return (
        db.session.query(Entity)
        .filter(Entity.id == entity_id, Entity.user_id == user_id)
        .one_or_none()
    )


def delete_entity(user_id, entity_id) -> None:
    """Remove a counterparty from the user's list.

    Transactions that reference it are left untouched and will show the
    counterparty as Unknown from now on.
    """
    entity = get_entity(user_id, entity_id)
    if not entity:
        raise NotFoundError(entity_not_found(entity_id))

    db.session.delete(entity)
    db.session.commit()
    common.logger.info(f"Entity {entity_id} ({entity.name!r}) deleted by user {user_id}")


def get_entity_detail(user_id, entity_id, start: date, end: date) -> EntityDetail:
    entity = get_entity(user_id, entity_id)
    if not entity:
        raise NotFoundError(entity_not_found(entity_id))

    rows = (
        db.session.query(
            Transaction.id,
            Transaction.date,
            Transaction.value,
            Transaction.type,
            Product.name.label("product_name"),
        )
        .select_from(Transaction)
        .outerjoin(Product, Transaction.product_id == Product.id)
        .filter(Transaction.user_id == user_id)
        .filter(Transaction.entity_id == entity.id)
        .filter(Transaction.date >= start)
        .filter(Transaction.date <= end)
        .order_by(Transaction.date.desc(), Transaction.id.desc())
        .all()
    )

    return EntityDetail(
        entity=entity,
        start=start,
        end=end,
        transactions=[
            EntityTransactionRow(
                id=r.id,
                date=r.date,
                product_name=r.product_name or UNKNOWN_LABEL,
                value=money(r.value),
                type=r.type,
            )
            for r in rows
        ],
    )
