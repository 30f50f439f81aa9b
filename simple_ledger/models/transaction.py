# simple_ledger/models/transaction.py

from datetime import datetime, date

from simple_ledger.accounting_db import db
from simple_ledger.models.entity import Entity
from simple_ledger.models.product import Product

TRANSACTION_TYPES = ("sale", "purchase")

# Counterparty kind implied by each transaction kind
ENTITY_TYPE_FOR = {
    "sale": "customer",
    "purchase": "vendor",
}


class Transaction(db.Model):
    __tablename__ = "transactions"
    __table_args__ = (
        db.CheckConstraint("value > 0", name="ck_transaction_value_positive"),
        db.CheckConstraint("type IN ('sale', 'purchase')", name="ck_transaction_type"),
        db.Index("ix_transactions_user_date", "user_id", "date"),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False)

    date = db.Column(db.Date, default=date.today, nullable=False)

    # No database FK: deleting a counterparty/product keeps the history row
    entity_id = db.Column(db.Integer, nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)

    value = db.Column(db.Float, nullable=False)
    type = db.Column(db.String(20), nullable=False)  # sale, purchase

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    entity = db.relationship(
        Entity,
        primaryjoin="foreign(Transaction.entity_id) == Entity.id",
        viewonly=True,
        lazy="select",
    )
    product = db.relationship(
        Product,
        primaryjoin="foreign(Transaction.product_id) == Product.id",
        viewonly=True,
        lazy="select",
    )
