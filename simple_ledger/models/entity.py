from datetime import datetime

from simple_ledger.accounting_db import db

ENTITY_TYPES = ("customer", "vendor")


class Entity(db.Model):
    """A counterparty: a customer (for sales) or a vendor (for purchases)."""

    __tablename__ = "entities"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=False, index=True)
    name = db.Column(db.String(150), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # customer, vendor

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    # Enforce uniqueness across owner + name + type
    __table_args__ = (
        db.UniqueConstraint("user_id", "name", "type", name="uq_entity_user_name_type"),
        db.CheckConstraint("type IN ('customer', 'vendor')", name="ck_entity_type"),
    )
