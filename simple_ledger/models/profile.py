from datetime import datetime

from simple_ledger.accounting_db import db


class Profile(db.Model):
    __tablename__ = "profiles"

    # One profile per user, keyed by the user id itself
    id = db.Column(db.String(36), db.ForeignKey("users.id"), primary_key=True)
    company_name = db.Column(db.String(200), nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    user = db.relationship("User", back_populates="profile")
