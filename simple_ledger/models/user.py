# simple_ledger/models/user.py

import uuid
from datetime import datetime

from flask_login import UserMixin

from simple_ledger.accounting_db import db


def _new_user_id():
    return str(uuid.uuid4())


class User(UserMixin, db.Model):
    """A login identity, created on first OAuth or phone sign-in."""

    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=_new_user_id)
    name = db.Column(db.String(150))
    email = db.Column(db.String(255), unique=True)
    phone = db.Column(db.String(32), unique=True)

    # 'sub' claim returned by the OAuth provider
    provider_subject = db.Column(db.String(255), unique=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    profile = db.relationship("Profile", back_populates="user", uselist=False)
