# Import models so Alembic sees them
from simple_ledger.models.user import User
from simple_ledger.models.profile import Profile
from simple_ledger.models.entity import Entity, ENTITY_TYPES
from simple_ledger.models.product import Product
from simple_ledger.models.transaction import Transaction, TRANSACTION_TYPES, ENTITY_TYPE_FOR

__all__ = [
    "User",
    "Profile",
    "Entity",
    "ENTITY_TYPES",
    "Product",
    "Transaction",
    "TRANSACTION_TYPES",
    "ENTITY_TYPE_FOR",
]
