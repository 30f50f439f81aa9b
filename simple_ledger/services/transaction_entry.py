# simple_ledger/services/transaction_entry.py
"""
Single transaction entry form.

The form moves through ``editing -> validating -> saving -> success|error``.
Validation runs entirely in memory; only a form that validates reaches
``procedures.create_transaction_atomic``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, Optional

from simple_ledger.errors import LedgerError
from simple_ledger.models.transaction import ENTITY_TYPE_FOR, TRANSACTION_TYPES
from simple_ledger.services import procedures
from simple_ledger.services.entities import get_entities
from simple_ledger.services.products import get_products
from simple_ledger.utils.dates import parse_iso_date
from simple_ledger.utils.money import parse_positive_amount
import simple_ledger.common as common

EDITING = "editing"
VALIDATING = "validating"
SAVING = "saving"
SUCCESS = "success"
ERROR = "error"


@dataclass
class Suggestions:
    matches: List[str]
    # True when the typed text names nothing that exists yet
    create_new: bool
    query: str


def suggest(names: List[str], text: str) -> Suggestions:
    """Case-insensitive substring lookahead over an in-memory name list."""
    query = (text or "").strip()
    needle = query.lower()
    matches = [n for n in names if needle in n.lower()]
    exact = any(n.lower() == needle for n in names)
    return Suggestions(matches=matches, create_new=bool(query) and not exact, query=query)


@dataclass
class EntryForm:
    user_id: str
    type: str
    date: date = field(default_factory=date.today)

    # Text typed into the lookahead boxes
    entity_search: str = ""
    product_search: str = ""

    # Names picked from the suggestion lists, if any
    entity_selected: Optional[str] = None
    product_selected: Optional[str] = None

    value: str = ""

    state: str = EDITING
    errors: List[str] = field(default_factory=list)
    entity_names: List[str] = field(default_factory=list)
    product_names: List[str] = field(default_factory=list)
    saved_transaction_id: Optional[int] = None
    # HTTP status matching the last failure
    error_status: int = 400

    @property
    def entity_type(self) -> Optional[str]:
        return ENTITY_TYPE_FOR.get(self.type)

    @property
    def entity_name(self) -> str:
        """The picked counterparty, falling back to the trimmed search text."""
        return (self.entity_selected or self.entity_search or "").strip()

    @property
    def product_name(self) -> str:
        return (self.product_selected or self.product_search or "").strip()

    def load_suggestions(self) -> None:
        """Refresh the in-memory name lists for this user and entity type."""
        if self.entity_type is None:
            self.entity_names = []
        else:
            self.entity_names = [e.name for e in get_entities(self.user_id, self.entity_type)]
        self.product_names = [p.name for p in get_products(self.user_id)]

    def suggest_entities(self, text: Optional[str] = None) -> Suggestions:
        return suggest(self.entity_names, self.entity_search if text is None else text)

    def suggest_products(self, text: Optional[str] = None) -> Suggestions:
        return suggest(self.product_names, self.product_search if text is None else text)

    def validate(self) -> bool:
        self.state = VALIDATING
        errors = []

        if self.type not in TRANSACTION_TYPES:
            errors.append(f"Unknown transaction type {self.type!r}")
        if not self.entity_name:
            errors.append("Customer/vendor name is required")
        if not self.product_name:
            errors.append("Product name is required")
        if str(self.value or "").strip() == "":
            errors.append("Value is required")
        elif parse_positive_amount(self.value) is None:
            errors.append("Value must be a positive number")
        if not isinstance(self.date, date):
            errors.append("Missing or invalid date")

        self.errors = errors
        if errors:
            self.state = ERROR
            self.error_status = 400
            return False
        return True

    def submit(self, create: Callable = None) -> bool:
        """Validate and save. Returns True on success.

        ``create`` defaults to ``procedures.create_transaction_atomic``.
        """
        if not self.validate():
            common.logger.debug(f"Entry rejected for user {self.user_id}: {self.errors}")
            return False

        create = create or procedures.create_transaction_atomic
        self.state = SAVING
        try:
            txn = create(
                self.user_id,
                self.date,
                self.entity_name,
                self.entity_type,
                self.product_name,
                parse_positive_amount(self.value),
                self.type,
            )
        except LedgerError as e:
            self.errors = [str(e)]
            self.state = ERROR
            self.error_status = e.status_code
            return False

        self.saved_transaction_id = txn.id
        self.state = SUCCESS
        self.reset()
        self.load_suggestions()
        return True

    def reset(self) -> None:
        """Clear the inputs, keeping the date for the next entry."""
        self.entity_search = ""
        self.product_search = ""
        self.entity_selected = None
        self.product_selected = None
        self.value = ""
        self.errors = []


def form_from_payload(user_id: str, txn_type: str, payload: dict) -> EntryForm:
    """Build an EntryForm from a JSON/form body.

    An unparsable date is left as None so validation reports it.
    """
    raw_date = payload.get("date")
    txn_date = date.today() if raw_date in (None, "") else parse_iso_date(raw_date)

    return EntryForm(
        user_id=user_id,
        type=txn_type,
        date=txn_date,
        entity_search=payload.get("entity_search") or payload.get("entity") or "",
        entity_selected=payload.get("entity_selected") or None,
        product_search=payload.get("product_search") or payload.get("product") or "",
        product_selected=payload.get("product_selected") or None,
        value="" if payload.get("value") is None else str(payload.get("value")),
    )
