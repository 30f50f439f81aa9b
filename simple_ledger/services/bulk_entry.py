# simple_ledger/services/bulk_entry.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from simple_ledger.errors import ValidationError, unknown_transaction_type
from simple_ledger.models.transaction import ENTITY_TYPE_FOR, TRANSACTION_TYPES
from simple_ledger.services import procedures
from simple_ledger.services.procedures import LedgerEntry
from simple_ledger.utils.dates import parse_month
from simple_ledger.utils.money import parse_positive_amount
import simple_ledger.common as common


@dataclass
class BulkRow:
    entity: str
    product: str
    value: Any


def parse_rows(raw_rows: Iterable[Dict[str, Any]]) -> List[BulkRow]:
    rows = []
    for raw in raw_rows or []:
        if not isinstance(raw, dict):
            continue
        rows.append(
            BulkRow(
                entity=str(raw.get("entity") or "").strip(),
                product=str(raw.get("product") or "").strip(),
                value=raw.get("value"),
            )
        )
    return rows


def valid_entries(rows: Iterable[BulkRow], txn_type: str, entry_date: date) -> List[LedgerEntry]:
    """
    Drop rows with a missing field or a non-positive/unparsable value and
    turn the rest into LedgerEntry records.
    """
    entity_type = ENTITY_TYPE_FOR[txn_type]
    entries = []
    for row in rows:
        amount = parse_positive_amount(row.value)
        if not row.entity or not row.product or amount is None:
            continue
        entries.append(
            LedgerEntry(
                date=entry_date,
                entity_name=row.entity,
                entity_type=entity_type,
                product_name=row.product,
                value=amount,
                type=txn_type,
            )
        )
    return entries


def submit_bulk(
    user_id: str,
    raw_rows: Iterable[Dict[str, Any]],
    duration: Optional[str] = None,
    txn_type: str = "sale",
) -> list:
    """Save all valid rows, dated the first day of the ``duration`` month.

    Raises ValidationError before any database call when the type or month is
    bad, or when no row survives filtering.
    """
    if txn_type not in TRANSACTION_TYPES:
        raise ValidationError(unknown_transaction_type(txn_type))

    if duration:
        entry_date = parse_month(duration)
        if entry_date is None:
            raise ValidationError(f"Invalid month {duration!r} (expected YYYY-MM)")
    else:
        entry_date = date.today().replace(day=1)

    rows = parse_rows(raw_rows)
    entries = valid_entries(rows, txn_type, entry_date)
    if not entries:
        raise ValidationError("No valid entries to save: each row needs a name, a product and a positive value")

    skipped = len(rows) - len(entries)
    if skipped:
        common.logger.debug(f"Bulk entry for user {user_id}: skipped {skipped} incomplete rows")

    return procedures.process_bulk_entries(user_id, entries)
