from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from simple_ledger.accounting_db import db
from simple_ledger.services import procedures
from simple_ledger.services.procedures import MonthlyStats
from simple_ledger.utils.dates import month_bounds
import simple_ledger.common as common


@dataclass
class DashboardStats:
    stats: MonthlyStats
    error: Optional[str] = None


def load_dashboard_stats(user_id, today: date) -> DashboardStats:
    """Current-month totals; a failed query degrades to zeros plus a notice."""
    try:
        return DashboardStats(stats=procedures.get_monthly_stats(user_id, today))
    except SQLAlchemyError as e:
        db.session.rollback()
        common.logger.warning(f"Monthly stats failed for user {user_id}: {e}")
        start, end = month_bounds(today)
        return DashboardStats(
            stats=MonthlyStats(start=start, end=end),
            error="Could not load this month's totals",
        )
