"""
Arithmetic shared by the backend and the Streamlit pages.

Every function is pure: numbers in, numbers out. Inputs may be strings
straight from a form, so they go through to_number first.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Union

DateLike = Union[date, datetime, str, None]

# Fifty years of monthly payments
MAX_INSTALLMENTS = 600


def to_number(value: Any) -> float:
    """Lenient float conversion: None, blanks, NaN and garbage become 0.0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return 0.0 if isinstance(value, float) and math.isnan(value) else float(value)
    try:
        number = float(str(value).strip().replace(",", ""))
    except ValueError:
        return 0.0
    return 0.0 if math.isnan(number) else number


def parse_date(value: DateLike) -> Optional[date]:
    """Accept date/datetime objects or ISO strings ("2025-01-31", "2025-01-31T10:00:00Z")."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def refund_total(actual_fare: Any, used_amount: Any, service_charge: Any, airlines_penalty: Any) -> float:
    """Amount returned to the passenger; never negative."""
    total = to_number(actual_fare) - to_number(used_amount) - to_number(service_charge) - to_number(airlines_penalty)
    return total if total > 0 else 0.0


def reissue_total(fare_difference: Any, tax_difference: Any, service_fee: Any, airlines_penalty: Any) -> float:
    """Total charged for a reissue."""
    return (
        to_number(fare_difference)
        + to_number(tax_difference)
        + to_number(service_fee)
        + to_number(airlines_penalty)
    )


def add_months(start: date, months: int) -> date:
    """Shift by whole months, clamping the day to the end of the target month."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def installment_end_date(start: DateLike, number_of_installments: Any) -> Optional[date]:
    """Date of the last installment: start + (count - 1) months.

    None when there is no start date, no plan, or the plan runs past year 9999.
    """
    start_date = parse_date(start)
    try:
        count = int(to_number(number_of_installments))
        if start_date is None or count < 1:
            return None
        return add_months(start_date, count - 1)
    except (ValueError, OverflowError):
        return None


def due_amount(total: Any, paid: Any) -> float:
    return to_number(total) - to_number(paid)


def first_number(record: Mapping[str, Any], *keys: str) -> float:
    """First non-zero numeric value among keys (mirrors `a || b || 0`)."""
    for key in keys:
        number = to_number(record.get(key))
        if number:
            return number
    return 0.0


def sum_field(records: Iterable[Mapping[str, Any]], *keys: str) -> float:
    return sum(first_number(r, *keys) for r in records)


def payment_summary(records: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """
    Totals for a set of billable records.

    dueAmount is always totalAmount - paidAmount so the three figures
    reconcile exactly.
    """
    total = 0.0
    paid = 0.0
    for record in records:
        total += first_number(record, "totalAmount", "totalBill", "total_amount")
        paid += first_number(record, "paidAmount", "paid_amount")
    return {"totalAmount": total, "paidAmount": paid, "dueAmount": total - paid}
