"""
Client-side row validation.

A candidate row ``[name, amount, date]`` is accepted only when the name is
non-empty, the amount is a number greater than zero, and the date falls in
the current calendar month (month only; the year is not compared). The
server does not enforce this rule.
"""

from datetime import date, datetime
from typing import Any, Callable, List, Optional

Clock = Callable[[], datetime]


def parse_amount(value: Any) -> Optional[float]:
    """Numeric value of an amount cell, or None when it is not a number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def parse_date(value: Any) -> Optional[date]:
    """Parse a date cell (date object or ISO-8601 string)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


class RowValidator:
    """Check candidate rows before they are submitted."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or datetime.now

    def validate(self, row: List[Any]) -> List[str]:
        """
        Return the list of rule violations for ``row`` (empty when valid).
        """
        cells = list(row) + [None] * max(0, 3 - len(row))
        name, amount, row_date = cells[0], cells[1], cells[2]
        errors = []

        if name is None or name == '':
            errors.append("Name is required")

        numeric_amount = parse_amount(amount)
        if numeric_amount is None or numeric_amount <= 0:
            errors.append("Amount must be greater than 0")

        parsed_date = parse_date(row_date)
        current_month = self.clock().month
        if parsed_date is None:
            errors.append("Date is not a valid date")
        elif parsed_date.month != current_month:
            errors.append("Date must fall in the current month")

        return errors

    def is_valid(self, row: List[Any]) -> bool:
        return not self.validate(row)
