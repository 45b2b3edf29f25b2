"""Dashboard statistics over an owner's expenses."""

from datetime import date, datetime
from numbers import Number

RECENT_LIMIT = 5


def _amount(exp) -> int:
    # Corrupt rows count as zero so one bad amount cannot break the dashboard
    value = getattr(exp, "amount", None)
    if isinstance(value, Number) and not isinstance(value, bool):
        return value if value == value else 0
    for convert in (int, float):
        try:
            result = convert(value)
        except (TypeError, ValueError):
            continue
        return result if result == result else 0
    return 0


def _day(value) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def summarize(expenses):
    """Compute ``total``, ``byCategory`` and ``monthlyTrend``.

    ``byCategory`` keeps the order in which each category is first seen in
    ``expenses``; it is not ranked by amount. ``monthlyTrend`` holds one
    entry per calendar day, ascending.
    """
    total = 0
    by_category = {}
    by_day = {}
    for exp in expenses:
        amount = _amount(exp)
        total += amount

        bucket = by_category.setdefault(exp.category, {"category": exp.category, "amount": 0, "count": 0})
        bucket["amount"] += amount
        bucket["count"] += 1

        day = _day(exp.date)
        by_day[day] = by_day.get(day, 0) + amount

    return {
        "total": total,
        "byCategory": list(by_category.values()),
        "monthlyTrend": [{"date": d, "amount": by_day[d]} for d in sorted(by_day)],
    }


def dashboard_stats(expenses):
    """``summarize`` plus the most recent expenses; expects newest-first input."""
    stats = summarize(expenses)
    stats["recent"] = list(expenses[:RECENT_LIMIT])
    return stats
