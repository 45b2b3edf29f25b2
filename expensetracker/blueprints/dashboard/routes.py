import calendar

from flask import Blueprint, render_template, request, flash
from flask_login import login_required, current_user
from pydantic import ValidationError
from ...repository import get_repository
from ...schemas import StatsFilters, format_validation_error
from ...stats import dashboard_stats


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


def period_filters(filter_cls, args):
    """Parse page filters, defaulting to the current month on first visit or bad input."""
    try:
        filters = filter_cls.from_args(args)
    except ValidationError as exc:
        message, _ = format_validation_error(exc)
        flash(message, "danger")
        return filter_cls().or_current_period()
    if not args:
        filters = filters.or_current_period()
    return filters


def period_label(month, year):
    if month and year:
        return f"{calendar.month_name[month]} {year}"
    if year:
        return str(year)
    if month:
        return calendar.month_name[month]
    return "All time"


@dashboard_bp.route("/")
@login_required
def index():
    filters = period_filters(StatsFilters, request.args)
    expenses = get_repository().list(current_user.id, **filters.model_dump())
    stats = dashboard_stats(expenses)

    by_category = stats["byCategory"]
    # First-seen category, as returned by the aggregation
    top_category = by_category[0]["category"] if by_category else None
    transaction_count = sum(row["count"] for row in by_category)

    return render_template(
        "dashboard/index.html",
        stats=stats,
        total=stats["total"],
        top_category=top_category,
        transaction_count=transaction_count,
        recent=stats["recent"],
        labels=[row["category"] for row in by_category],
        data=[row["amount"] for row in by_category],
        trend_labels=[row["date"] for row in stats["monthlyTrend"]],
        trend_data=[row["amount"] for row in stats["monthlyTrend"]],
        month=filters.month,
        year=filters.year,
        period=period_label(filters.month, filters.year),
        months=list(enumerate(calendar.month_name))[1:],
    )
