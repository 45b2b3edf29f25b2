import calendar

from flask import Blueprint, render_template, request, redirect, url_for, flash
from flask_login import login_required, current_user
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
import structlog
from ...errors import persistence_error_message
from ...repository import get_repository
from ...schemas import CATEGORIES, ExpenseDraft, ExpenseFilters, format_validation_error
from ..auth.routes import safe_next
from ..dashboard.routes import period_filters, period_label


expenses_bp = Blueprint("expenses", __name__, url_prefix="/expenses")
log = structlog.get_logger(__name__)


@expenses_bp.route("/")
@login_required
def list_expenses():
    filters = period_filters(ExpenseFilters, request.args)
    expenses = get_repository().list(current_user.id, **filters.model_dump())
    return render_template(
        "expenses/list.html",
        expenses=expenses,
        total=sum(exp.amount for exp in expenses),
        filters=filters,
        period=period_label(filters.month, filters.year),
        categories=CATEGORIES,
        months=list(enumerate(calendar.month_name))[1:],
    )


@expenses_bp.route("/create", methods=["POST"])
@login_required
def create_expense():
    back = safe_next(request.form.get("next")) or url_for("expenses.list_expenses")
    try:
        draft = ExpenseDraft.model_validate(request.form.to_dict())
    except ValidationError as exc:
        message, _ = format_validation_error(exc)
        log.warning("validation_failed", path=request.path, message=message)
        flash(message, "danger")
        return redirect(back)

    try:
        get_repository().create(current_user.id, draft)
    except SQLAlchemyError as e:
        log.error("expense_create_failed", user_id=current_user.id, exc_info=e)
        flash(persistence_error_message(e), "danger")
        return redirect(back)

    flash("Expense added", "success")
    return redirect(back)


@expenses_bp.route("/<int:expense_id>/delete", methods=["POST"])
@login_required
def delete_expense(expense_id):
    if get_repository().delete(current_user.id, expense_id):
        flash("Expense deleted", "info")
    else:
        flash("Expense not found", "warning")
    return redirect(request.referrer or url_for("expenses.list_expenses"))
