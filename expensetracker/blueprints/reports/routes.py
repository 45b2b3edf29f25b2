import csv
from io import StringIO
from flask import Blueprint, request, make_response
from flask_login import login_required, current_user
from ...repository import get_repository
from ...schemas import ExpenseFilters

reports_bp = Blueprint("reports", __name__, url_prefix="/reports")


@reports_bp.route("/export.csv")
@login_required
def export_csv():
    filters = ExpenseFilters.from_args(request.args)
    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(["Title", "Category", "Amount", "Date", "Description"])
    for exp in get_repository().list(current_user.id, **filters.model_dump()):
        writer.writerow([exp.title, exp.category, exp.amount, exp.date.date().isoformat(), exp.description or ""])
    response = make_response(output.getvalue())
    response.headers["Content-Disposition"] = "attachment; filename=expenses.csv"
    response.headers["Content-Type"] = "text/csv"
    return response
