from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from ...repository import get_repository
from ...schemas import CATEGORIES, ExpenseDraft, ExpenseFilters, StatsFilters
from ...stats import dashboard_stats


api_bp = Blueprint("api", __name__, url_prefix="/api")


@api_bp.route("/expenses", methods=["GET"])
@login_required
def list_expenses():
    filters = ExpenseFilters.from_args(request.args)
    expenses = get_repository().list(current_user.id, **filters.model_dump())
    return jsonify([exp.to_dict() for exp in expenses])


@api_bp.route("/expenses", methods=["POST"])
@login_required
def create_expense():
    # ValidationError and database failures are turned into responses by errors.py
    draft = ExpenseDraft.model_validate(request.get_json(silent=True) or {})
    exp = get_repository().create(current_user.id, draft)
    return jsonify(exp.to_dict()), 201


@api_bp.route("/expenses/<int:expense_id>", methods=["DELETE"])
@login_required
def delete_expense(expense_id):
    get_repository().delete(current_user.id, expense_id)
    return "", 204


@api_bp.route("/stats", methods=["GET"])
@login_required
def stats():
    filters = StatsFilters.from_args(request.args)
    expenses = get_repository().list(current_user.id, **filters.model_dump())
    result = dashboard_stats(expenses)
    result["recent"] = [exp.to_dict() for exp in result["recent"]]
    return jsonify(result)


@api_bp.route("/categories", methods=["GET"])
@login_required
def categories():
    return jsonify(list(CATEGORIES))


@api_bp.route("/auth/user", methods=["GET"])
@login_required
def auth_user():
    return jsonify(current_user.to_dict())
