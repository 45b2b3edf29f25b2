"""
Tests for the JSON API.
"""

from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from expensetracker.extensions import db
from expensetracker.models import Expense
from expensetracker.repository import ExpenseRepository


class TestAuthentication:

    def test_endpoints_require_session(self, client):
        for method, path in [
            ("get", "/api/expenses"),
            ("post", "/api/expenses"),
            ("delete", "/api/expenses/1"),
            ("get", "/api/stats"),
            ("get", "/api/categories"),
            ("get", "/api/auth/user"),
        ]:
            resp = getattr(client, method)(path)
            assert resp.status_code == 401, path
            assert resp.get_json() == {"message": "Unauthorized"}

    def test_current_user(self, auth_client):
        resp = auth_client.get("/api/auth/user")
        assert resp.status_code == 200
        assert resp.get_json()["id"] == "user-1"
        assert resp.get_json()["email"] == "one@example.com"


class TestListExpenses:

    def test_returns_own_expenses_newest_first(self, auth_client, make_user, add_expense):
        make_user("user-2")
        add_expense("user-1", title="older", date="2025-01-01")
        add_expense("user-1", title="newer", date="2025-01-20")
        add_expense("user-2", title="foreign", date="2025-01-10")

        resp = auth_client.get("/api/expenses")
        assert resp.status_code == 200
        body = resp.get_json()
        assert [e["title"] for e in body] == ["newer", "older"]
        assert body[0]["userId"] == "user-1"
        assert body[0]["date"] == "2025-01-20T00:00:00.000Z"

    def test_filters(self, auth_client, add_expense):
        add_expense("user-1", title="jan food", category="Food", date="2025-01-02")
        add_expense("user-1", title="jan bills", category="Bills", date="2025-01-03")
        add_expense("user-1", title="feb food", category="Food", date="2025-02-02")

        resp = auth_client.get("/api/expenses?month=1&year=2025&category=Food")
        assert [e["title"] for e in resp.get_json()] == ["jan food"]

    def test_blank_filters_ignored(self, auth_client, add_expense):
        add_expense("user-1")
        resp = auth_client.get("/api/expenses?month=&year=&category=")
        assert len(resp.get_json()) == 1

    def test_malformed_month(self, auth_client):
        resp = auth_client.get("/api/expenses?month=abc")
        assert resp.status_code == 400
        assert resp.get_json()["field"] == "month"


class TestCreateExpense:

    def test_created(self, auth_client):
        resp = auth_client.post("/api/expenses", json={
            "title": "Train ticket",
            "amount": 2.5,
            "category": "Travel",
            "date": "2025-03-01",
            "description": "to Pune",
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["amount"] == 3
        assert body["userId"] == "user-1"
        assert body["date"] == "2025-03-01T00:00:00.000Z"
        assert db.session.get(Expense, body["id"]).description == "to Pune"

    def test_owner_comes_from_session(self, auth_client):
        resp = auth_client.post("/api/expenses", json={
            "title": "Rent", "amount": 100, "category": "Housing", "userId": "someone-else",
        })
        assert resp.get_json()["userId"] == "user-1"

    def test_zero_amount_rejected(self, auth_client):
        resp = auth_client.post("/api/expenses", json={"title": "Tea", "amount": 0, "category": "Food"})
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Amount must be positive", "field": "amount"}
        assert Expense.query.count() == 0

    def test_empty_body_rejected(self, auth_client):
        resp = auth_client.post("/api/expenses", data="not json", content_type="text/plain")
        assert resp.status_code == 400
        assert "title: Field required" in resp.get_json()["message"]

    def test_amount_too_large_rejected(self, auth_client):
        resp = auth_client.post("/api/expenses", json={"title": "Yacht", "amount": 1e20, "category": "Other"})
        assert resp.status_code == 400
        assert resp.get_json() == {"message": "Amount is too large", "field": "amount"}
        assert Expense.query.count() == 0

    def test_out_of_range_aware_date_rejected(self, auth_client):
        resp = auth_client.post("/api/expenses", json={
            "title": "Old", "amount": 10, "category": "Other", "date": "0001-01-01T00:00:00+05:00",
        })
        assert resp.status_code == 400
        assert resp.get_json()["message"] == "Date must be a valid date"

    def test_database_failure_is_sanitized(self, auth_client):
        error = OperationalError("INSERT", {}, Exception('relation "expenses" does not exist'))
        with patch.object(ExpenseRepository, "create", side_effect=error):
            resp = auth_client.post("/api/expenses", json={"title": "Tea", "amount": 10, "category": "Food"})
        assert resp.status_code == 500
        assert resp.get_json()["message"].startswith("Database table not found")

    def test_connection_failure_message(self, auth_client):
        error = OperationalError("INSERT", {}, Exception("could not connect to server: Connection refused"))
        with patch.object(ExpenseRepository, "create", side_effect=error):
            resp = auth_client.post("/api/expenses", json={"title": "Tea", "amount": 10, "category": "Food"})
        assert resp.status_code == 500
        assert resp.get_json()["message"].startswith("Database connection failed")


class TestDeleteExpense:

    def test_delete_own(self, auth_client, add_expense):
        exp = add_expense("user-1")
        resp = auth_client.delete(f"/api/expenses/{exp.id}")
        assert resp.status_code == 204
        assert resp.data == b""
        assert Expense.query.count() == 0

    def test_delete_foreign_leaves_data_untouched(self, auth_client, make_user, add_expense):
        make_user("user-2")
        exp = add_expense("user-2")
        resp = auth_client.delete(f"/api/expenses/{exp.id}")
        assert resp.status_code == 204
        assert Expense.query.filter_by(user_id="user-2").count() == 1

    def test_non_integer_id(self, auth_client):
        resp = auth_client.delete("/api/expenses/abc")
        assert resp.status_code == 404
        assert "message" in resp.get_json()


class TestStats:

    def test_reference_example(self, auth_client, add_expense):
        add_expense("user-1", category="Food", amount=100, date="2025-01-01")
        add_expense("user-1", category="Food", amount=50, date="2025-01-01")
        add_expense("user-1", category="Travel", amount=200, date="2025-01-02")

        body = auth_client.get("/api/stats?month=1&year=2025").get_json()
        assert body["total"] == 350
        assert body["monthlyTrend"] == [
            {"date": "2025-01-01", "amount": 150},
            {"date": "2025-01-02", "amount": 200},
        ]
        assert sum(row["count"] for row in body["byCategory"]) == 3
        assert {row["category"]: row["amount"] for row in body["byCategory"]} == {"Food": 150, "Travel": 200}
        assert body["recent"][0]["category"] == "Travel"

    def test_window_and_recent(self, auth_client, add_expense):
        for day in range(1, 8):
            add_expense("user-1", title=f"d{day}", amount=day, date=f"2025-05-{day:02d}")
        add_expense("user-1", title="june", amount=1000, date="2025-06-01")

        body = auth_client.get("/api/stats?month=5&year=2025").get_json()
        assert body["total"] == 28
        assert [e["title"] for e in body["recent"]] == ["d7", "d6", "d5", "d4", "d3"]

    def test_category_param_is_ignored(self, auth_client, add_expense):
        add_expense("user-1", category="Food", amount=10)
        add_expense("user-1", category="Bills", amount=20)
        body = auth_client.get("/api/stats?category=Food").get_json()
        assert body["total"] == 30

    def test_empty(self, auth_client):
        body = auth_client.get("/api/stats").get_json()
        assert body == {"total": 0, "byCategory": [], "monthlyTrend": [], "recent": []}


class TestCategories:

    def test_lists_categories(self, auth_client):
        body = auth_client.get("/api/categories").get_json()
        assert body[0] == "Food"
        assert "Other" in body
