from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

import structlog
from flask import current_app
from sqlalchemy import extract
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import Expense

log = structlog.get_logger(__name__)

EXTENSION_KEY = "expense_repository"


def round_half_up(amount) -> int:
    """Round to whole rupees; 2.5 becomes 3."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ExpenseRepository:
    """Owner-scoped access to the expenses table.

    Every method takes the owner's id first and never reads or writes a row
    belonging to anyone else.
    """

    def __init__(self, session):
        self.session = session

    def list(self, owner_id: str, month: Optional[int] = None, year: Optional[int] = None,
             category: Optional[str] = None) -> List[Expense]:
        query = self.session.query(Expense).filter(Expense.user_id == owner_id)
        if month:
            query = query.filter(extract("month", Expense.date) == month)
        if year:
            query = query.filter(extract("year", Expense.date) == year)
        if category:
            query = query.filter(Expense.category == category)
        return query.order_by(Expense.date.desc(), Expense.id.asc()).all()

    def get(self, owner_id: str, expense_id: int) -> Optional[Expense]:
        return self.session.query(Expense).filter_by(id=expense_id, user_id=owner_id).first()

    def create(self, owner_id: str, draft) -> Expense:
        exp = Expense(
            user_id=owner_id,
            title=draft.title,
            amount=round_half_up(draft.amount),
            description=draft.description,
            category=draft.category,
            date=draft.date,
        )
        self.session.add(exp)
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        log.info("expense_created", user_id=owner_id, expense_id=exp.id, amount=exp.amount)
        return exp

    def delete(self, owner_id: str, expense_id: int) -> bool:
        """Ensure the expense is gone; missing or foreign ids are a no-op."""
        try:
            removed = (
                self.session.query(Expense).filter_by(id=expense_id, user_id=owner_id)
                .delete(synchronize_session=False)
            )
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        log.info("expense_deleted", user_id=owner_id, expense_id=expense_id, removed=removed)
        return bool(removed)


def get_repository() -> ExpenseRepository:
    return current_app.extensions[EXTENSION_KEY]
