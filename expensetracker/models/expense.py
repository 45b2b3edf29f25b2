from datetime import datetime, timezone
from ..extensions import db


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat_utc(value: datetime) -> str:
    """Render a naive UTC timestamp as ``2025-01-01T08:30:00.000Z``."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class Expense(db.Model):
    __tablename__ = "expenses"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(255), db.ForeignKey("users.id"), nullable=False, index=True)
    title = db.Column(db.Text, nullable=False)
    amount = db.Column(db.Integer, nullable=False)  # whole rupees
    description = db.Column(db.Text)
    category = db.Column(db.Text, nullable=False)
    date = db.Column(db.DateTime, nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
            "date": isoformat_utc(self.date),
        }
