from datetime import datetime, timezone
from flask_login import UserMixin
from ..extensions import db, login_manager


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class User(UserMixin, db.Model):
    __tablename__ = "users"
    # Subject claim issued by the identity provider
    id = db.Column(db.String(255), primary_key=True)
    email = db.Column(db.String(255), unique=True)
    first_name = db.Column(db.String(120))
    last_name = db.Column(db.String(120))
    profile_image_url = db.Column(db.String(500))
    created_at = db.Column(db.DateTime, default=_utcnow)
    updated_at = db.Column(db.DateTime, default=_utcnow, onupdate=_utcnow)

    expenses = db.relationship("Expense", backref="user", lazy=True, cascade="all, delete-orphan")

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.email or self.id

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profileImageUrl": self.profile_image_url,
        }


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, user_id)
