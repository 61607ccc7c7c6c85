from datetime import datetime, timezone

from flask_login import UserMixin

from schoolvote.extensions import db


class Admin(UserMixin, db.Model):
    __tablename__ = "admins"

    role = "admin"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(100), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )
