from datetime import datetime, timezone

from flask_login import UserMixin

from schoolvote.extensions import db


class Voter(UserMixin, db.Model):
    __tablename__ = "voters"

    role = "voter"

    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.String(50), unique=True, nullable=False)
    name = db.Column(db.String(200), nullable=False)
    group_label = db.Column(db.String(50), nullable=False)
    # Flipped to True only by cast_vote, back to False only by reset_voting.
    has_voted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    vote = db.relationship("Vote", backref="voter", uselist=False, lazy=True)
