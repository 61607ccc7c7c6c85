from datetime import datetime, timezone

from schoolvote.extensions import db


class Candidate(db.Model):
    __tablename__ = "candidates"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    photo_url = db.Column(db.String(500), nullable=True)
    platform = db.Column(db.Text, nullable=False)
    action_plan = db.Column(db.Text, nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    votes = db.relationship("Vote", backref="candidate", lazy=True)
