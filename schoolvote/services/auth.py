from flask import current_app
from werkzeug.security import check_password_hash

from schoolvote.models import Admin, Voter
from schoolvote.services.errors import (
    AuthenticationError,
    NotFoundError,
    ValidationError,
)
from schoolvote.services.security import generate_session_token, session_expiry


def authenticate_voter(student_id):
    student_id = (student_id or "").strip()
    if not student_id:
        raise ValidationError("Please enter your student ID.")

    voter = Voter.query.filter_by(student_id=student_id).first()
    if voter is None:
        current_app.logger.warning("Voter login failed for student ID %s", student_id)
        raise NotFoundError("Student ID not found.")

    current_app.logger.info("Voter %s logged in", voter.student_id)
    return voter


def authenticate_admin(username, password):
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("Username and password are required.")

    admin = Admin.query.filter_by(username=username).first()
    # Unknown usernames and wrong passwords are reported identically.
    if not admin or not check_password_hash(admin.password_hash, password):
        current_app.logger.warning("Admin login failed for username %s", username)
        raise AuthenticationError("Invalid username or password.")

    current_app.logger.info("Admin %s logged in", admin.username)
    return admin


def issue_session(user):
    return {
        "token": generate_session_token(user.id, user.role),
        "role": user.role,
        "expires_at": session_expiry().isoformat(),
    }
