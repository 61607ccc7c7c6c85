import pytest
from itsdangerous import URLSafeTimedSerializer
from werkzeug.security import generate_password_hash

from schoolvote.models import Admin
from schoolvote.services.auth import authenticate_admin, authenticate_voter, issue_session
from schoolvote.services.errors import AuthenticationError, NotFoundError, ValidationError
from schoolvote.services.security import (
    generate_session_token,
    load_session_subject,
    verify_session_token,
)


@pytest.fixture()
def admin(db_session):
    user = Admin(
        username="admin1",
        password_hash=generate_password_hash("s3cret-pass", method="pbkdf2:sha256"),
    )
    db_session.add(user)
    db_session.commit()
    return user


def test_session_token_carries_subject_and_role(db_session, voters):
    token = generate_session_token(voters[0].id, "voter")

    claims = verify_session_token(token)

    assert claims == {"sub": voters[0].id, "role": "voter"}
    assert load_session_subject(claims).student_id == "1001"


def test_tampered_token_is_rejected(db_session):
    token = generate_session_token(1, "admin")
    payload, _, signature = token.rpartition(".")

    assert verify_session_token(payload + "." + signature[::-1]) is None
    assert verify_session_token("not-a-token") is None


def test_expired_token_is_rejected(db_session):
    token = generate_session_token(1, "voter")

    assert verify_session_token(token, max_age=-1) is None


def test_token_signed_with_other_key_is_rejected(db_session):
    forged = URLSafeTimedSerializer("someone-elses-key").dumps(
        {"sub": 1, "role": "admin"}, salt="session-token"
    )

    assert verify_session_token(forged) is None


def test_token_with_unexpected_claims_is_rejected(app, db_session):
    serializer = URLSafeTimedSerializer(app.config["SECRET_KEY"])

    assert verify_session_token(serializer.dumps("admin", salt="session-token")) is None
    assert (
        verify_session_token(
            serializer.dumps({"sub": 1, "role": "superuser"}, salt="session-token")
        )
        is None
    )


def test_unknown_role_cannot_be_issued(db_session):
    with pytest.raises(ValueError):
        generate_session_token(1, "superuser")


def test_authenticate_voter_by_student_id(db_session, voters):
    assert authenticate_voter(" 1002 ").name == "Budi Santoso"

    with pytest.raises(NotFoundError):
        authenticate_voter("9999")
    with pytest.raises(ValidationError):
        authenticate_voter("")


def test_authenticate_admin_checks_password_hash(db_session, admin):
    assert authenticate_admin("admin1", "s3cret-pass").id == admin.id


def test_wrong_password_and_unknown_admin_look_the_same(db_session, admin):
    with pytest.raises(AuthenticationError) as wrong_password:
        authenticate_admin("admin1", "guess")
    with pytest.raises(AuthenticationError) as unknown_user:
        authenticate_admin("nobody", "guess")

    assert wrong_password.value.message == unknown_user.value.message
    assert wrong_password.value.code == unknown_user.value.code == "invalid_credentials"


def test_issue_session_returns_token_and_expiry(db_session, admin):
    session = issue_session(admin)

    assert session["role"] == "admin"
    assert verify_session_token(session["token"]) == {"sub": admin.id, "role": "admin"}
    assert session["expires_at"].endswith("+00:00")
