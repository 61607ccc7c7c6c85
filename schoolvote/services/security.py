from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import current_app, jsonify
from flask_login import current_user
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from schoolvote.extensions import db
from schoolvote.models import Admin, Voter

SESSION_ROLES = {"admin": Admin, "voter": Voter}


def _session_serializer():
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"])


def generate_session_token(subject_id, role):
    if role not in SESSION_ROLES:
        raise ValueError(f"Unknown session role: {role!r}")
    return _session_serializer().dumps(
        {"sub": subject_id, "role": role}, salt="session-token"
    )


def session_expiry(issued_at=None):
    issued_at = issued_at or datetime.now(timezone.utc)
    return issued_at + timedelta(seconds=current_app.config["SESSION_TOKEN_MAX_AGE"])


def verify_session_token(token, max_age=None):
    if max_age is None:
        max_age = current_app.config["SESSION_TOKEN_MAX_AGE"]
    try:
        claims = _session_serializer().loads(
            token, salt="session-token", max_age=max_age
        )
    except (BadSignature, SignatureExpired):
        return None

    if not isinstance(claims, dict):
        return None
    if claims.get("role") not in SESSION_ROLES or not isinstance(claims.get("sub"), int):
        return None
    return claims


def load_session_subject(claims):
    model = SESSION_ROLES[claims["role"]]
    return db.session.get(model, claims["sub"])


def bearer_token(request):
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def role_required(role):
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            if not current_user.is_authenticated:
                return current_app.login_manager.unauthorized()
            if getattr(current_user, "role", None) != role:
                return (
                    jsonify(
                        {"ok": False, "code": "forbidden", "error": "Not allowed."}
                    ),
                    403,
                )
            return view(*args, **kwargs)

        return wrapped

    return decorator


admin_required = role_required("admin")
voter_required = role_required("voter")
