from pathlib import Path
from types import SimpleNamespace
import sys

import pytest
from werkzeug.security import generate_password_hash

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from schoolvote import create_app
from schoolvote.extensions import db
from schoolvote.models import Admin, Candidate, Voter
from schoolvote.services.security import generate_session_token

ADMIN_PASSWORD = "correct-horse-battery"


@pytest.fixture()
def app(tmp_path: Path):
    db_file = tmp_path / "test.sqlite3"
    app = create_app(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key",
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}",
            "SQLALCHEMY_ENGINE_OPTIONS": {},
        }
    )

    with app.app_context():
        driver = db.engine.url.drivername
        if driver != "sqlite":
            raise RuntimeError(
                f"Test database must be SQLite, got '{driver}'. Refusing to run destructive test setup."
            )
        db.drop_all()
        db.create_all()

    # Requests from the test client push their own app context, so the
    # current user is never cached between requests.
    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    with app.app_context():
        yield db.session
        db.session.remove()


@pytest.fixture()
def voters(db_session):
    rows = [
        Voter(student_id="1001", name="Ayu Lestari", group_label="XII IPA 1"),
        Voter(student_id="1002", name="Budi Santoso", group_label="XII IPA 2"),
        Voter(student_id="1003", name="Citra Dewi", group_label="XI IPS 1"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture()
def candidates(db_session):
    rows = [
        Candidate(name="Andi", platform="A greener school", action_plan="Plant trees"),
        Candidate(name="Bella", platform="Better clubs", action_plan="Fund clubs"),
        Candidate(name="Chandra", platform="Open canteen", action_plan="Longer hours"),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture()
def roster(app):
    """Seed an admin, three voters and three candidates; return their ids."""
    with app.app_context():
        admin = Admin(
            username="admin1",
            password_hash=generate_password_hash(ADMIN_PASSWORD, method="pbkdf2:sha256"),
        )
        voter_rows = [
            Voter(student_id="1001", name="Ayu Lestari", group_label="XII IPA 1"),
            Voter(student_id="1002", name="Budi Santoso", group_label="XII IPA 2"),
            Voter(student_id="1003", name="Citra Dewi", group_label="XI IPS 1"),
        ]
        candidate_rows = [
            Candidate(name="Andi", platform="A greener school", action_plan="Plant trees"),
            Candidate(name="Bella", platform="Better clubs", action_plan="Fund clubs"),
            Candidate(name="Chandra", platform="Open canteen", action_plan="Longer hours"),
        ]
        db.session.add(admin)
        db.session.add_all(voter_rows + candidate_rows)
        db.session.commit()

        return SimpleNamespace(
            admin_id=admin.id,
            voter_ids=[voter.id for voter in voter_rows],
            candidate_ids=[candidate.id for candidate in candidate_rows],
        )


@pytest.fixture()
def auth_headers(app):
    def _headers(role, subject_id):
        with app.app_context():
            token = generate_session_token(subject_id, role)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def admin_headers(roster, auth_headers):
    return auth_headers("admin", roster.admin_id)


@pytest.fixture()
def admin_password():
    return ADMIN_PASSWORD
