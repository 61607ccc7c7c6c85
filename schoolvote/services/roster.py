from flask import current_app
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from schoolvote.extensions import db
from schoolvote.models import Candidate, Vote, Voter
from schoolvote.services.errors import ConflictError, NotFoundError, ValidationError

VOTER_STATUSES = ("all", "voted", "not_voted")

VOTER_HAS_VOTED = "This voter has already voted and cannot be deleted until voting is reset."
CANDIDATE_HAS_VOTES = "This candidate has votes and cannot be deleted until voting is reset."


def _clean(value):
    return "" if value is None else str(value).strip()


def _require(fields):
    missing = [label for label, value in fields if not value]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required.")


def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not %s", action)
        raise


def get_voter(voter_id):
    voter = db.session.get(Voter, voter_id)
    if voter is None:
        raise NotFoundError("Voter not found.")
    return voter


def filter_voters(search=None, status="all"):
    if status not in VOTER_STATUSES:
        raise ValidationError("Status must be one of: all, voted, not_voted.")

    query = Voter.query
    term = _clean(search)
    if term:
        pattern = f"%{term.lower()}%"
        query = query.filter(
            or_(
                db.func.lower(Voter.name).like(pattern),
                db.func.lower(Voter.student_id).like(pattern),
                db.func.lower(Voter.group_label).like(pattern),
            )
        )

    if status == "voted":
        query = query.filter(Voter.has_voted.is_(True))
    elif status == "not_voted":
        query = query.filter(Voter.has_voted.is_(False))

    return query.order_by(Voter.created_at.desc(), Voter.id.desc())


def list_voters(search=None, status="all", page=1, per_page=None):
    if per_page is None:
        per_page = current_app.config["VOTERS_PER_PAGE"]
    return filter_voters(search, status).paginate(
        page=max(page, 1), per_page=max(per_page, 1), error_out=False
    )


def create_voter(student_id, name, group_label):
    student_id = _clean(student_id)
    name = _clean(name)
    group_label = _clean(group_label)
    _require([("Student ID", student_id), ("Name", name), ("Group", group_label)])

    if Voter.query.filter_by(student_id=student_id).first():
        raise ConflictError(f"Student ID {student_id} is already registered.")

    voter = Voter(student_id=student_id, name=name, group_label=group_label)
    db.session.add(voter)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Student ID {student_id} is already registered.")

    current_app.logger.info("Voter %s created", voter.student_id)
    return voter


def update_voter(voter_id, student_id=None, name=None, group_label=None):
    voter = get_voter(voter_id)

    changes = {}
    for field, value, label in (
        ("student_id", student_id, "Student ID"),
        ("name", name, "Name"),
        ("group_label", group_label, "Group"),
    ):
        if value is None:
            continue
        value = _clean(value)
        if not value:
            raise ValidationError(f"{label} required.")
        changes[field] = value

    new_student_id = changes.get("student_id")
    if new_student_id and new_student_id != voter.student_id:
        if Voter.query.filter_by(student_id=new_student_id).first():
            raise ConflictError(f"Student ID {new_student_id} is already registered.")

    for field, value in changes.items():
        setattr(voter, field, value)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(f"Student ID {new_student_id} is already registered.")

    current_app.logger.info("Voter %s updated", voter.id)
    return voter


def delete_voter(voter_id):
    voter = get_voter(voter_id)
    # Votes are only ever removed by a full reset.
    if voter.has_voted or Vote.query.filter_by(voter_id=voter.id).first():
        raise ConflictError(VOTER_HAS_VOTED, code="voter_has_voted")

    db.session.delete(voter)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(VOTER_HAS_VOTED, code="voter_has_voted")

    current_app.logger.info("Voter %s deleted", voter_id)


def list_candidates():
    return Candidate.query.order_by(Candidate.created_at.asc(), Candidate.id.asc()).all()


def get_candidate(candidate_id):
    candidate = db.session.get(Candidate, candidate_id)
    if candidate is None:
        raise NotFoundError("Candidate not found.")
    return candidate


def create_candidate(name, platform, action_plan, photo_url=None):
    name = _clean(name)
    platform = _clean(platform)
    action_plan = _clean(action_plan)
    _require([("Name", name), ("Platform", platform), ("Action plan", action_plan)])

    candidate = Candidate(
        name=name,
        platform=platform,
        action_plan=action_plan,
        photo_url=_clean(photo_url) or None,
    )
    db.session.add(candidate)
    _commit("create candidate")
    current_app.logger.info("Candidate %s created", candidate.id)
    return candidate


def update_candidate(candidate_id, name=None, platform=None, action_plan=None, photo_url=None):
    candidate = get_candidate(candidate_id)

    changes = {}
    for field, value, label in (
        ("name", name, "Name"),
        ("platform", platform, "Platform"),
        ("action_plan", action_plan, "Action plan"),
    ):
        if value is None:
            continue
        value = _clean(value)
        if not value:
            raise ValidationError(f"{label} required.")
        changes[field] = value

    if photo_url is not None:
        changes["photo_url"] = _clean(photo_url) or None

    for field, value in changes.items():
        setattr(candidate, field, value)

    _commit("update candidate")
    current_app.logger.info("Candidate %s updated", candidate.id)
    return candidate


def delete_candidate(candidate_id):
    candidate = get_candidate(candidate_id)
    vote_count = Vote.query.filter_by(candidate_id=candidate.id).count()
    if vote_count:
        raise ConflictError(
            f"This candidate has {vote_count} vote(s) and cannot be deleted until voting is reset.",
            code="candidate_has_votes",
        )

    db.session.delete(candidate)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError(CANDIDATE_HAS_VOTES, code="candidate_has_votes")

    current_app.logger.info("Candidate %s deleted", candidate_id)
