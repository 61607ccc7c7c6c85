"""Vote casting and election reset.

Both operations run inside a single database transaction. The "has not voted
yet" precondition is checked by a conditional UPDATE at the storage layer, so
two racing cast attempts for the same voter can never both succeed.
"""

import enum
from dataclasses import dataclass
from typing import Optional

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from schoolvote.extensions import db
from schoolvote.models import Candidate, Vote, Voter
from schoolvote.services.errors import ResetFailedError

# Primary keys are signed 32-bit INTEGER columns.
MAX_ROW_ID = 2**31 - 1


class VoteStatus(str, enum.Enum):
    OK = "ok"
    ALREADY_VOTED = "already_voted"
    VOTER_NOT_FOUND = "voter_not_found"
    CANDIDATE_NOT_FOUND = "candidate_not_found"
    TRANSACTION_FAILED = "transaction_failed"


VOTE_STATUS_HTTP = {
    VoteStatus.OK: 201,
    VoteStatus.ALREADY_VOTED: 409,
    VoteStatus.VOTER_NOT_FOUND: 404,
    VoteStatus.CANDIDATE_NOT_FOUND: 404,
    VoteStatus.TRANSACTION_FAILED: 500,
}


@dataclass(frozen=True)
class VoteReceipt:
    status: VoteStatus
    message: str
    voter_name: Optional[str] = None
    new_voted_status: Optional[bool] = None

    @property
    def success(self):
        return self.status is VoteStatus.OK

    @property
    def http_status(self):
        return VOTE_STATUS_HTTP[self.status]

    def to_dict(self):
        return {
            "ok": self.success,
            "code": self.status.value,
            "message": self.message,
            "voter_name": self.voter_name,
            "has_voted": self.new_voted_status,
        }


@dataclass(frozen=True)
class ResetResult:
    votes_deleted: int
    voters_reset: int
    message: str

    def to_dict(self):
        return {
            "votes_deleted": self.votes_deleted,
            "voters_reset": self.voters_reset,
            "message": self.message,
        }


def _already_voted(voter_name):
    return VoteReceipt(
        status=VoteStatus.ALREADY_VOTED,
        message="You have already cast your vote.",
        voter_name=voter_name,
        new_voted_status=True,
    )


def cast_vote(voter_id, candidate_id):
    voter = db.session.get(Voter, voter_id)
    if voter is None:
        return VoteReceipt(
            status=VoteStatus.VOTER_NOT_FOUND, message="Voter not found."
        )

    if (
        not 0 < candidate_id <= MAX_ROW_ID
        or db.session.get(Candidate, candidate_id) is None
    ):
        return VoteReceipt(
            status=VoteStatus.CANDIDATE_NOT_FOUND,
            message="Candidate not found.",
            voter_name=voter.name,
            new_voted_status=voter.has_voted,
        )

    voter_name = voter.name
    try:
        claimed = Voter.query.filter_by(id=voter_id, has_voted=False).update(
            {Voter.has_voted: True}, synchronize_session=False
        )
        if claimed != 1:
            db.session.rollback()
            current_app.logger.info("Voter %s attempted to vote twice", voter_id)
            return _already_voted(voter_name)

        db.session.add(Vote(voter_id=voter_id, candidate_id=candidate_id))
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        if Vote.query.filter_by(voter_id=voter_id).first() is not None:
            current_app.logger.info("Voter %s attempted to vote twice", voter_id)
            return _already_voted(voter_name)
        current_app.logger.exception("Vote for voter %s violated a constraint", voter_id)
        return VoteReceipt(
            status=VoteStatus.TRANSACTION_FAILED,
            message="Your vote could not be recorded. Please try again.",
            voter_name=voter_name,
            new_voted_status=False,
        )
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Vote transaction failed for voter %s", voter_id)
        return VoteReceipt(
            status=VoteStatus.TRANSACTION_FAILED,
            message="Your vote could not be recorded. Please try again.",
            voter_name=voter_name,
            new_voted_status=False,
        )

    current_app.logger.info(
        "Voter %s cast a vote for candidate %s", voter_id, candidate_id
    )
    return VoteReceipt(
        status=VoteStatus.OK,
        message="Your vote has been recorded.",
        voter_name=voter_name,
        new_voted_status=True,
    )


def reset_voting():
    try:
        votes_deleted = Vote.query.delete(synchronize_session=False)
        voters_reset = Voter.query.filter_by(has_voted=True).update(
            {Voter.has_voted: False}, synchronize_session=False
        )
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception("Voting reset failed; nothing was changed")
        raise ResetFailedError("Voting reset failed; nothing was changed.") from exc

    current_app.logger.warning(
        "Voting reset: %s votes deleted, %s voters reset", votes_deleted, voters_reset
    )
    return ResetResult(
        votes_deleted=votes_deleted,
        voters_reset=voters_reset,
        message="Voting has been reset.",
    )
