import math

from sqlalchemy import func

from schoolvote.extensions import db
from schoolvote.models import Candidate, Vote, Voter


def percent_of(count, total):
    if total <= 0:
        return 0
    # Half-up rounding to whole percent, as shown on the results board.
    return int(math.floor(count * 100 / total + 0.5))


def tally_votes():
    rows = (
        db.session.query(Candidate, func.count(Vote.id))
        .outerjoin(Vote, Vote.candidate_id == Candidate.id)
        .group_by(Candidate.id)
        .all()
    )

    total_votes = sum(count for _, count in rows)
    max_votes = max((count for _, count in rows), default=0)

    winners = []
    if max_votes > 0:
        winners = [candidate for candidate, count in rows if count == max_votes]

    results = [
        {
            "candidate": candidate,
            "count": count,
            "percent": percent_of(count, total_votes),
        }
        for candidate, count in rows
    ]
    results.sort(
        key=lambda row: (-row["count"], row["candidate"].name.lower(), row["candidate"].id)
    )
    winners.sort(key=lambda candidate: (candidate.name.lower(), candidate.id))

    return {
        "total_votes": total_votes,
        "results": results,
        "winner": winners[0] if len(winners) == 1 else None,
        "winners": winners,
        "is_tie": len(winners) > 1,
        "top_vote_count": max_votes,
    }


def dashboard_stats():
    total_voters = Voter.query.count()
    voted_count = Voter.query.filter_by(has_voted=True).count()
    tally = tally_votes()

    return {
        "total_voters": total_voters,
        "voted_count": voted_count,
        "not_voted_count": total_voters - voted_count,
        "candidates_count": len(tally["results"]),
        "participation_pct": percent_of(voted_count, total_voters),
        "tally": tally,
    }


def list_votes():
    return (
        Vote.query.join(Voter, Vote.voter_id == Voter.id)
        .join(Candidate, Vote.candidate_id == Candidate.id)
        .order_by(Vote.created_at.desc(), Vote.id.desc())
        .all()
    )
