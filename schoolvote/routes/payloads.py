def _timestamp(value):
    return value.isoformat() if value else None


def voter_payload(voter):
    return {
        "id": voter.id,
        "student_id": voter.student_id,
        "name": voter.name,
        "group_label": voter.group_label,
        "has_voted": voter.has_voted,
        "created_at": _timestamp(voter.created_at),
    }


def admin_payload(admin):
    return {
        "id": admin.id,
        "username": admin.username,
        "created_at": _timestamp(admin.created_at),
    }


def user_payload(user):
    if user.role == "admin":
        return admin_payload(user)
    return voter_payload(user)


def candidate_payload(candidate):
    return {
        "id": candidate.id,
        "name": candidate.name,
        "photo_url": candidate.photo_url,
        "platform": candidate.platform,
        "action_plan": candidate.action_plan,
        "created_at": _timestamp(candidate.created_at),
    }


def tally_payload(tally):
    return {
        "total_votes": tally["total_votes"],
        "results": [
            {
                "candidate_id": row["candidate"].id,
                "candidate_name": row["candidate"].name,
                "vote_count": row["count"],
                "percent": row["percent"],
            }
            for row in tally["results"]
        ],
        "winners": [candidate.id for candidate in tally["winners"]],
        "is_tie": tally["is_tie"],
    }


def stats_payload(stats):
    payload = {
        "total_voters": stats["total_voters"],
        "voted_count": stats["voted_count"],
        "not_voted_count": stats["not_voted_count"],
        "candidates_count": stats["candidates_count"],
        "participation_pct": stats["participation_pct"],
    }
    payload.update(tally_payload(stats["tally"]))
    return payload


def vote_payload(vote):
    return {
        "id": vote.id,
        "voter": {
            "id": vote.voter.id,
            "name": vote.voter.name,
            "student_id": vote.voter.student_id,
            "group_label": vote.voter.group_label,
        },
        "candidate": {"id": vote.candidate.id, "name": vote.candidate.name},
        "created_at": _timestamp(vote.created_at),
    }
