from flask import jsonify, request
from flask_login import current_user

from schoolvote.routes.payloads import candidate_payload, voter_payload
from schoolvote.services.ballot import MAX_ROW_ID, cast_vote
from schoolvote.services.errors import ValidationError
from schoolvote.services.roster import list_candidates
from schoolvote.services.security import voter_required


def _parse_candidate_id(value):
    """Accept a positive integer or a string of ASCII digits, nothing else."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdigit()):
            return None
        value = int(value)
    if not isinstance(value, int) or not 0 < value <= MAX_ROW_ID:
        return None
    return value


def register_voter_routes(app):
    @app.route("/api/ballot")
    @voter_required
    def ballot():
        return jsonify(
            {
                "ok": True,
                "voter": voter_payload(current_user),
                "candidates": [candidate_payload(c) for c in list_candidates()],
            }
        )

    @app.route("/api/votes", methods=["POST"])
    @voter_required
    def submit_vote():
        data = request.get_json(silent=True) or {}
        candidate_id = _parse_candidate_id(data.get("candidate_id"))
        if candidate_id is None:
            raise ValidationError("Please choose a candidate.")

        receipt = cast_vote(current_user.id, candidate_id)
        return jsonify(receipt.to_dict()), receipt.http_status
