from flask import current_app, jsonify

from schoolvote.routes.payloads import candidate_payload, stats_payload
from schoolvote.services.roster import list_candidates
from schoolvote.services.tally import dashboard_stats


def register_public_routes(app):
    @app.route("/")
    def index():
        return jsonify({"ok": True, "service": "schoolvote"})

    @app.route("/api/candidates")
    def public_candidates():
        return jsonify(
            {
                "ok": True,
                "candidates": [candidate_payload(c) for c in list_candidates()],
            }
        )

    @app.route("/api/results")
    def public_results():
        payload = stats_payload(dashboard_stats())
        payload["ok"] = True
        payload["refresh_after"] = current_app.config["RESULTS_REFRESH_SECONDS"]
        return jsonify(payload)
