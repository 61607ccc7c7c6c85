from flask import jsonify, request
from flask_login import current_user, login_required

from schoolvote.routes.payloads import user_payload
from schoolvote.services.auth import (
    authenticate_admin,
    authenticate_voter,
    issue_session,
)


def register_auth_routes(app):
    @app.route("/api/auth/voter", methods=["POST"])
    def voter_login():
        data = request.get_json(silent=True) or {}
        voter = authenticate_voter(data.get("student_id"))
        payload = issue_session(voter)
        payload["user"] = user_payload(voter)
        return jsonify({"ok": True, **payload})

    @app.route("/api/auth/admin", methods=["POST"])
    def admin_login():
        data = request.get_json(silent=True) or {}
        admin = authenticate_admin(data.get("username"), data.get("password"))
        payload = issue_session(admin)
        payload["user"] = user_payload(admin)
        return jsonify({"ok": True, **payload})

    @app.route("/api/auth/me")
    @login_required
    def whoami():
        return jsonify(
            {"ok": True, "role": current_user.role, "user": user_payload(current_user)}
        )
