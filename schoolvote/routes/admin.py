from datetime import date

from flask import current_app, jsonify, make_response, request

from schoolvote.routes.payloads import (
    candidate_payload,
    stats_payload,
    vote_payload,
    voter_payload,
)
from schoolvote.services.ballot import reset_voting
from schoolvote.services.csv_io import (
    export_results_csv,
    export_voters_csv,
    import_voters,
    parse_voter_csv,
)
from schoolvote.services.errors import ValidationError
from schoolvote.services.roster import (
    create_candidate,
    create_voter,
    delete_candidate,
    delete_voter,
    filter_voters,
    get_candidate,
    get_voter,
    list_candidates,
    list_voters,
    update_candidate,
    update_voter,
)
from schoolvote.services.security import admin_required
from schoolvote.services.tally import dashboard_stats, list_votes, tally_votes

IMPORT_PREVIEW_ROWS = 5
TRUE_FLAGS = {"1", "true", "yes", "on"}


def _csv_response(content, filename):
    output = make_response(content)
    output.headers["Content-Disposition"] = f"attachment; filename={filename}"
    output.headers["Content-Type"] = "text/csv; charset=utf-8"
    return output


def register_admin_routes(app):
    @app.route("/api/admin/dashboard")
    @admin_required
    def admin_dashboard():
        payload = stats_payload(dashboard_stats())
        payload["ok"] = True
        payload["refresh_after"] = current_app.config["RESULTS_REFRESH_SECONDS"]
        return jsonify(payload)

    @app.route("/api/admin/votes")
    @admin_required
    def admin_votes():
        return jsonify({"ok": True, "votes": [vote_payload(v) for v in list_votes()]})

    @app.route("/api/admin/voters", methods=["GET", "POST"])
    @admin_required
    def admin_voters():
        if request.method == "POST":
            data = request.get_json(silent=True) or {}
            voter = create_voter(
                data.get("student_id"), data.get("name"), data.get("group_label")
            )
            return jsonify({"ok": True, "voter": voter_payload(voter)}), 201

        page = request.args.get("page", 1, type=int)
        per_page = request.args.get("per_page", type=int)
        pagination = list_voters(
            search=request.args.get("search"),
            status=request.args.get("status", "all"),
            page=page,
            per_page=per_page,
        )
        return jsonify(
            {
                "ok": True,
                "voters": [voter_payload(v) for v in pagination.items],
                "page": pagination.page,
                "per_page": pagination.per_page,
                "pages": pagination.pages,
                "total": pagination.total,
            }
        )

    @app.route("/api/admin/voters/<int:voter_id>", methods=["GET", "PUT", "PATCH", "DELETE"])
    @admin_required
    def admin_voter(voter_id):
        if request.method == "GET":
            return jsonify({"ok": True, "voter": voter_payload(get_voter(voter_id))})

        if request.method == "DELETE":
            delete_voter(voter_id)
            return jsonify({"ok": True})

        data = request.get_json(silent=True) or {}
        voter = update_voter(
            voter_id,
            student_id=data.get("student_id"),
            name=data.get("name"),
            group_label=data.get("group_label"),
        )
        return jsonify({"ok": True, "voter": voter_payload(voter)})

    @app.route("/api/admin/voters/export")
    @admin_required
    def export_voters():
        status = request.args.get("status", "all")
        voters = filter_voters(request.args.get("search"), status).all()
        filename = f"voters-{status}-{date.today().isoformat()}.csv"
        return _csv_response(export_voters_csv(voters), filename)

    @app.route("/api/admin/voters/import", methods=["POST"])
    @admin_required
    def import_voter_roster():
        upload = request.files.get("file")
        if upload is None or upload.filename == "":
            raise ValidationError("Please choose a CSV file to import.")

        try:
            text = upload.stream.read().decode("utf-8-sig")
        except UnicodeDecodeError:
            raise ValidationError("The file must be UTF-8 encoded CSV.")

        rows, errors = parse_voter_csv(text)

        if request.args.get("preview", "").strip().lower() in TRUE_FLAGS:
            return jsonify(
                {
                    "ok": True,
                    "preview": rows[:IMPORT_PREVIEW_ROWS],
                    "total_rows": len(rows),
                    "errors": errors,
                }
            )

        if not rows:
            raise ValidationError("The file does not contain any valid voter rows.")

        result = import_voters(rows)
        return jsonify(
            {
                "ok": True,
                "created": result["created"],
                "skipped": result["skipped"],
                "errors": errors,
            }
        )

    @app.route("/api/admin/candidates", methods=["GET", "POST"])
    @admin_required
    def admin_candidates():
        if request.method == "POST":
            data = request.get_json(silent=True) or {}
            candidate = create_candidate(
                data.get("name"),
                data.get("platform"),
                data.get("action_plan"),
                photo_url=data.get("photo_url"),
            )
            return jsonify({"ok": True, "candidate": candidate_payload(candidate)}), 201

        return jsonify(
            {
                "ok": True,
                "candidates": [candidate_payload(c) for c in list_candidates()],
            }
        )

    @app.route(
        "/api/admin/candidates/<int:candidate_id>",
        methods=["GET", "PUT", "PATCH", "DELETE"],
    )
    @admin_required
    def admin_candidate(candidate_id):
        if request.method == "GET":
            return jsonify(
                {"ok": True, "candidate": candidate_payload(get_candidate(candidate_id))}
            )

        if request.method == "DELETE":
            delete_candidate(candidate_id)
            return jsonify({"ok": True})

        data = request.get_json(silent=True) or {}
        candidate = update_candidate(
            candidate_id,
            name=data.get("name"),
            platform=data.get("platform"),
            action_plan=data.get("action_plan"),
            photo_url=data.get("photo_url"),
        )
        return jsonify({"ok": True, "candidate": candidate_payload(candidate)})

    @app.route("/api/admin/results/export")
    @admin_required
    def export_results():
        filename = f"results-{date.today().isoformat()}.csv"
        return _csv_response(export_results_csv(tally_votes()), filename)

    @app.route("/api/admin/reset", methods=["POST"])
    @admin_required
    def admin_reset():
        data = request.get_json(silent=True) or {}
        expected = current_app.config["RESET_CONFIRMATION_WORD"]
        if str(data.get("confirm") or "").strip() != expected:
            raise ValidationError(f'Type "{expected}" to confirm the reset.')

        result = reset_voting()
        return jsonify({"ok": True, **result.to_dict()})
