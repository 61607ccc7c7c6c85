from flask import jsonify
from werkzeug.exceptions import HTTPException

from schoolvote.routes.admin import register_admin_routes
from schoolvote.routes.auth import register_auth_routes
from schoolvote.routes.public import register_public_routes
from schoolvote.routes.voter import register_voter_routes
from schoolvote.services.errors import ServiceError


def register_error_handlers(app):
    @app.errorhandler(ServiceError)
    def handle_service_error(error):
        return (
            jsonify({"ok": False, "code": error.code, "error": error.message}),
            error.status_code,
        )

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        code = (error.name or "error").lower().replace(" ", "_")
        return jsonify({"ok": False, "code": code, "error": error.description}), error.code


def register_routes(app):
    register_error_handlers(app)
    register_auth_routes(app)
    register_public_routes(app)
    register_voter_routes(app)
    register_admin_routes(app)
