from flask import Flask, jsonify

from schoolvote.commands import register_commands
from schoolvote.config import Config
from schoolvote.extensions import db, login_manager, migrate
from schoolvote.routes import register_routes
from schoolvote.services.security import (
    bearer_token,
    load_session_subject,
    verify_session_token,
)


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    # Stateless API: every request re-verifies its bearer token.
    login_manager.session_protection = None

    @login_manager.request_loader
    def load_user_from_request(request):
        token = bearer_token(request)
        if token is None:
            return None
        claims = verify_session_token(token)
        if claims is None:
            app.logger.info("Rejected invalid or expired session token")
            return None
        return load_session_subject(claims)

    @login_manager.unauthorized_handler
    def unauthorized():
        return (
            jsonify(
                {
                    "ok": False,
                    "code": "unauthorized",
                    "error": "Please log in to continue.",
                }
            ),
            401,
        )

    register_routes(app)
    register_commands(app)
    return app


__all__ = ["db", "migrate", "create_app"]
