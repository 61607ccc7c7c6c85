import click
from werkzeug.security import generate_password_hash

from schoolvote.extensions import db
from schoolvote.models import Admin


def register_commands(app):
    @app.cli.command("create-admin")
    @click.argument("username")
    @click.password_option()
    def create_admin(username, password):
        """Create an administrator account, or reset its password."""
        username = username.strip()
        admin = Admin.query.filter_by(username=username).first()
        password_hash = generate_password_hash(password, method="pbkdf2:sha256")

        if admin:
            admin.password_hash = password_hash
            message = f"Password updated for admin {username}."
        else:
            db.session.add(Admin(username=username, password_hash=password_hash))
            message = f"Admin {username} created."

        db.session.commit()
        app.logger.info(message)
        click.echo(message)
