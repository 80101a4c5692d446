import logging

import click
from flask import Flask, jsonify, request

from access_control import Role
from api import api_bp
from auth import purge_expired_sessions
from config import Config
from extensions import db, migrate
from github_oauth import auth_bp
from models import User
from views import views_bp

logger = logging.getLogger(__name__)


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(views_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(api_bp, url_prefix="/api")

    register_error_handlers(app)
    register_commands(app)
    return app


def register_error_handlers(app):
    @app.errorhandler(404)
    def not_found(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Not found"}), 404
        return error

    @app.errorhandler(405)
    def method_not_allowed(error):
        if request.path.startswith("/api/"):
            return jsonify({"error": "Method not allowed"}), 405
        return error


def register_commands(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("set-role")
    @click.argument("email")
    @click.argument("role", type=click.Choice([r.value for r in Role]))
    def set_role(email, role):
        """Give the user with EMAIL the role ROLE."""
        user = User.query.filter_by(email=email).first()
        if user is None:
            raise click.ClickException(f"No user with email {email}")
        user.role = role
        db.session.commit()
        logger.info("Role of %s set to %s from the command line", user.id, role)
        click.echo(f"{email} is now {role}.")

    @app.cli.command("purge-sessions")
    def purge_sessions():
        """Delete expired login sessions."""
        click.echo(f"Removed {purge_expired_sessions()} expired session(s).")


if __name__ == "__main__":
    create_app().run(debug=True)
