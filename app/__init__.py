from __future__ import annotations

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge
from werkzeug.security import generate_password_hash

from app.core.auth import auth_bp
from app.core.config import Config
from app.core.errors import ApiError, ConfigurationError, FileTooLarge
from app.core.extensions import db, login_manager, migrate
from app.core.identity import Identity, load_identity_from_request
from app.core.models import Rol, Usuario, seed_demo_data
from app.documentos import documentos_bp
from app.expedientes import expedientes_bp
from app.mandatos import mandatos_bp
from app.usuarios import usuarios_bp


def create_app(config_object: type[Config] | None = None) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    if not app.config.get("JWT_SECRET"):
        raise ConfigurationError("JWT_SECRET")
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(expedientes_bp)
    app.register_blueprint(mandatos_bp)
    app.register_blueprint(documentos_bp)
    app.register_blueprint(usuarios_bp)

    register_cli(app)
    register_error_handlers(app)
    return app


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def api_error(error: ApiError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(_error):
        error = FileTooLarge()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        return jsonify({"error": error.description, "code": error.name.replace(" ", "")}), error.code

    @app.errorhandler(Exception)
    def unexpected_error(error: Exception):
        app.logger.exception("Error no controlado: %s", error)
        return jsonify({"error": "Error interno del servidor", "code": "Internal"}), 500


def register_cli(app: Flask) -> None:
    @app.cli.command("seed-demo")
    @click.option("--reset", is_flag=True, help="Delete existing data before seed.")
    def seed_demo(reset: bool) -> None:
        """Seed demo users and case files."""
        if reset:
            db.drop_all()
            db.create_all()
        if not Usuario.query.first():
            seed_demo_data(db.session)
            click.echo("Demo data seeded.")
        else:
            click.echo("Seed skipped: existing users found.")

    @app.cli.command("create-user")
    @click.option("--email", type=str, required=True)
    @click.option("--nombre", type=str, required=True)
    @click.option("--password", type=str, required=True)
    @click.option("--rol", type=click.Choice([r.value for r in Rol]), default=Rol.ASESOR.value)
    def create_user(email: str, nombre: str, password: str, rol: str) -> None:
        """Create a user without going through the API."""
        email = email.strip().lower()
        if Usuario.query.filter_by(email=email).first():
            raise click.ClickException(f"User {email} already exists.")
        db.session.add(
            Usuario(
                email=email,
                nombre=nombre.strip(),
                password_hash=generate_password_hash(password),
                rol=Rol[rol],
            )
        )
        db.session.commit()
        click.echo(f"User {email} created with role {rol}.")


@login_manager.request_loader
def load_identity(request) -> Identity | None:
    return load_identity_from_request(request)
