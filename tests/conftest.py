from __future__ import annotations

import sys
from datetime import timedelta
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from app import create_app
from app.core.config import Config
from app.core.extensions import db
from app.core.identity import issue_token
from app.core.models import Expediente, ExpedienteEstado, Usuario, seed_demo_data

DEMO_EMAILS = {
    "admin": "admin@coldwell.local",
    "revisor": "revisor@coldwell.local",
    "asesor": "asesor@coldwell.local",
    "asesor2": "asesor2@coldwell.local",
}


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SECRET_KEY = "test-secret"
    JWT_SECRET = "test-jwt-secret"
    AUTH_COOKIE_SECURE = False


@pytest.fixture
def app(tmp_path):
    class _Config(TestConfig):
        UPLOAD_ROOT = str(tmp_path / "uploads")
        MANDATO_TEMPLATE_PATH = str(tmp_path / "templates" / "mandato_venta_persona_fisica.docx")

    app = create_app(_Config)
    with app.app_context():
        db.create_all()
        seed_demo_data(db.session)
    # Requests must run outside this context so each one resolves its own identity.
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user_id(app):
    def _user_id(key: str) -> int:
        with app.app_context():
            return Usuario.query.filter_by(email=DEMO_EMAILS[key]).first().id

    return _user_id


@pytest.fixture
def token_for(app):
    def _token(key: str, expires_in: timedelta = timedelta(hours=1)) -> str:
        with app.app_context():
            usuario = Usuario.query.filter_by(email=DEMO_EMAILS[key]).first()
            return issue_token(
                usuario.id,
                usuario.email,
                usuario.rol.value,
                app.config["JWT_SECRET"],
                app.config["JWT_ALGORITHM"],
                expires_in,
            )

    return _token


@pytest.fixture
def auth_headers(token_for):
    def _headers(key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(key)}"}

    return _headers


@pytest.fixture
def expediente_id(app):
    """Id of a seeded case file, looked up by owner and state."""

    def _lookup(owner_key: str, estado: ExpedienteEstado) -> int:
        with app.app_context():
            owner = Usuario.query.filter_by(email=DEMO_EMAILS[owner_key]).first()
            return (
                Expediente.query.filter_by(asesor_id=owner.id, estado=estado)
                .order_by(Expediente.id.asc())
                .first()
                .id
            )

    return _lookup
