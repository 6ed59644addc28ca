from __future__ import annotations

from datetime import timedelta

import pytest

from app import create_app
from app.core.config import Config
from app.core.errors import ConfigurationError
from app.core.extensions import db
from app.core.identity import issue_token
from app.core.models import Rol, Usuario


def test_login_sets_cookie_and_returns_token(client):
    response = client.post("/auth/login", json={"email": "ADMIN@coldwell.local ", "password": "admin123"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["token"]
    assert body["usuario"]["rol"] == "ADMIN"
    assert "password_hash" not in body["usuario"]
    cookies = response.headers.getlist("Set-Cookie")
    assert any(c.startswith("token=") and "HttpOnly" in c for c in cookies)

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.get_json()["usuario"]["email"] == "admin@coldwell.local"
    assert me.get_json()["usuario"]["nombre"] == "Admin Coldwell"


def test_login_rejects_bad_password(client):
    response = client.post("/auth/login", json={"email": "admin@coldwell.local", "password": "nope"})
    assert response.status_code == 401
    assert response.get_json()["code"] == "InvalidLogin"


def test_logout_clears_cookie(client):
    client.post("/auth/login", json={"email": "asesor@coldwell.local", "password": "asesor123"})
    response = client.post("/auth/logout")
    assert response.status_code == 200
    assert any(c.startswith("token=;") for c in response.headers.getlist("Set-Cookie"))
    assert client.get("/auth/me").status_code == 401


def test_me_without_credentials_is_missing_credential(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.get_json() == {"error": "Token no proporcionado", "code": "MissingCredential"}


def test_me_with_expired_token_reports_expiry(client, token_for):
    expired = token_for("asesor", expires_in=timedelta(seconds=-30))
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert response.status_code == 401
    assert response.get_json()["code"] == "ExpiredCredential"
    assert response.get_json()["error"] == "Token expirado"


def test_me_with_tampered_token_reports_invalid(client, token_for):
    token = token_for("asesor")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {tampered}"})
    assert response.status_code == 401
    assert response.get_json()["code"] == "InvalidCredential"
    assert response.get_json()["error"] == "Token inválido"


def test_me_accepts_raw_authorization_header_and_query_token(client, token_for):
    token = token_for("revisor")
    raw = client.get("/auth/me", headers={"Authorization": token})
    assert raw.status_code == 200
    assert raw.get_json()["usuario"]["rol"] == "REVISOR"

    query = client.get(f"/auth/me?token={token}")
    assert query.status_code == 200
    assert query.get_json()["usuario"]["email"] == "revisor@coldwell.local"


def test_cookie_takes_precedence_over_header_and_query(client, token_for):
    client.post("/auth/login", json={"email": "asesor@coldwell.local", "password": "asesor123"})
    response = client.get(
        f"/auth/me?token={token_for('revisor')}",
        headers={"Authorization": f"Bearer {token_for('admin')}"},
    )
    assert response.status_code == 200
    assert response.get_json()["usuario"]["email"] == "asesor@coldwell.local"


def test_header_takes_precedence_over_query(client, token_for):
    response = client.get(
        f"/auth/me?token={token_for('revisor')}",
        headers={"Authorization": f"Bearer {token_for('admin')}"},
    )
    assert response.get_json()["usuario"]["email"] == "admin@coldwell.local"


def test_token_signed_with_other_secret_is_invalid(client):
    forged = issue_token(1, "admin@coldwell.local", "ADMIN", "another-secret")
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})
    assert response.status_code == 401
    assert response.get_json()["code"] == "InvalidCredential"


def test_create_app_fails_fast_without_jwt_secret():
    class NoSecretConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = "sqlite://"
        JWT_SECRET = ""

    with pytest.raises(ConfigurationError):
        create_app(NoSecretConfig)


def test_register_forces_asesor_role_for_anonymous_callers(app, client):
    response = client.post(
        "/auth/register",
        json={"nombre": "Nuevo", "email": "nuevo@coldwell.local", "password": "secreto1", "rol": "ADMIN"},
    )
    assert response.status_code == 201
    assert response.get_json()["usuario"]["rol"] == "ASESOR"

    duplicate = client.post(
        "/auth/register",
        json={"nombre": "Otro", "email": "nuevo@coldwell.local", "password": "secreto1"},
    )
    assert duplicate.status_code == 400
    assert duplicate.get_json()["code"] == "EmailAlreadyExists"


def test_register_by_admin_may_choose_role(app, client, auth_headers):
    response = client.post(
        "/auth/register",
        json={"nombre": "Rev 2", "email": "rev2@coldwell.local", "password": "secreto1", "rol": "REVISOR"},
        headers=auth_headers("admin"),
    )
    assert response.status_code == 201
    with app.app_context():
        assert Usuario.query.filter_by(email="rev2@coldwell.local").first().rol == Rol.REVISOR


def test_inactive_user_cannot_login(app, client):
    with app.app_context():
        usuario = Usuario.query.filter_by(email="asesor2@coldwell.local").first()
        usuario.activo = False
        db.session.commit()

    response = client.post("/auth/login", json={"email": "asesor2@coldwell.local", "password": "asesor123"})
    assert response.status_code == 401
