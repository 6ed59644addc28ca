from __future__ import annotations

from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user
from werkzeug.security import check_password_hash

from app.core.errors import InvalidLogin, Unauthenticated
from app.core.extensions import db
from app.core.identity import Identity, issue_token
from app.core.models import Rol, Usuario
from app.core.permissions import require_auth
from app.usuarios.services import create_usuario

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def token_for(usuario: Usuario, expires_in: timedelta | None = None) -> str:
    config = current_app.config
    return issue_token(
        usuario.id,
        usuario.email,
        usuario.rol.value,
        config["JWT_SECRET"],
        config["JWT_ALGORITHM"],
        expires_in or timedelta(hours=config["JWT_EXPIRES_HOURS"]),
    )


def optional_identity() -> Identity | None:
    try:
        return current_user if current_user.is_authenticated else None
    except Unauthenticated:
        return None


@auth_bp.post("/login")
def login():
    payload = request.get_json(silent=True) or {}
    email = str(payload.get("email") or "").strip().lower()
    password = str(payload.get("password") or "")
    usuario = Usuario.query.filter_by(email=email).first()
    if not usuario or not usuario.activo or not check_password_hash(usuario.password_hash, password):
        current_app.logger.warning("Login fallido para %s", email or "<vacio>")
        raise InvalidLogin()

    token = token_for(usuario)
    response = jsonify({"mensaje": "Login exitoso", "token": token, "usuario": usuario.to_dict()})
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=current_app.config["JWT_EXPIRES_HOURS"] * 3600,
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


@auth_bp.post("/logout")
def logout():
    response = jsonify({"mensaje": "Sesión cerrada"})
    response.delete_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        httponly=True,
        secure=current_app.config["AUTH_COOKIE_SECURE"],
        samesite="Lax",
    )
    return response


@auth_bp.get("/me")
@require_auth
def me():
    data = current_user.to_dict()
    usuario = db.session.get(Usuario, current_user.id)
    data["nombre"] = usuario.nombre if usuario else None
    return jsonify({"usuario": data})


@auth_bp.post("/register")
def register():
    payload = request.get_json(silent=True) or {}
    actor = optional_identity()
    allow_role = actor is not None and actor.rol == Rol.ADMIN.value
    usuario = create_usuario(payload, allow_role=allow_role)
    return jsonify({"mensaje": "Usuario creado exitosamente", "usuario": usuario.to_dict()}), 201
