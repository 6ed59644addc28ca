from __future__ import annotations

import re

from werkzeug.security import generate_password_hash

from app.core.errors import EmailAlreadyExists, MissingField, NotFound, UserHasCaseFiles, ValidationError
from app.core.extensions import db
from app.core.models import Expediente, Rol, Usuario

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _parse_rol(value: object) -> Rol:
    raw = str(value or "").strip().upper()
    try:
        return Rol[raw]
    except KeyError as exc:
        raise ValidationError(f"Rol inválido. Roles permitidos: {', '.join(r.value for r in Rol)}") from exc


def list_usuarios() -> list[Usuario]:
    return Usuario.query.order_by(Usuario.nombre.asc(), Usuario.id.asc()).all()


def usuario_by_id(usuario_id: int) -> Usuario:
    usuario = db.session.get(Usuario, usuario_id)
    if not usuario:
        raise NotFound("Usuario no encontrado")
    return usuario


def create_usuario(payload: dict[str, object], allow_role: bool = False) -> Usuario:
    nombre = str(payload.get("nombre") or "").strip()
    email = str(payload.get("email") or "").strip().lower()
    password = str(payload.get("password") or "")
    if not nombre:
        raise MissingField("nombre")
    if not email:
        raise MissingField("email")
    if not EMAIL_RE.match(email):
        raise ValidationError("Email inválido")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"La contraseña debe tener al menos {MIN_PASSWORD_LENGTH} caracteres")

    rol = Rol.ASESOR
    if allow_role and payload.get("rol"):
        rol = _parse_rol(payload.get("rol"))

    if Usuario.query.filter_by(email=email).first():
        raise EmailAlreadyExists()

    usuario = Usuario(
        nombre=nombre,
        email=email,
        password_hash=generate_password_hash(password),
        rol=rol,
    )
    db.session.add(usuario)
    db.session.commit()
    return usuario


def delete_usuario(usuario_id: int, actor_id: int) -> None:
    usuario = usuario_by_id(usuario_id)
    if usuario.id == actor_id:
        raise ValidationError("No puedes eliminar tu propio usuario")
    if Expediente.query.filter_by(asesor_id=usuario.id).first():
        raise UserHasCaseFiles()
    db.session.delete(usuario)
    db.session.commit()
