from __future__ import annotations

from flask import current_app, jsonify, request
from flask_login import current_user

from app.core.permissions import ADMIN_ONLY, require_roles
from app.usuarios import usuarios_bp
from app.usuarios.services import create_usuario, delete_usuario, list_usuarios


@usuarios_bp.get("")
@require_roles(ADMIN_ONLY)
def usuarios_list():
    return jsonify({"data": [u.to_dict() for u in list_usuarios()]})


@usuarios_bp.post("")
@require_roles(ADMIN_ONLY)
def usuarios_create():
    payload = request.get_json(silent=True) or {}
    usuario = create_usuario(payload, allow_role=True)
    current_app.logger.info("Usuario %s creado por %s", usuario.email, current_user.email)
    return jsonify({"mensaje": "Usuario creado exitosamente", "usuario": usuario.to_dict()}), 201


@usuarios_bp.delete("/<int:usuario_id>")
@require_roles(ADMIN_ONLY)
def usuarios_delete(usuario_id: int):
    delete_usuario(usuario_id, current_user.id)
    current_app.logger.info("Usuario %s eliminado por %s", usuario_id, current_user.email)
    return jsonify({"mensaje": "Usuario eliminado exitosamente"})
