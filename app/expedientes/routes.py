from __future__ import annotations

from flask import jsonify, request
from flask_login import current_user

from app.core.permissions import ADMIN_OR_REVIEWER, require_auth, require_roles
from app.expedientes import expedientes_bp
from app.expedientes.services import (
    change_expediente_state,
    create_expediente,
    get_expediente,
    list_expedientes,
    update_expediente,
)

# "/propiedades" is the alias used by the mobile app.


def _json_payload() -> dict[str, object]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@expedientes_bp.get("/expedientes")
@expedientes_bp.get("/propiedades")
@require_auth
def expedientes_list():
    filters = {k: v for k, v in request.args.items()}
    return jsonify(list_expedientes(filters, current_user))


@expedientes_bp.get("/expedientes/<int:expediente_id>")
@expedientes_bp.get("/propiedades/<int:expediente_id>")
@require_auth
def expediente_detail(expediente_id: int):
    expediente = get_expediente(expediente_id, current_user)
    data = expediente.to_dict(include_mandato=True)
    data["documentos"] = [d.to_dict() for d in expediente.documentos]
    return jsonify(data)


@expedientes_bp.post("/expedientes")
@expedientes_bp.post("/propiedades")
@require_auth
def expediente_create():
    expediente = create_expediente(_json_payload(), current_user)
    return jsonify({"mensaje": "Expediente creado exitosamente", "expediente": expediente.to_dict()}), 201


@expedientes_bp.put("/expedientes/<int:expediente_id>")
@expedientes_bp.put("/propiedades/<int:expediente_id>")
@require_auth
def expediente_update(expediente_id: int):
    expediente = update_expediente(expediente_id, _json_payload(), current_user)
    return jsonify({"mensaje": "Expediente actualizado exitosamente", "expediente": expediente.to_dict()})


@expedientes_bp.route("/expedientes/<int:expediente_id>/estado", methods=["PUT", "PATCH"])
@expedientes_bp.route("/propiedades/<int:expediente_id>/estado", methods=["PUT", "PATCH"])
@require_roles(ADMIN_OR_REVIEWER)
def expediente_change_state(expediente_id: int):
    expediente = change_expediente_state(expediente_id, _json_payload(), current_user)
    return jsonify(
        {
            "mensaje": f"Estado del expediente actualizado a {expediente.estado.value}",
            "data": expediente.to_dict(),
        }
    )
