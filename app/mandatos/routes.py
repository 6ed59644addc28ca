from __future__ import annotations

from pathlib import Path

from flask import current_app, jsonify, make_response, request
from flask_login import current_user

from app.core.downloads import stream_file
from app.core.errors import NotFound
from app.core.permissions import ADMIN_ONLY, require_auth, require_roles
from app.mandatos import mandatos_bp
from app.mandatos.services import change_mandato_state, create_mandato, mandato_for_expediente
from app.mandatos.word import DOCX_MIMETYPE, render_mandato_docx

TEMPLATE_DOWNLOAD_NAME = "mandato_venta_persona_fisica.docx"


def _json_payload() -> dict[str, object]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


# Word routes are declared ahead of the plain mandato routes.


@mandatos_bp.get("/expedientes/<int:expediente_id>/mandato/word")
@mandatos_bp.get("/propiedades/<int:expediente_id>/mandato/word")
@mandatos_bp.get("/expedientes/<int:expediente_id>/mandato/word-completo")
@mandatos_bp.get("/propiedades/<int:expediente_id>/mandato/word-completo")
@require_auth
def mandato_word(expediente_id: int):
    expediente, mandato = mandato_for_expediente(expediente_id, current_user)
    content = render_mandato_docx(expediente, mandato, expediente.asesor)
    response = make_response(content)
    response.headers["Content-Type"] = DOCX_MIMETYPE
    response.headers["Content-Disposition"] = f'attachment; filename="mandato-{expediente.id}.docx"'
    return response


@mandatos_bp.get("/mandatos/plantilla/persona-fisica")
@require_auth
def mandato_template():
    path = Path(current_app.config["MANDATO_TEMPLATE_PATH"])
    if not path.is_file():
        raise NotFound("Plantilla de mandato no encontrada")
    return stream_file(path, DOCX_MIMETYPE, TEMPLATE_DOWNLOAD_NAME)


@mandatos_bp.post("/expedientes/<int:expediente_id>/mandato")
@mandatos_bp.post("/propiedades/<int:expediente_id>/mandato")
@require_auth
def mandato_create(expediente_id: int):
    mandato = create_mandato(expediente_id, _json_payload(), current_user)
    return jsonify({"mensaje": "Mandato creado exitosamente", "mandato": mandato.to_dict(include_expediente=True)}), 201


@mandatos_bp.get("/expedientes/<int:expediente_id>/mandato")
@mandatos_bp.get("/propiedades/<int:expediente_id>/mandato")
@require_auth
def mandato_detail(expediente_id: int):
    _expediente, mandato = mandato_for_expediente(expediente_id, current_user)
    return jsonify({"mandato": mandato.to_dict()})


@mandatos_bp.put("/mandatos/<int:mandato_id>/estado")
@require_roles(ADMIN_ONLY)
def mandato_change_state(mandato_id: int):
    mandato = change_mandato_state(mandato_id, _json_payload(), current_user)
    return jsonify(
        {
            "mensaje": "Estado del mandato actualizado exitosamente",
            "mandato": mandato.to_dict(include_expediente=True),
        }
    )
