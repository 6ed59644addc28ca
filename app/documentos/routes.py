from __future__ import annotations

from flask import jsonify, request
from flask_login import current_user

from app.core.downloads import stream_file
from app.core.permissions import require_auth
from app.documentos import documentos_bp
from app.documentos.services import documento_file, list_documentos, upload_documento


@documentos_bp.post("/documentos")
@require_auth
def documento_upload():
    documento = upload_documento(request.form, request.files.get("archivo"), current_user)
    return jsonify({"mensaje": "Documento subido exitosamente", "documento": documento.to_dict()}), 201


@documentos_bp.get("/expedientes/<int:expediente_id>/documentos")
@documentos_bp.get("/propiedades/<int:expediente_id>/documentos")
@require_auth
def documentos_list(expediente_id: int):
    return jsonify({"data": [d.to_dict() for d in list_documentos(expediente_id, current_user)]})


@documentos_bp.get("/documentos/<int:documento_id>/descargar")
@require_auth
def documento_download(documento_id: int):
    documento, absolute = documento_file(documento_id, current_user)
    return stream_file(absolute, documento.mimetype or "application/octet-stream", absolute.name)
