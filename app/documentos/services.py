from __future__ import annotations

from pathlib import Path

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from app.core.errors import MissingField, NotFound, UnsupportedFileType, ValidationError
from app.core.extensions import db
from app.core.models import Documento, DocumentoTipo, Expediente, utcnow
from app.core.scope import scope_for
from app.documentos.guard import (
    ensure_destination,
    is_allowed_file,
    normalize_owner_field,
    open_new_file,
    parse_owner_id,
    resolve_stored_path,
)
from app.expedientes.services import expediente_for


def _upload_root() -> Path:
    return Path(current_app.config["UPLOAD_ROOT"])


def _parse_documento_tipo(value: object) -> DocumentoTipo:
    raw = str(value or "").strip().upper()
    if not raw:
        return DocumentoTipo.OTRO
    try:
        return DocumentoTipo[raw]
    except KeyError as exc:
        raise ValidationError(
            f"Tipo de documento inválido. Tipos permitidos: {', '.join(t.value for t in DocumentoTipo)}"
        ) from exc


def upload_documento(form, file_obj: FileStorage | None, identity) -> Documento:
    owner_id = parse_owner_id(normalize_owner_field(form))
    if not file_obj or not file_obj.filename:
        raise MissingField("archivo", "Debes seleccionar un archivo")
    if not is_allowed_file(file_obj.mimetype, file_obj.filename):
        current_app.logger.warning(
            "Archivo rechazado: %s (%s)",
            file_obj.filename,
            file_obj.mimetype,
        )
        raise UnsupportedFileType()
    tipo = _parse_documento_tipo(form.get("tipo"))
    expediente = expediente_for(owner_id, scope_for(identity))

    root = _upload_root()
    destination = ensure_destination(root, expediente.id)
    absolute, handle = open_new_file(destination, expediente.id, file_obj.filename, utcnow())
    try:
        with handle:
            file_obj.save(handle)
    except OSError:
        absolute.unlink(missing_ok=True)
        raise

    documento = Documento(
        expediente_id=expediente.id,
        tipo=tipo,
        ruta=absolute.relative_to(root.resolve()).as_posix(),
        nombre_original=file_obj.filename,
        tamano=absolute.stat().st_size,
        mimetype=file_obj.mimetype or "",
    )
    db.session.add(documento)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        absolute.unlink(missing_ok=True)
        current_app.logger.warning("Alta de documento fallida, se descarta %s", absolute.name)
        raise
    current_app.logger.info(
        "Documento %s (%s) subido para expediente %s por usuario %s",
        documento.id,
        absolute.name,
        expediente.id,
        identity.id,
    )
    return documento


def list_documentos(expediente_id: int, identity) -> list[Documento]:
    expediente = expediente_for(expediente_id, scope_for(identity))
    return (
        Documento.query.filter_by(expediente_id=expediente.id)
        .order_by(Documento.created_at.desc(), Documento.id.desc())
        .all()
    )


def documento_file(documento_id: int, identity) -> tuple[Documento, Path]:
    documento = (
        scope_for(identity)
        .apply(Documento.query.join(Expediente, Documento.expediente_id == Expediente.id))
        .filter(Documento.id == documento_id)
        .first()
    )
    if not documento:
        raise NotFound("Documento no encontrado")
    absolute = resolve_stored_path(_upload_root(), documento.ruta)
    if not absolute.is_file():
        raise NotFound("Fichero de documento no encontrado")
    return documento, absolute
