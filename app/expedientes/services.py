from __future__ import annotations

from datetime import datetime

from flask import current_app
from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from app.core.errors import InvalidState, MissingField, NotEditable, NotFound, ValidationError
from app.core.extensions import db
from app.core.models import Expediente, ExpedienteEstado
from app.core.scope import Scope, scope_for
from app.core.utils import clean_text, parse_optional_iso_date

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100
EDITABLE_FIELDS = {
    "titulo": "titulo",
    "descripcion": "descripcion",
    "direccion": "direccion",
    "propietarioNombre": "propietario_nombre",
}


def _parse_expediente_estado(value: object) -> ExpedienteEstado:
    raw = str(value or "").strip().upper()
    if not raw:
        raise MissingField("estado")
    try:
        return ExpedienteEstado[raw]
    except KeyError as exc:
        raise InvalidState([e.value for e in ExpedienteEstado]) from exc


def _positive_int(value: object, default: int) -> int:
    try:
        parsed = int(str(value))
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def expediente_for(expediente_id: int, scope: Scope) -> Expediente:
    expediente = (
        scope.apply(Expediente.query.options(joinedload(Expediente.asesor)))
        .filter(Expediente.id == expediente_id)
        .first()
    )
    if not expediente:
        # Absent and foreign records look the same to the caller.
        raise NotFound("Expediente no encontrado o no tienes permisos para verlo")
    return expediente


def list_expedientes(filters: dict[str, str], identity) -> dict[str, object]:
    query = scope_for(identity).apply(
        Expediente.query.options(joinedload(Expediente.asesor), joinedload(Expediente.mandato))
    ).order_by(Expediente.created_at.desc(), Expediente.id.desc())

    estado = (filters.get("estado") or "").strip().upper()
    if estado:
        query = query.filter(Expediente.estado == _parse_expediente_estado(estado))
    asesor_id = (filters.get("asesorId") or "").strip()
    if asesor_id:
        if not (asesor_id.isascii() and asesor_id.isdigit()):
            raise ValidationError("asesorId inválido")
        query = query.filter(Expediente.asesor_id == int(asesor_id))

    desde = parse_optional_iso_date(filters.get("desde"), "desde")
    hasta = parse_optional_iso_date(filters.get("hasta"), "hasta")
    if desde:
        query = query.filter(Expediente.created_at >= datetime.combine(desde, datetime.min.time()))
    if hasta:
        query = query.filter(Expediente.created_at <= datetime.combine(hasta, datetime.max.time()))

    search = (filters.get("q") or "").strip()
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Expediente.titulo.ilike(like), Expediente.propietario_nombre.ilike(like)))

    page = _positive_int(filters.get("page"), 1)
    limit = min(_positive_int(filters.get("limit"), DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE)
    pagination = query.paginate(page=page, per_page=limit, error_out=False)
    return {
        "data": [e.to_dict(include_mandato=True) for e in pagination.items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": pagination.total,
            "totalPages": max(1, pagination.pages),
        },
    }


def get_expediente(expediente_id: int, identity) -> Expediente:
    return expediente_for(expediente_id, scope_for(identity))


def create_expediente(payload: dict[str, object], identity) -> Expediente:
    titulo = clean_text(payload.get("titulo"))
    if not titulo:
        raise MissingField("titulo")
    propietario = clean_text(payload.get("propietarioNombre"))
    if not propietario:
        raise MissingField("propietarioNombre")

    expediente = Expediente(
        titulo=titulo,
        descripcion=clean_text(payload.get("descripcion")),
        direccion=clean_text(payload.get("direccion")),
        propietario_nombre=propietario,
        observaciones=clean_text(payload.get("observaciones")),
        estado=ExpedienteEstado.PENDIENTE,
        asesor_id=identity.id,
    )
    db.session.add(expediente)
    db.session.commit()
    current_app.logger.info("Expediente %s creado por usuario %s", expediente.id, identity.id)
    return expediente


def update_expediente(expediente_id: int, payload: dict[str, object], identity) -> Expediente:
    expediente = expediente_for(expediente_id, scope_for(identity))
    if expediente.estado != ExpedienteEstado.PENDIENTE:
        raise NotEditable(details={"estadoActual": expediente.estado.value})

    for key, attr in EDITABLE_FIELDS.items():
        if key not in payload:
            continue
        value = clean_text(payload.get(key))
        if attr in {"titulo", "propietario_nombre"} and not value:
            raise MissingField(key)
        setattr(expediente, attr, value)
    db.session.add(expediente)
    db.session.commit()
    return expediente


def change_expediente_state(expediente_id: int, payload: dict[str, object], identity) -> Expediente:
    # No adjacency restriction: any known state is accepted by an elevated role.
    target = _parse_expediente_estado(payload.get("estado"))
    expediente = expediente_for(expediente_id, Scope.all())
    previous = expediente.estado
    expediente.estado = target
    if "observaciones" in payload:
        expediente.observaciones = clean_text(payload.get("observaciones"))
    db.session.add(expediente)
    db.session.commit()
    current_app.logger.info(
        "Expediente %s: %s -> %s por usuario %s",
        expediente.id,
        previous.value,
        target.value,
        identity.id,
    )
    return expediente
