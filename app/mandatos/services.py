from __future__ import annotations

import math
from decimal import Decimal

from flask import current_app
from sqlalchemy.exc import IntegrityError

from app.core.errors import (
    CaseFileNotApproved,
    InvalidAmount,
    InvalidState,
    InvalidTerm,
    MandateAlreadyExists,
    MissingField,
    NotFound,
    ValidationError,
)
from app.core.extensions import db
from app.core.models import Expediente, ExpedienteEstado, Mandato, MandatoEstado, Moneda, utcnow
from app.core.scope import scope_for
from app.core.utils import clean_text
from app.expedientes.services import expediente_for

MAX_PLAZO_DIAS = 3650
MAX_MONTO = Decimal("999999999999.99")


def _is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def _parse_plazo(value: object) -> int:
    if not _is_number(value) or value <= 0 or value > MAX_PLAZO_DIAS:
        raise InvalidTerm()
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidTerm()
        return int(value)
    return value


def _parse_monto(value: object) -> Decimal:
    if not _is_number(value) or value <= 0:
        raise InvalidAmount()
    monto = Decimal(str(value))
    if monto > MAX_MONTO:
        raise InvalidAmount()
    monto = monto.quantize(Decimal("0.01"))
    if monto <= 0:
        raise InvalidAmount()
    return monto


def _parse_moneda(value: object) -> Moneda:
    raw = str(value or "").strip().upper()
    if not raw:
        return Moneda.ARS
    try:
        return Moneda[raw]
    except KeyError as exc:
        raise ValidationError(
            f"Moneda inválida. Monedas permitidas: {', '.join(m.value for m in Moneda)}",
            details={"monedasPermitidas": [m.value for m in Moneda]},
        ) from exc


def _parse_mandato_estado(value: object) -> MandatoEstado:
    raw = str(value or "").strip().upper()
    if not raw:
        raise MissingField("estado")
    try:
        return MandatoEstado[raw]
    except KeyError as exc:
        raise InvalidState([e.value for e in MandatoEstado]) from exc


def _existing_mandato(expediente_id: int) -> Mandato | None:
    return Mandato.query.filter_by(expediente_id=expediente_id).first()


def create_mandato(expediente_id: int, payload: dict[str, object], identity) -> Mandato:
    expediente = expediente_for(expediente_id, scope_for(identity))
    if expediente.estado != ExpedienteEstado.APROBADO:
        raise CaseFileNotApproved(expediente.estado.value)
    existing = _existing_mandato(expediente.id)
    if existing:
        raise MandateAlreadyExists(existing.id, existing.estado.value)

    plazo_dias = _parse_plazo(payload.get("plazoDias"))
    monto = _parse_monto(payload.get("monto"))
    moneda = _parse_moneda(payload.get("moneda"))

    mandato = Mandato(
        expediente_id=expediente.id,
        plazo_dias=plazo_dias,
        monto=monto,
        moneda=moneda,
        observaciones=clean_text(payload.get("observaciones")),
        estado=MandatoEstado.BORRADOR,
    )
    db.session.add(mandato)
    try:
        db.session.commit()
    except IntegrityError as exc:
        # A concurrent request inserted first; the unique constraint decides.
        db.session.rollback()
        winner = _existing_mandato(expediente.id)
        if winner is None:
            raise
        raise MandateAlreadyExists(winner.id, winner.estado.value) from exc

    current_app.logger.info(
        "Mandato %s creado para expediente %s por usuario %s",
        mandato.id,
        expediente.id,
        identity.id,
    )
    return mandato


def mandato_for_expediente(expediente_id: int, identity) -> tuple[Expediente, Mandato]:
    expediente = expediente_for(expediente_id, scope_for(identity))
    if not expediente.mandato:
        raise NotFound("Este expediente no tiene mandato asociado")
    return expediente, expediente.mandato


def change_mandato_state(mandato_id: int, payload: dict[str, object], identity) -> Mandato:
    target = _parse_mandato_estado(payload.get("estado"))
    mandato = db.session.get(Mandato, mandato_id)
    if not mandato:
        raise NotFound("Mandato no encontrado")

    # Any enumerated state is accepted from any current state.
    previous = mandato.estado
    mandato.estado = target
    if target == MandatoEstado.FIRMADO:
        mandato.firmado_fecha = utcnow()
        firmado_por = clean_text(payload.get("firmadoPor"))
        if firmado_por:
            mandato.firmado_por = firmado_por

    documento_url = clean_text(payload.get("documentoUrl"))
    if documento_url:
        mandato.documento_url = documento_url

    db.session.add(mandato)
    db.session.commit()
    current_app.logger.info(
        "Mandato %s: %s -> %s por usuario %s",
        mandato.id,
        previous.value,
        target.value,
        identity.id,
    )
    return mandato
