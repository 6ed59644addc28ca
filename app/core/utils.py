from __future__ import annotations

from datetime import date
from decimal import Decimal

from app.core.errors import ValidationError


def money(value: Decimal | float | int, currency: str = "ARS") -> str:
    formatted = f"{Decimal(value):,.2f}"
    # es-AR: dot for thousands, comma for decimals.
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{currency} {formatted}"


def parse_optional_iso_date(value: str | None, field_name: str) -> date | None:
    raw = (value or "").strip()
    if not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError as exc:
        raise ValidationError(f"Formato de fecha invalido para {field_name}") from exc


def clean_text(value: object) -> str | None:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None
