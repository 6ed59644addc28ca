"""Word rendering of a sales mandate.

Pure projection of the case file, the mandate and the responsible agent
into a .docx byte string. Nothing is read from or written to storage.
"""
from __future__ import annotations

import io
from datetime import datetime, timezone

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from app.core.models import Expediente, Mandato, MandatoEstado, Usuario
from app.core.utils import money

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TITLE = "MANDATO DE VENTA"


def _fmt_datetime(value: datetime | None) -> str:
    if not value:
        return "-"
    return value.strftime("%d/%m/%Y %H:%M")


def _labelled(doc, label: str, value: object) -> None:
    paragraph = doc.add_paragraph()
    label_run = paragraph.add_run(f"{label}: ")
    label_run.bold = True
    paragraph.add_run(str(value))


def _section(doc, title: str) -> None:
    doc.add_heading(title, level=2)


def render_mandato_docx(
    expediente: Expediente,
    mandato: Mandato,
    asesor: Usuario | None,
    generated_at: datetime | None = None,
) -> bytes:
    generated_at = generated_at or datetime.now(timezone.utc)
    doc = Document()

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = title.add_run(TITLE)
    run.bold = True
    run.font.size = Pt(16)
    subtitle = doc.add_paragraph(f"Expediente N° {expediente.id}")
    subtitle.alignment = WD_ALIGN_PARAGRAPH.CENTER

    _section(doc, "Datos del expediente")
    _labelled(doc, "ID", expediente.id)
    _labelled(doc, "Título", expediente.titulo)
    _labelled(doc, "Propietario", expediente.propietario_nombre)
    _labelled(doc, "Estado", expediente.estado.value if expediente.estado else "-")
    if expediente.descripcion:
        _labelled(doc, "Descripción", expediente.descripcion)

    _section(doc, "Datos del mandato")
    _labelled(doc, "ID", mandato.id)
    _labelled(doc, "Plazo", f"{mandato.plazo_dias} días")
    moneda = mandato.moneda.value if mandato.moneda else "ARS"
    _labelled(doc, "Monto", money(mandato.monto, moneda))
    _labelled(doc, "Estado", mandato.estado.value if mandato.estado else "-")
    if mandato.observaciones:
        _labelled(doc, "Observaciones", mandato.observaciones)
    _labelled(doc, "Fecha de creación", _fmt_datetime(mandato.created_at))

    if mandato.estado == MandatoEstado.FIRMADO and mandato.firmado_por:
        _section(doc, "Firma")
        _labelled(doc, "Firmado por", mandato.firmado_por)
        if mandato.firmado_fecha:
            _labelled(doc, "Fecha de firma", _fmt_datetime(mandato.firmado_fecha))

    if asesor:
        _section(doc, "Asesor responsable")
        _labelled(doc, "Nombre", asesor.nombre)
        _labelled(doc, "Email", asesor.email)

    footer = doc.add_paragraph()
    footer_run = footer.add_run(f"Documento generado el {_fmt_datetime(generated_at)}")
    footer_run.italic = True
    footer_run.font.size = Pt(9)

    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()
