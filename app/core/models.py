from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from sqlalchemy import CheckConstraint, Enum as SAEnum, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from werkzeug.security import generate_password_hash

from app.core.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


class Rol(str, Enum):
    ADMIN = "ADMIN"
    REVISOR = "REVISOR"
    ASESOR = "ASESOR"


class ExpedienteEstado(str, Enum):
    PENDIENTE = "PENDIENTE"
    APROBADO = "APROBADO"
    RECHAZADO = "RECHAZADO"


class MandatoEstado(str, Enum):
    BORRADOR = "BORRADOR"
    ENVIADO = "ENVIADO"
    FIRMADO = "FIRMADO"
    ANULADO = "ANULADO"


class Moneda(str, Enum):
    ARS = "ARS"
    USD = "USD"


class DocumentoTipo(str, Enum):
    ESCRITURA = "ESCRITURA"
    DNI = "DNI"
    API = "API"
    TGI = "TGI"
    OTRO = "OTRO"


class Usuario(db.Model):
    __tablename__ = "usuario"

    id: Mapped[int] = mapped_column(primary_key=True)
    nombre: Mapped[str] = mapped_column(db.String(120), nullable=False)
    email: Mapped[str] = mapped_column(db.String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(db.String(255), nullable=False)
    rol: Mapped[Rol] = mapped_column(SAEnum(Rol, name="usuario_rol"), nullable=False, default=Rol.ASESOR)
    activo: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    expedientes = relationship("Expediente", back_populates="asesor")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "nombre": self.nombre,
            "email": self.email,
            "rol": self.rol.value if self.rol else None,
            "activo": self.activo,
            "createdAt": _iso(self.created_at),
        }


class Expediente(db.Model):
    __tablename__ = "expediente"
    __table_args__ = (
        Index("ix_expediente_asesor_estado", "asesor_id", "estado"),
        Index("ix_expediente_created_at", "created_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    titulo: Mapped[str] = mapped_column(db.String(200), nullable=False)
    descripcion: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    direccion: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    propietario_nombre: Mapped[str] = mapped_column(db.String(200), nullable=False)
    estado: Mapped[ExpedienteEstado] = mapped_column(
        SAEnum(ExpedienteEstado, name="expediente_estado"),
        nullable=False,
        default=ExpedienteEstado.PENDIENTE,
    )
    asesor_id: Mapped[int] = mapped_column(ForeignKey("usuario.id"), nullable=False)
    observaciones: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    asesor = relationship("Usuario", back_populates="expedientes")
    mandato = relationship("Mandato", back_populates="expediente", uselist=False)
    documentos = relationship("Documento", back_populates="expediente", order_by="Documento.id")

    def to_dict(self, include_mandato: bool = False) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "titulo": self.titulo,
            "descripcion": self.descripcion,
            "direccion": self.direccion,
            "propietarioNombre": self.propietario_nombre,
            "estado": self.estado.value if self.estado else None,
            "asesorId": self.asesor_id,
            "observaciones": self.observaciones,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
            "asesor": (
                {"id": self.asesor.id, "nombre": self.asesor.nombre, "email": self.asesor.email}
                if self.asesor
                else None
            ),
        }
        if include_mandato:
            data["mandato"] = self.mandato.to_dict() if self.mandato else None
        return data


class Mandato(db.Model):
    __tablename__ = "mandato"
    __table_args__ = (
        CheckConstraint("plazo_dias > 0", name="ck_mandato_plazo_positivo"),
        CheckConstraint("monto > 0", name="ck_mandato_monto_positivo"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    # One mandate per case file, enforced by the database.
    expediente_id: Mapped[int] = mapped_column(ForeignKey("expediente.id"), unique=True, nullable=False)
    plazo_dias: Mapped[int] = mapped_column(nullable=False)
    monto: Mapped[Decimal] = mapped_column(db.Numeric(14, 2), nullable=False)
    moneda: Mapped[Moneda] = mapped_column(SAEnum(Moneda, name="moneda"), nullable=False, default=Moneda.ARS)
    observaciones: Mapped[str | None] = mapped_column(db.Text, nullable=True)
    estado: Mapped[MandatoEstado] = mapped_column(
        SAEnum(MandatoEstado, name="mandato_estado"),
        nullable=False,
        default=MandatoEstado.BORRADOR,
    )
    firmado_por: Mapped[str | None] = mapped_column(db.String(200), nullable=True)
    firmado_fecha: Mapped[datetime | None] = mapped_column(nullable=True)
    documento_url: Mapped[str | None] = mapped_column(db.String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(default=utcnow, onupdate=utcnow, nullable=False)

    expediente = relationship("Expediente", back_populates="mandato")

    def to_dict(self, include_expediente: bool = False) -> dict[str, object]:
        data: dict[str, object] = {
            "id": self.id,
            "expedienteId": self.expediente_id,
            "plazoDias": self.plazo_dias,
            "monto": float(self.monto) if self.monto is not None else None,
            "moneda": self.moneda.value if self.moneda else None,
            "observaciones": self.observaciones,
            "estado": self.estado.value if self.estado else None,
            "firmadoPor": self.firmado_por,
            "firmadoFecha": _iso(self.firmado_fecha),
            "documentoUrl": self.documento_url,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
        if include_expediente and self.expediente:
            data["expediente"] = {
                "id": self.expediente.id,
                "titulo": self.expediente.titulo,
                "propietarioNombre": self.expediente.propietario_nombre,
                "estado": self.expediente.estado.value,
            }
        return data


class Documento(db.Model):
    __tablename__ = "documento"

    id: Mapped[int] = mapped_column(primary_key=True)
    expediente_id: Mapped[int] = mapped_column(ForeignKey("expediente.id"), nullable=False, index=True)
    tipo: Mapped[DocumentoTipo] = mapped_column(
        SAEnum(DocumentoTipo, name="documento_tipo"),
        nullable=False,
        default=DocumentoTipo.OTRO,
    )
    ruta: Mapped[str] = mapped_column(db.String(500), nullable=False)
    nombre_original: Mapped[str] = mapped_column(db.String(255), nullable=False)
    tamano: Mapped[int] = mapped_column(nullable=False, default=0)
    mimetype: Mapped[str] = mapped_column(db.String(120), nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    expediente = relationship("Expediente", back_populates="documentos")

    def to_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "expedienteId": self.expediente_id,
            "tipo": self.tipo.value if self.tipo else None,
            "ruta": self.ruta,
            "nombreOriginal": self.nombre_original,
            "tamano": self.tamano,
            "mimetype": self.mimetype,
            "createdAt": _iso(self.created_at),
        }


def seed_demo_data(session) -> None:
    admin = Usuario(
        nombre="Admin Coldwell",
        email="admin@coldwell.local",
        password_hash=generate_password_hash("admin123"),
        rol=Rol.ADMIN,
    )
    revisor = Usuario(
        nombre="Revisora Legal",
        email="revisor@coldwell.local",
        password_hash=generate_password_hash("revisor123"),
        rol=Rol.REVISOR,
    )
    asesor = Usuario(
        nombre="Lucia Asesora",
        email="asesor@coldwell.local",
        password_hash=generate_password_hash("asesor123"),
        rol=Rol.ASESOR,
    )
    asesor2 = Usuario(
        nombre="Martin Asesor",
        email="asesor2@coldwell.local",
        password_hash=generate_password_hash("asesor123"),
        rol=Rol.ASESOR,
    )
    session.add_all([admin, revisor, asesor, asesor2])
    session.flush()

    session.add_all(
        [
            Expediente(
                titulo="Departamento 3 ambientes Palermo",
                descripcion="Balcon al frente, cochera",
                direccion="Gurruchaga 1820, CABA",
                propietario_nombre="Ana Gomez",
                estado=ExpedienteEstado.PENDIENTE,
                asesor_id=asesor.id,
            ),
            Expediente(
                titulo="Casa quinta Pilar",
                descripcion="Lote de 1200 m2 con pileta",
                direccion="Los Alamos 450, Pilar",
                propietario_nombre="Roberto Diaz",
                estado=ExpedienteEstado.APROBADO,
                asesor_id=asesor.id,
            ),
            Expediente(
                titulo="Local comercial Rosario centro",
                direccion="Cordoba 1100, Rosario",
                propietario_nombre="Carla Mendez",
                estado=ExpedienteEstado.APROBADO,
                asesor_id=asesor2.id,
            ),
            Expediente(
                titulo="PH Villa Crespo",
                propietario_nombre="Jorge Paz",
                estado=ExpedienteEstado.RECHAZADO,
                asesor_id=asesor2.id,
                observaciones="Falta escritura",
            ),
        ]
    )
    session.commit()
