"""Error taxonomy shared by every blueprint.

Each error carries a stable ``code`` for clients, a human message and
optional details merged into the JSON body. Handlers are registered in
``create_app``.
"""
from __future__ import annotations

from typing import Any


class ConfigurationError(RuntimeError):
    """Required configuration missing at boot."""

    def __init__(self, config_key: str):
        self.config_key = config_key
        super().__init__(f"{config_key} no configurado")


class ApiError(Exception):
    status_code = 500
    code = "Internal"
    default_message = "Error interno del servidor"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message, "code": self.code}
        body.update(self.details)
        return body

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


# 401


class Unauthenticated(ApiError):
    status_code = 401
    code = "Unauthenticated"
    default_message = "Usuario no autenticado"


class MissingCredential(Unauthenticated):
    code = "MissingCredential"
    default_message = "Token no proporcionado"


class InvalidCredential(Unauthenticated):
    code = "InvalidCredential"
    default_message = "Token inválido"


class ExpiredCredential(Unauthenticated):
    code = "ExpiredCredential"
    default_message = "Token expirado"


class InvalidLogin(Unauthenticated):
    code = "InvalidLogin"
    default_message = "Credenciales inválidas"


# 403


class Forbidden(ApiError):
    status_code = 403
    code = "Forbidden"
    default_message = "Acceso denegado"


# 400


class ValidationError(ApiError):
    status_code = 400
    code = "ValidationError"
    default_message = "Datos inválidos"


class MissingField(ValidationError):
    code = "MissingField"

    def __init__(self, field_name: str, message: str | None = None):
        super().__init__(
            message or f'El campo "{field_name}" es obligatorio',
            details={"campo": field_name},
        )


class InvalidOwnerId(ValidationError):
    code = "InvalidOwnerId"
    default_message = "El expedienteId debe ser un número positivo válido"


class PathEscape(ValidationError):
    code = "PathEscape"
    default_message = "Ruta de archivo inválida"


class UnsupportedFileType(ValidationError):
    code = "UnsupportedFileType"
    default_message = "Solo se permiten archivos PDF o Imágenes (JPG, PNG)"


class FileTooLarge(ValidationError):
    code = "FileTooLarge"
    default_message = "El archivo supera el tamaño máximo de 50MB"


class InvalidTerm(ValidationError):
    code = "InvalidTerm"
    default_message = 'El campo "plazoDias" es obligatorio y debe ser un número positivo'


class InvalidAmount(ValidationError):
    code = "InvalidAmount"
    default_message = 'El campo "monto" es obligatorio y debe ser un número positivo'


class InvalidState(ValidationError):
    code = "InvalidState"

    def __init__(self, allowed: list[str]):
        super().__init__(
            f"Estado inválido. Estados permitidos: {', '.join(allowed)}",
            details={"estadosPermitidos": allowed},
        )


class NotEditable(ValidationError):
    code = "NotEditable"
    default_message = "Solo se pueden editar expedientes en estado PENDIENTE"


# 404


class NotFound(ApiError):
    status_code = 404
    code = "NotFound"
    default_message = "Recurso no encontrado"


# Conflicts travel as 400 on the wire.


class Conflict(ApiError):
    status_code = 400
    code = "Conflict"
    default_message = "Conflicto con el estado actual del recurso"


class CaseFileNotApproved(Conflict):
    code = "CaseFileNotApproved"

    def __init__(self, estado_actual: str):
        super().__init__(
            "Solo se puede crear un mandato para expedientes APROBADOS",
            details={"estadoActual": estado_actual},
        )


class MandateAlreadyExists(Conflict):
    code = "MandateAlreadyExists"

    def __init__(self, mandato_id: int | None, estado: str | None):
        super().__init__(
            "Este expediente ya tiene un mandato asociado",
            details={"mandatoExistente": {"id": mandato_id, "estado": estado}},
        )


class EmailAlreadyExists(Conflict):
    code = "EmailAlreadyExists"
    default_message = "Ya existe un usuario con ese email"


class UserHasCaseFiles(Conflict):
    code = "UserHasCaseFiles"
    default_message = "El usuario tiene expedientes asociados"


class StoredFileConflict(Conflict):
    code = "StoredFileConflict"
    default_message = "No se pudo asignar un nombre único al archivo, reintenta la subida"
