from __future__ import annotations

from functools import wraps

from flask import current_app, request
from flask_login import current_user

from app.core.errors import Forbidden, MissingCredential
from app.core.models import Rol

ADMIN_ONLY = frozenset({Rol.ADMIN.value})
ADMIN_OR_REVIEWER = frozenset({Rol.ADMIN.value, Rol.REVISOR.value})


def is_allowed(identity, capability: frozenset[str]) -> bool:
    if identity is None:
        return False
    return (getattr(identity, "rol", None) or "") in capability


def require_auth(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise MissingCredential()
        return fn(*args, **kwargs)

    return wrapper


def require_roles(capability: frozenset[str]):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                raise MissingCredential()
            if not is_allowed(current_user, capability):
                current_app.logger.warning(
                    "Acceso denegado a %s para usuario %s (%s)",
                    request.path,
                    current_user.id,
                    current_user.rol,
                )
                raise Forbidden(f"Acceso denegado: se requiere rol {' o '.join(sorted(capability))}")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
