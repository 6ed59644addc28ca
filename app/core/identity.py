from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from flask import Request, current_app
from flask_login import UserMixin

from app.core.errors import ExpiredCredential, InvalidCredential

BEARER_PREFIX = "Bearer "


@dataclass
class Identity(UserMixin):
    id: int
    email: str
    rol: str

    def get_id(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "email": self.email, "rol": self.rol}


def extract_token(request: Request, cookie_name: str = "token") -> str | None:
    # First source found wins: cookie, then Authorization header, then ?token=.
    cookie_token = request.cookies.get(cookie_name)
    if cookie_token:
        return cookie_token

    header = request.headers.get("Authorization")
    if header:
        if header.startswith(BEARER_PREFIX):
            return header[len(BEARER_PREFIX):]
        return header

    query_token = request.args.get("token")
    if query_token:
        return query_token
    return None


def issue_token(
    user_id: int,
    email: str,
    rol: str,
    secret: str,
    algorithm: str = "HS256",
    expires_in: timedelta = timedelta(hours=24),
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "email": email,
        "rol": rol,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Identity:
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise ExpiredCredential() from exc
    except jwt.InvalidTokenError as exc:
        raise InvalidCredential() from exc

    user_id = payload.get("id")
    email = payload.get("email")
    rol = payload.get("rol")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not email or not rol:
        raise InvalidCredential()
    return Identity(id=user_id, email=str(email), rol=str(rol))


def load_identity_from_request(request: Request) -> Identity | None:
    token = extract_token(request, current_app.config["AUTH_COOKIE_NAME"])
    if not token:
        return None
    try:
        return decode_token(token, current_app.config["JWT_SECRET"], current_app.config["JWT_ALGORITHM"])
    except (ExpiredCredential, InvalidCredential) as exc:
        current_app.logger.warning("Credencial rechazada: %s", exc.code)
        raise
