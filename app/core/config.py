from __future__ import annotations

import os


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///expedientes.db",
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET = os.getenv("JWT_SECRET", "")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_HOURS = int(os.getenv("JWT_EXPIRES_HOURS", "24"))
    AUTH_COOKIE_NAME = "token"
    AUTH_COOKIE_SECURE = os.getenv("AUTH_COOKIE_SECURE", "true").strip().lower() not in {"0", "false", "no"}

    UPLOAD_ROOT = os.getenv("UPLOAD_ROOT", os.path.join(os.getcwd(), "uploads"))
    MAX_CONTENT_LENGTH = 50 * 1024 * 1024
    MANDATO_TEMPLATE_PATH = os.getenv(
        "MANDATO_TEMPLATE_PATH",
        os.path.join(os.path.dirname(os.path.dirname(__file__)), "templates", "mandato_venta_persona_fisica.docx"),
    )

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
