from flask import Blueprint

expedientes_bp = Blueprint("expedientes", __name__)

from app.expedientes import routes  # noqa: E402,F401
