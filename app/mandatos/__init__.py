from flask import Blueprint

mandatos_bp = Blueprint("mandatos", __name__)

from app.mandatos import routes  # noqa: E402,F401
