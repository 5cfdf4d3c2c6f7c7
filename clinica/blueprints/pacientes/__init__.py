from flask import Blueprint

pacientes_bp = Blueprint("pacientes", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
