from flask import Blueprint

prontuario_bp = Blueprint("prontuario", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
