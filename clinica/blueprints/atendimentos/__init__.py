from flask import Blueprint

atendimentos_bp = Blueprint("atendimentos", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
