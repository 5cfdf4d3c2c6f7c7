from flask import Blueprint

terapeutas_bp = Blueprint("terapeutas", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
