from flask import Blueprint

anamnese_bp = Blueprint("anamnese", __name__, url_prefix="/api")

from . import routes  # noqa: E402,F401
