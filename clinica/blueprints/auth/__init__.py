from flask import Blueprint

auth_bp = Blueprint("auth", __name__, url_prefix="/api")

# As rotas registram os endpoints ao serem importadas;
# o import fica depois da criacao do blueprint.
from . import routes  # noqa: E402,F401
