from typing import Optional

from flask import current_app
from flask_login import LoginManager

from .database import MySQLConnector
from .errors import AppError
from .models.usuario import Usuario
from .storage import R2Storage

mysql = MySQLConnector()
login_manager = LoginManager()


@login_manager.user_loader
def load_user(user_id: str):
    from clinica.repositories import usuarios as usuarios_repo

    data = usuarios_repo.obter_por_id(int(user_id))
    if data:
        return Usuario.from_row(data)
    return None


@login_manager.unauthorized_handler
def nao_autenticado():
    raise AppError("Nao autenticado", 401, "UNAUTHORIZED")


def init_storage(app) -> Optional[R2Storage]:
    storage = R2Storage.from_config(app.config)
    app.extensions["r2"] = storage
    if storage is None:
        app.logger.warning("Armazenamento R2 não configurado; anexos de pacientes indisponíveis.")
    return storage


def get_storage() -> R2Storage:
    storage = current_app.extensions.get("r2")
    if storage is None:
        raise AppError("Armazenamento de arquivos nao configurado", 503, "STORAGE_NOT_CONFIGURED")
    return storage
