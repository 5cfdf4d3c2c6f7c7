import logging

from flask import Flask

from config import Config
from .blueprints.admin import admin_bp
from .blueprints.anamnese import anamnese_bp
from .blueprints.atendimentos import atendimentos_bp
from .blueprints.auth import auth_bp
from .blueprints.pacientes import pacientes_bp
from .blueprints.prontuario import prontuario_bp
from .blueprints.relatorios import relatorios_bp
from .blueprints.terapeutas import terapeutas_bp
from .errors import register_error_handlers
from .extensions import init_storage, login_manager, mysql
from .utils.serializacao import ClinicaJSONProvider


def create_app(config_class: type[Config] = Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_class)

    configure_logging(app)
    app.json = ClinicaJSONProvider(app)
    register_error_handlers(app)

    login_manager.init_app(app)
    init_storage(app)

    mysql.init_app(app)
    if app.config.get("DB_AUTO_INIT"):
        mysql.ensure_schema(app.logger)
        seed_superadmin(app)

    register_blueprints(app)
    return app


def configure_logging(app: Flask) -> None:
    nivel = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=nivel,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(nivel)


def seed_superadmin(app: Flask) -> None:
    email = app.config.get("SEED_SUPERADMIN_EMAIL")
    senha = app.config.get("SEED_SUPERADMIN_PASSWORD")
    if not email or not senha:
        return

    from .services import usuarios_service

    with app.app_context():
        usuarios_service.garantir_superadmin(app.config["SEED_SUPERADMIN_NAME"], email, senha)


def register_blueprints(app: Flask) -> None:
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(pacientes_bp)
    app.register_blueprint(terapeutas_bp)
    app.register_blueprint(atendimentos_bp)
    app.register_blueprint(prontuario_bp)
    app.register_blueprint(anamnese_bp)
    app.register_blueprint(relatorios_bp)
