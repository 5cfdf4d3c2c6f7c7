import os
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()


def _bool_env(nome: str, padrao: str = "0") -> bool:
    return os.getenv(nome, padrao).strip().lower() in {"1", "true", "sim", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "definir_chave_segura")
    APP_ENV = os.getenv("APP_ENV", "production")
    CLINICA_NOME = os.getenv("CLINICA_NOME", "Clinica Girassois")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    SESSION_COOKIE_SECURE = _bool_env("SESSION_COOKIE_SECURE")
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)

    MYSQL_HOST = os.getenv("MYSQL_HOST", "localhost")
    MYSQL_PORT = int(os.getenv("MYSQL_PORT", "3306"))
    MYSQL_USER = os.getenv("MYSQL_USER", "")
    MYSQL_PASSWORD = os.getenv("MYSQL_PASSWORD", "")
    MYSQL_DATABASE = os.getenv("MYSQL_DATABASE", "")
    MYSQL_POOL_NAME = "clinica_pool"
    MYSQL_POOL_SIZE = int(os.getenv("MYSQL_POOL_SIZE", "8"))
    MYSQL_POOL_RESET_SESSION = True
    DB_AUTO_INIT = _bool_env("DB_AUTO_INIT", "1")

    SEED_SUPERADMIN_EMAIL = os.getenv("SEED_SUPERADMIN_EMAIL", "")
    SEED_SUPERADMIN_PASSWORD = os.getenv("SEED_SUPERADMIN_PASSWORD", "")
    SEED_SUPERADMIN_NAME = os.getenv("SEED_SUPERADMIN_NAME", "Super Admin")

    R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID", "")
    R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID", "")
    R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY", "")
    R2_BUCKET = os.getenv("R2_BUCKET", "")
    R2_REGION = os.getenv("R2_REGION", "auto")
    R2_ENDPOINT = os.getenv("R2_ENDPOINT", "")
    SIGNED_URL_TTL = int(os.getenv("SIGNED_URL_TTL", "300"))


class TestConfig(Config):
    TESTING = True
    APP_ENV = "test"
    SECRET_KEY = "chave-de-teste"
    DB_AUTO_INIT = False
    R2_ACCOUNT_ID = ""
    R2_ACCESS_KEY_ID = ""
    R2_SECRET_ACCESS_KEY = ""
    R2_BUCKET = ""
