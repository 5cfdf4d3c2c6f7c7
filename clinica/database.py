from contextlib import contextmanager
from typing import Generator, Optional, Tuple

import mysql.connector
from mysql.connector import errorcode, pooling

from .domain.permissoes import PERMISSOES_PADRAO_POR_ROLE, ROLES_PADRAO, Permissao
from .domain.status import TERAPIAS_PADRAO
from .schema import SCHEMA_STATEMENTS


def is_unique_violation(exc: BaseException) -> bool:
    return (
        isinstance(exc, mysql.connector.errors.IntegrityError)
        and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY
    )


class MySQLConnector:
    def __init__(self):
        self.pool: pooling.MySQLConnectionPool | None = None
        self.pool_config: dict | None = None

    def init_app(self, app):
        """Registra a configuracao do pool; as conexoes abrem no primeiro uso."""
        if self.pool is not None:
            return

        self.pool_config = dict(
            pool_name=app.config["MYSQL_POOL_NAME"],
            pool_size=app.config["MYSQL_POOL_SIZE"],
            pool_reset_session=app.config["MYSQL_POOL_RESET_SESSION"],
            host=app.config["MYSQL_HOST"],
            port=app.config["MYSQL_PORT"],
            user=app.config["MYSQL_USER"],
            password=app.config["MYSQL_PASSWORD"],
            database=app.config["MYSQL_DATABASE"],
            charset="utf8mb4",
            autocommit=False,
        )
        app.logger.info("Pool de conexões MySQL configurado para %s.", app.config["MYSQL_HOST"])

    def _abrir_pool(self) -> pooling.MySQLConnectionPool:
        if self.pool is None:
            if self.pool_config is None:
                raise RuntimeError("Pool de conexões não inicializado.")
            self.pool = pooling.MySQLConnectionPool(**self.pool_config)
        return self.pool

    def ensure_schema(self, logger=None):
        with self.get_cursor(dictionary=False) as (_, cursor):
            for statement in SCHEMA_STATEMENTS:
                cursor.execute(statement)

        if logger:
            logger.info("Schema do banco verificado/criado com sucesso.")

        self.ensure_seed(logger)

    def ensure_seed(self, logger=None):
        """Garante roles, catalogo de permissoes, matriz padrao e terapias."""
        with self.get_cursor(dictionary=True) as (_, cursor):
            cursor.executemany(
                "INSERT IGNORE INTO roles (slug, nome) VALUES (%s, %s)",
                list(ROLES_PADRAO.items()),
            )
            cursor.executemany(
                "INSERT IGNORE INTO permissions (resource, action) VALUES (%s, %s)",
                [(permissao.resource, permissao.action) for permissao in Permissao],
            )
            cursor.executemany(
                "INSERT IGNORE INTO terapias (nome) VALUES (%s)",
                [(nome,) for nome in TERAPIAS_PADRAO],
            )

            cursor.execute("SELECT id, resource, action FROM permissions")
            ids_por_chave = {
                f"{row['resource']}:{row['action']}": row["id"] for row in cursor.fetchall()
            }

            for role, permissoes in PERMISSOES_PADRAO_POR_ROLE.items():
                if permissoes is None:
                    ids = list(ids_por_chave.values())
                else:
                    ids = [ids_por_chave[p.value] for p in permissoes if p.value in ids_por_chave]
                if not ids:
                    continue
                cursor.executemany(
                    "INSERT IGNORE INTO role_permissions (role, permission_id) VALUES (%s, %s)",
                    [(role, permission_id) for permission_id in ids],
                )

        if logger:
            logger.info("Roles, permissões e terapias padrão verificadas.")

    def get_connection(self) -> mysql.connector.MySQLConnection:
        return self._abrir_pool().get_connection()

    @contextmanager
    def get_cursor(
        self, *, dictionary: bool = True
    ) -> Generator[
        Tuple[mysql.connector.MySQLConnection, mysql.connector.cursor.MySQLCursor], None, None
    ]:
        connection = self.get_connection()
        cursor = connection.cursor(dictionary=dictionary)
        try:
            yield connection, cursor
            connection.commit()
        except Exception:
            connection.rollback()
            raise
        finally:
            cursor.close()
            connection.close()

    @contextmanager
    def cursor(self, existente: Optional[object] = None):
        """
        Reaproveita o cursor de uma transacao ja aberta pelo chamador ou abre
        uma nova transacao propria. Permite que varios repositorios participem
        do mesmo commit/rollback.
        """
        if existente is not None:
            yield existente
            return
        with self.get_cursor() as (_, cursor):
            yield cursor

    def ping(self) -> bool:
        with self.get_cursor(dictionary=False) as (_, cursor):
            cursor.execute("SELECT 1")
            return cursor.fetchone() is not None
