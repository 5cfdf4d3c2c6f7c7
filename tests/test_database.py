import pytest

from clinica import create_app
from clinica import database
from clinica.database import MySQLConnector
from clinica.extensions import mysql
from clinica.schema import SCHEMA_STATEMENTS
from config import TestConfig


class ConexaoFalsa:
    def __init__(self, executados):
        self.executados = executados
        self.commits = 0

    def cursor(self, dictionary=True):
        return self

    def execute(self, query, params=()):
        self.executados.append(query)

    def executemany(self, query, linhas):
        for _ in linhas:
            self.executados.append(query)

    def fetchone(self):
        return (1,)

    def fetchall(self):
        return []

    def commit(self):
        self.commits += 1

    def rollback(self):
        pass

    def close(self):
        pass


@pytest.fixture
def pools(monkeypatch):
    criados = []
    executados = []

    class PoolFalso:
        def __init__(self, **kwargs):
            criados.append(kwargs)

        def get_connection(self):
            return ConexaoFalsa(executados)

    monkeypatch.setattr(database.pooling, "MySQLConnectionPool", PoolFalso)
    monkeypatch.setattr(mysql, "pool", None)
    monkeypatch.setattr(mysql, "pool_config", None)
    return criados, executados


def test_pool_configurado_sem_inicializacao_automatica(pools):
    criados, executados = pools
    app = create_app(TestConfig)

    assert criados == []

    resposta = app.test_client().get("/api/health")

    assert resposta.status_code == 200
    assert len(criados) == 1
    assert criados[0]["pool_name"] == "clinica_pool"
    assert criados[0]["autocommit"] is False
    assert executados == ["SELECT 1"]


def test_inicializacao_automatica_cria_schema(pools):
    class ConfigComSchema(TestConfig):
        DB_AUTO_INIT = True
        SEED_SUPERADMIN_EMAIL = ""

    criados, executados = pools
    create_app(ConfigComSchema)

    assert len(criados) == 1
    assert executados[: len(SCHEMA_STATEMENTS)] == list(SCHEMA_STATEMENTS)
    assert any("INSERT IGNORE INTO roles" in query for query in executados)


def test_conexao_sem_configuracao():
    with pytest.raises(RuntimeError):
        MySQLConnector().get_connection()
