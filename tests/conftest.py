import copy
from contextlib import contextmanager

import pytest

from clinica import create_app
from clinica.domain.permissoes import PERMISSOES_PADRAO_POR_ROLE, canonizar_role
from clinica.extensions import mysql
from clinica.repositories import permissoes as permissoes_repo
from clinica.repositories import usuarios as usuarios_repo
from clinica.services.acesso_service import Acesso
from config import TestConfig


class CursorFalso:
    """Registra as consultas executadas; resultados vem de ``banco.resultados``."""

    def __init__(self, banco):
        self.banco = banco
        self.rowcount = 0
        self.lastrowid = None

    def execute(self, query, params=()):
        self.banco.executados.append((" ".join(query.split()), tuple(params)))
        self.rowcount = self.banco.rowcount

    def executemany(self, query, linhas):
        for linha in linhas:
            self.execute(query, linha)

    def fetchone(self):
        return self.banco.resultados.pop(0) if self.banco.resultados else None

    def fetchall(self):
        linhas, self.banco.resultados = self.banco.resultados, []
        return linhas


class BancoFalso:
    """
    Substitui ``mysql.get_cursor``. Cada transacao tira uma copia das tabelas
    em memoria e a restaura se um erro escapar do bloco.
    """

    def __init__(self):
        self.tabelas = {}
        self.executados = []
        self.resultados = []
        self.rowcount = 0
        self.commits = 0
        self.rollbacks = 0

    def tabela(self, nome):
        return self.tabelas.setdefault(nome, [])

    @contextmanager
    def get_cursor(self, *, dictionary=True):
        copia = copy.deepcopy(self.tabelas)
        try:
            yield None, CursorFalso(self)
            self.commits += 1
        except Exception:
            self.tabelas = copia
            self.rollbacks += 1
            raise


class StorageFalso:
    expires_in = 300

    def __init__(self):
        self.removidos = []
        self.erro_ao_remover = None

    def signed_put_url(self, key, content_type=None):
        return f"https://r2.test/put/{key}"

    def signed_get_url(self, key):
        return f"https://r2.test/get/{key}"

    def delete_object(self, key):
        if self.erro_ao_remover is not None:
            raise self.erro_ao_remover
        self.removidos.append(key)


USUARIOS = {
    "admin-geral": {"id": 1, "nome": "Ana Admin", "email": "ana@clinica.com.br"},
    "admin": {"id": 2, "nome": "Bruno Admin", "email": "bruno@clinica.com.br"},
    "terapeuta": {"id": 3, "nome": "Carla Terapeuta", "email": "carla@clinica.com.br"},
    "recepcao": {"id": 4, "nome": "Davi Recepcao", "email": "davi@clinica.com.br"},
}


def chaves_padrao(role):
    permissoes = PERMISSOES_PADRAO_POR_ROLE[role]
    if permissoes is None:
        return set()
    return {permissao.value for permissao in permissoes}


def acesso_de(role, user_id=None):
    usuario = dict(USUARIOS[role], role=role)
    if user_id is not None:
        usuario["id"] = user_id
    papel = canonizar_role(role)
    return Acesso(
        exists=True,
        usuario=usuario,
        roles=[papel.value, role],
        primary_role=papel,
        permissoes=chaves_padrao(role),
    )


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def contexto(app):
    with app.app_context():
        yield app


@pytest.fixture
def banco(monkeypatch):
    banco = BancoFalso()
    monkeypatch.setattr(mysql, "get_cursor", banco.get_cursor)
    return banco


@pytest.fixture
def storage(app):
    storage = StorageFalso()
    app.extensions["r2"] = storage
    return storage


@pytest.fixture
def logar(client, monkeypatch):
    """Autentica o cliente de teste com uma das roles padrao."""

    def _logar(role):
        usuario = dict(USUARIOS[role], role=role, ativo=1)
        monkeypatch.setattr(
            usuarios_repo, "obter_por_id", lambda user_id: usuario if user_id == usuario["id"] else None
        )
        monkeypatch.setattr(permissoes_repo, "listar_chaves_da_role", lambda nome: chaves_padrao(nome))
        with client.session_transaction() as sess:
            sess["_user_id"] = str(usuario["id"])
            sess["_fresh"] = True
        return usuario

    return _logar


@pytest.fixture
def acesso():
    return acesso_de
