import re

import pytest
from botocore.exceptions import ClientError

from clinica.domain.status import ArquivoTipo
from clinica.errors import NotFound
from clinica.repositories import pacientes as pacientes_repo
from clinica.services import arquivos_service
from clinica.storage import R2Storage, build_object_key


@pytest.fixture
def arquivo_atual(monkeypatch):
    atual = {"valor": None}
    monkeypatch.setattr(
        pacientes_repo, "obter_arquivo", lambda paciente_id, coluna: dict(atual) if paciente_id == 5 else None
    )
    return atual


def test_build_object_key_sanitiza_nome():
    key = build_object_key("/pacientes/5/foto/", "minha foto (1).png")
    assert re.fullmatch(r"pacientes/5/foto/[0-9a-f-]{36}-minha_foto__1_\.png", key)


def test_storage_sem_configuracao():
    assert R2Storage.from_config({"R2_BUCKET": "b", "R2_ACCESS_KEY_ID": "k"}) is None
    assert R2Storage.from_config({"R2_BUCKET": "b", "R2_ACCESS_KEY_ID": "k", "R2_SECRET_ACCESS_KEY": "s"}) is None


def test_storage_usa_endpoint_da_conta():
    storage = R2Storage.from_config(
        {
            "R2_BUCKET": "clinica",
            "R2_ACCESS_KEY_ID": "k",
            "R2_SECRET_ACCESS_KEY": "s",
            "R2_ACCOUNT_ID": "conta",
            "SIGNED_URL_TTL": "120",
        }
    )
    assert storage.bucket == "clinica"
    assert storage.expires_in == 120
    assert storage.client.meta.endpoint_url == "https://conta.r2.cloudflarestorage.com"


def test_gerar_upload(storage, arquivo_atual):
    resposta = arquivos_service.gerar_upload(storage, 5, ArquivoTipo.LAUDO, "laudo.pdf", "application/pdf")

    assert resposta["key"].startswith("pacientes/5/laudo/")
    assert resposta["url"] == f"https://r2.test/put/{resposta['key']}"
    assert resposta["expiresInSeconds"] == 300


def test_gerar_upload_paciente_inexistente(storage, arquivo_atual):
    with pytest.raises(NotFound):
        arquivos_service.gerar_upload(storage, 6, ArquivoTipo.FOTO, "foto.png")


def test_url_de_leitura(storage, arquivo_atual):
    assert arquivos_service.url_de_leitura(storage, 5, ArquivoTipo.FOTO) == {"url": None, "key": None}

    arquivo_atual["valor"] = "https://antigo.exemplo.com/fotos/5.jpg"
    assert arquivos_service.url_de_leitura(storage, 5, ArquivoTipo.FOTO) == {
        "url": "https://antigo.exemplo.com/fotos/5.jpg",
        "key": "https://antigo.exemplo.com/fotos/5.jpg",
    }

    arquivo_atual["valor"] = "pacientes/5/foto/abc-foto.png"
    assert arquivos_service.url_de_leitura(storage, 5, ArquivoTipo.FOTO) == {
        "url": "https://r2.test/get/pacientes/5/foto/abc-foto.png",
        "key": "pacientes/5/foto/abc-foto.png",
        "expiresInSeconds": 300,
    }


@pytest.mark.parametrize(
    "anterior, removidos",
    [
        ("pacientes/5/foto/antiga.png", ["pacientes/5/foto/antiga.png"]),
        ("pacientes/5/foto/nova.png", []),
        ("HTTPS://antigo.exemplo.com/5.jpg", []),
        (None, []),
    ],
)
def test_confirmar_upload_remove_objeto_anterior(contexto, storage, monkeypatch, anterior, removidos):
    gravados = []

    def atualizar_arquivo(paciente_id, coluna, valor):
        gravados.append((paciente_id, coluna, valor))
        return anterior

    monkeypatch.setattr(pacientes_repo, "atualizar_arquivo", atualizar_arquivo)

    resposta = arquivos_service.confirmar_upload(storage, 5, ArquivoTipo.FOTO, "pacientes/5/foto/nova.png")

    assert resposta == {"ok": True}
    assert gravados == [(5, "foto", "pacientes/5/foto/nova.png")]
    assert storage.removidos == removidos


def test_falha_ao_remover_objeto_anterior_nao_desfaz_gravacao(contexto, storage, monkeypatch):
    storage.erro_ao_remover = ClientError({"Error": {"Code": "AccessDenied", "Message": "negado"}}, "DeleteObject")
    monkeypatch.setattr(pacientes_repo, "atualizar_arquivo", lambda paciente_id, coluna, valor: "pacientes/5/documento/x.pdf")

    assert arquivos_service.confirmar_upload(storage, 5, ArquivoTipo.DOCUMENTO, None) == {"ok": True}


def test_confirmar_upload_paciente_inexistente(contexto, storage, monkeypatch):
    def atualizar_arquivo(paciente_id, coluna, valor):
        raise LookupError(paciente_id)

    monkeypatch.setattr(pacientes_repo, "atualizar_arquivo", atualizar_arquivo)

    with pytest.raises(NotFound):
        arquivos_service.confirmar_upload(storage, 6, ArquivoTipo.FOTO, "k")


def test_api_presign_sem_storage(client, logar, app):
    logar("admin")
    app.extensions["r2"] = None

    resposta = client.post("/api/pacientes/5/arquivos/presign", json={"kind": "foto", "filename": "a.png"})

    assert resposta.status_code == 503
    assert resposta.get_json()["code"] == "STORAGE_NOT_CONFIGURED"


def test_api_read_url(client, logar, storage, arquivo_atual):
    logar("admin")
    arquivo_atual["valor"] = "pacientes/5/laudo/k.pdf"

    resposta = client.get("/api/pacientes/5/arquivos/read-url?kind=laudo")

    assert resposta.status_code == 200
    assert resposta.get_json()["url"] == "https://r2.test/get/pacientes/5/laudo/k.pdf"


def test_api_kind_invalido(client, logar, storage, arquivo_atual):
    logar("admin")

    resposta = client.get("/api/pacientes/5/arquivos/read-url?kind=video")

    assert resposta.status_code == 400


def test_api_recepcao_nao_le_arquivos(client, logar, storage, arquivo_atual):
    logar("recepcao")

    resposta = client.get("/api/pacientes/5/arquivos/read-url?kind=foto")

    assert resposta.status_code == 403
