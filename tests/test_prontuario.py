from datetime import date

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from clinica.errors import AppError, Forbidden, InvalidInput
from clinica.payloads.prontuario import DocumentoIn, EvolucaoIn, EvolucaoUpdateIn
from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import documentos as documentos_repo
from clinica.repositories import evolucoes as evolucoes_repo
from clinica.repositories import terapeutas as terapeutas_repo
from clinica.services import prontuario_service
from clinica.services.acesso_service import AcessoPaciente


def _duplicado():
    return IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)


@pytest.fixture
def documentos(monkeypatch, banco):
    estado = {"falhas": 0, "inseridos": [], "versao": 0}

    def proxima_versao(paciente_id, tipo, *, cursor):
        estado["versao"] += 1
        return estado["versao"]

    def inserir(**kwargs):
        if estado["falhas"]:
            estado["falhas"] -= 1
            raise _duplicado()
        estado["inseridos"].append(kwargs)
        return 100 + len(estado["inseridos"])

    monkeypatch.setattr(documentos_repo, "proxima_versao", proxima_versao)
    monkeypatch.setattr(documentos_repo, "inserir", inserir)
    return estado


def test_salvar_documento(contexto, documentos, acesso):
    dados = DocumentoIn.model_validate({"tipo": "plano_terapeutico", "status": "Qualquer", "payload": {"metas": []}})

    resultado = prontuario_service.salvar_documento(5, dados, acesso("admin"))

    assert resultado == {"id": 101, "version": 1}
    inserido = documentos["inseridos"][0]
    assert inserido["tipo"] == "PLANO_TERAPEUTICO"
    assert inserido["titulo"] == "PLANO_TERAPEUTICO"
    assert inserido["status"] == "Rascunho"
    assert inserido["created_by_user_id"] == 2
    assert inserido["created_by_role"] == "admin"


def test_salvar_documento_repete_em_versao_duplicada(contexto, documentos, acesso):
    documentos["falhas"] = 2
    dados = DocumentoIn.model_validate({"tipo": "ANAMNESE", "status": "Finalizado", "titulo": "Anamnese inicial"})

    resultado = prontuario_service.salvar_documento(5, dados, acesso("admin"))

    assert resultado == {"id": 101, "version": 3}
    assert documentos["inseridos"][0]["status"] == "Finalizado"


def test_salvar_documento_desiste_apos_tres_tentativas(contexto, documentos, acesso):
    documentos["falhas"] = 3
    dados = DocumentoIn.model_validate({"tipo": "OUTRO"})

    with pytest.raises(IntegrityError):
        prontuario_service.salvar_documento(5, dados, acesso("admin"))
    assert documentos["inseridos"] == []
    assert documentos["versao"] == 3


def test_tipo_de_documento_invalido(contexto, documentos, acesso):
    with pytest.raises(InvalidInput):
        prontuario_service.salvar_documento(5, DocumentoIn.model_validate({"tipo": "RECEITA"}), acesso("admin"))


def test_documento_finalizado_nao_finaliza_nem_exclui(monkeypatch):
    monkeypatch.setattr(
        documentos_repo,
        "obter_por_id",
        lambda documento_id, incluir_excluidos=True: {"id": documento_id, "paciente_id": 5, "status": "Finalizado"},
    )

    with pytest.raises(AppError) as erro:
        prontuario_service.finalizar_documento(10)
    assert erro.value.status == 409
    assert erro.value.code == "DOCUMENT_FINALIZED"

    with pytest.raises(AppError) as erro:
        prontuario_service.excluir_documento(10, usuario_id=2)
    assert erro.value.code == "DOCUMENT_FINALIZED"


def test_exclusao_perde_corrida_para_finalizacao(monkeypatch):
    monkeypatch.setattr(
        documentos_repo,
        "obter_por_id",
        lambda documento_id, incluir_excluidos=True: {"id": documento_id, "paciente_id": 5, "status": "Rascunho"},
    )
    monkeypatch.setattr(documentos_repo, "excluir_logicamente", lambda documento_id, usuario_id: False)

    with pytest.raises(AppError) as erro:
        prontuario_service.excluir_documento(10, usuario_id=2)
    assert erro.value.code == "DOCUMENT_FINALIZED"


def test_documento_removido_nao_encontrado(monkeypatch):
    chamadas = []

    def obter_por_id(documento_id, incluir_excluidos=True):
        chamadas.append(incluir_excluidos)
        return None

    monkeypatch.setattr(documentos_repo, "obter_por_id", obter_por_id)

    with pytest.raises(AppError) as erro:
        prontuario_service.obter_documento(10)
    assert erro.value.status == 404
    assert chamadas == [False]


@pytest.fixture
def evolucoes_criadas(monkeypatch):
    criadas = []

    def criar(**kwargs):
        criadas.append(kwargs)
        return len(criadas)

    monkeypatch.setattr(evolucoes_repo, "criar", criar)
    monkeypatch.setattr(terapeutas_repo, "obter_por_usuario", lambda user_id: {"id": 7})
    return criadas


def test_terapeuta_registra_evolucao_em_nome_proprio(evolucoes_criadas, acesso):
    dados = EvolucaoIn.model_validate({"data": "2024-03-04T10:00:00", "terapeutaId": 99, "payload": {"descricao": "ok"}})

    resultado = prontuario_service.criar_evolucao(5, dados, acesso("terapeuta"))

    assert resultado == {"id": 1, "data": "2024-03-04"}
    assert evolucoes_criadas[0]["terapeuta_id"] == 7


def test_evolucao_sem_data_usa_hoje(evolucoes_criadas, acesso):
    resultado = prontuario_service.criar_evolucao(5, EvolucaoIn.model_validate({"terapeutaId": 8}), acesso("admin"))

    assert resultado["data"] == date.today().isoformat()
    assert evolucoes_criadas[0]["terapeuta_id"] == 8


def test_evolucao_exige_terapeuta(evolucoes_criadas, acesso):
    with pytest.raises(InvalidInput):
        prontuario_service.criar_evolucao(5, EvolucaoIn.model_validate({}), acesso("admin"))


def test_evolucao_com_data_invalida(evolucoes_criadas, acesso):
    with pytest.raises(InvalidInput):
        prontuario_service.criar_evolucao(5, EvolucaoIn.model_validate({"data": "31/12/2024", "terapeutaId": 8}), acesso("admin"))


def test_evolucao_duplicada_no_dia(monkeypatch, acesso):
    def criar(**kwargs):
        raise _duplicado()

    monkeypatch.setattr(evolucoes_repo, "criar", criar)

    with pytest.raises(AppError) as erro:
        prontuario_service.criar_evolucao(5, EvolucaoIn.model_validate({"terapeutaId": 8}), acesso("admin"))
    assert erro.value.status == 409
    assert erro.value.code == "CONFLICT"


def test_atualizar_evolucao_mantem_campos_nao_enviados(monkeypatch, acesso):
    atualizacoes = []
    monkeypatch.setattr(
        evolucoes_repo, "atualizar", lambda evolucao_id, **kwargs: atualizacoes.append((evolucao_id, kwargs)) or 1
    )
    evolucao = {
        "id": 4,
        "paciente_id": 5,
        "terapeuta_id": 8,
        "atendimento_id": 30,
        "data": date(2024, 3, 4),
        "payload": {"descricao": "anterior"},
    }

    resultado = prontuario_service.atualizar_evolucao(evolucao, EvolucaoUpdateIn.model_validate({}), acesso("admin"))

    assert resultado == {"id": 4, "data": "2024-03-04"}
    assert atualizacoes == [
        (4, {"terapeuta_id": 8, "atendimento_id": 30, "data": "2024-03-04", "payload": {"descricao": "anterior"}})
    ]


def test_terapeuta_nao_acessa_evolucao_de_outro(acesso):
    acesso_terapeuta = AcessoPaciente(user_id=3, acesso=acesso("terapeuta"), terapeuta_id=7)

    with pytest.raises(Forbidden):
        prontuario_service.assert_dono_evolucao(acesso_terapeuta, {"terapeuta_id": 8})
    prontuario_service.assert_dono_evolucao(acesso_terapeuta, {"terapeuta_id": 7})

    acesso_admin = AcessoPaciente(user_id=2, acesso=acesso("admin"), terapeuta_id=None)
    prontuario_service.assert_dono_evolucao(acesso_admin, {"terapeuta_id": 8})


def test_timeline_mistura_documentos_e_evolucoes():
    documentos = [
        {
            "id": 1,
            "tipo": "ANAMNESE",
            "titulo": None,
            "status": "Finalizado",
            "version": 2,
            "created_at": "2024-03-01 09:00:00",
            "autor_nome": "Ana Admin",
        }
    ]
    evolucoes = [
        {"id": 10, "data": date(2024, 3, 5), "payload": {"comportamentos": ["agitacao"]}, "terapeuta_nome": "Carla"},
        {"id": 11, "data": date(2024, 2, 20), "payload": {"descricao": "ok"}, "terapeuta_nome": None},
    ]

    itens = prontuario_service.montar_timeline(documentos, evolucoes)

    assert [item["id"] for item in itens] == [10, 1, 11]
    assert itens[0]["tipo"] == "COMPORTAMENTO"
    assert itens[0]["titulo"] == "Registro de comportamento"
    assert itens[0]["status"] == "-"
    assert itens[1]["titulo"] == "ANAMNESE"
    assert itens[1]["profissional"] == "Ana Admin"
    assert itens[2]["tipo"] == "EVOLUCAO"
    assert itens[2]["profissional"] == "Terapeuta"


def test_lista_de_evolucoes_do_terapeuta(client, logar, monkeypatch):
    logar("terapeuta")
    monkeypatch.setattr(terapeutas_repo, "obter_por_usuario", lambda user_id: {"id": 7})
    monkeypatch.setattr(atendimentos_repo, "existe_vinculo", lambda terapeuta_id, paciente_id: True)
    monkeypatch.setattr(
        evolucoes_repo,
        "listar_por_paciente",
        lambda paciente_id, **kwargs: [
            {"id": 1, "paciente_id": paciente_id, "terapeuta_id": 7, "data": "2024-03-04", "payload": {}},
            {"id": 2, "paciente_id": paciente_id, "terapeuta_id": 8, "data": "2024-03-05", "payload": {}},
        ],
    )

    resposta = client.get("/api/prontuario/evolucoes/5")

    assert resposta.status_code == 200
    assert [e["id"] for e in resposta.get_json()] == [1]


def test_terapeuta_nao_le_evolucao_de_colega(client, logar, monkeypatch):
    logar("terapeuta")
    monkeypatch.setattr(terapeutas_repo, "obter_por_usuario", lambda user_id: {"id": 7})
    monkeypatch.setattr(atendimentos_repo, "existe_vinculo", lambda terapeuta_id, paciente_id: True)
    monkeypatch.setattr(
        evolucoes_repo,
        "obter_por_id",
        lambda evolucao_id, incluir_excluidos=True: {"id": evolucao_id, "paciente_id": 5, "terapeuta_id": 8},
    )

    resposta = client.get("/api/prontuario/evolucao/2")

    assert resposta.status_code == 403
    assert resposta.get_json()["code"] == "FORBIDDEN"


def test_recepcao_sem_acesso_ao_prontuario(client, logar):
    logar("recepcao")

    resposta = client.get("/api/prontuario/5")

    assert resposta.status_code == 403
