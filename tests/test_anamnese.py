import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from clinica.errors import NotFound
from clinica.repositories import anamnese as anamnese_repo
from clinica.repositories import pacientes as pacientes_repo
from clinica.services import anamnese_service


@pytest.fixture
def anamneses(monkeypatch, banco):
    estado = {"disputas": 0}

    def salvar_base(paciente_id, payload, *, cursor):
        banco.tabelas["anamnese"] = [
            row for row in banco.tabela("anamnese") if row["paciente_id"] != paciente_id
        ] + [{"paciente_id": paciente_id, "payload": payload}]

    def proxima_versao(paciente_id, *, cursor):
        versoes = [row["version"] for row in banco.tabela("versoes") if row["paciente_id"] == paciente_id]
        return max(versoes, default=0) + 1

    def inserir_versao(paciente_id, version, status, payload, *, cursor):
        if estado["disputas"]:
            estado["disputas"] -= 1
            raise IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
        banco.tabela("versoes").append(
            {
                "paciente_id": paciente_id,
                "version": version,
                "status": status,
                "payload": payload,
                "created_at": "2024-03-04 10:00:00",
            }
        )
        return len(banco.tabela("versoes"))

    def obter_versao(paciente_id, version=None):
        versoes = [
            row
            for row in banco.tabela("versoes")
            if row["paciente_id"] == paciente_id and (version is None or row["version"] == version)
        ]
        return max(versoes, key=lambda row: row["version"], default=None)

    monkeypatch.setattr(
        pacientes_repo,
        "obter_por_id",
        lambda paciente_id, incluir_excluidos=True, cursor=None: {"id": paciente_id} if paciente_id == 5 else None,
    )
    monkeypatch.setattr(anamnese_repo, "salvar_base", salvar_base)
    monkeypatch.setattr(anamnese_repo, "proxima_versao", proxima_versao)
    monkeypatch.setattr(anamnese_repo, "inserir_versao", inserir_versao)
    monkeypatch.setattr(anamnese_repo, "obter_versao", obter_versao)
    return estado


@pytest.mark.parametrize(
    "valor, esperado",
    [(True, True), ("sim", True), ("1", True), ("On", True), ("não", False), ("0", False), ("talvez", None), ("", None), (None, None)],
)
def test_booleano_ou_none(valor, esperado):
    assert anamnese_service.booleano_ou_none(valor) is esperado


def test_data_ou_none():
    assert anamnese_service.data_ou_none("2024-05-01T10:00:00") == "2024-05-01"
    assert anamnese_service.data_ou_none("01/05/2024") is None
    assert anamnese_service.data_ou_none("  ") is None


def test_montar_payload_aceita_snake_case():
    payload = anamnese_service.montar_payload(
        5,
        {
            "possui_diagnostico": "sim",
            "diagnostico": "  TEA nivel 1 ",
            "dataEntrevista": "2024-02-10",
            "rotinaSono": "",
            "campoDesconhecido": "ignorado",
        },
    )

    assert payload["paciente_id"] == 5
    assert payload["possuiDiagnostico"] is True
    assert payload["diagnostico"] == "TEA nivel 1"
    assert payload["dataEntrevista"] == "2024-02-10"
    assert payload["rotinaSono"] is None
    assert "campoDesconhecido" not in payload
    assert set(anamnese_service.CAMPOS) <= set(payload)


def test_camel_case_tem_prioridade():
    payload = anamnese_service.montar_payload(5, {"tipoParto": "Cesarea", "tipo_parto": "Normal"})
    assert payload["tipoParto"] == "Cesarea"


def test_normalizar_status():
    assert anamnese_service.normalizar_status("Finalizada") == "Finalizada"
    assert anamnese_service.normalizar_status("Finalizado") == "Rascunho"
    assert anamnese_service.normalizar_status(None) == "Rascunho"


@pytest.mark.parametrize("valor, esperado", [(None, 50), ("abc", 50), (0, 50), (-1, 50), ("10", 10), (999, 200)])
def test_limite_versoes(valor, esperado):
    assert anamnese_service.limite_versoes(valor) == esperado


def test_salvar_cria_versoes_sequenciais(contexto, anamneses):
    primeira = anamnese_service.salvar(5, {"diagnostico": "TEA"}, "Rascunho")
    segunda = anamnese_service.salvar(5, {"diagnostico": "TEA nivel 2"}, "Finalizada")

    assert primeira["version"] == 1
    assert segunda["version"] == 2
    assert segunda["status"] == "Finalizada"
    assert segunda["diagnostico"] == "TEA nivel 2"
    assert segunda["created_at"] == "2024-03-04 10:00:00"


def test_salvar_repete_quando_versao_ja_existe(contexto, anamneses, banco):
    anamneses["disputas"] = 1

    salva = anamnese_service.salvar(5, {"diagnostico": "TEA"})

    assert salva["version"] == 1
    assert salva["status"] == "Rascunho"
    assert banco.rollbacks == 1


def test_salvar_desiste_apos_tres_disputas(contexto, anamneses, banco):
    anamneses["disputas"] = 3

    with pytest.raises(IntegrityError):
        anamnese_service.salvar(5, {"diagnostico": "TEA"})

    assert banco.rollbacks == 3
    assert banco.tabela("versoes") == []
    assert banco.tabela("anamnese") == []


def test_salvar_paciente_inexistente(contexto, anamneses):
    with pytest.raises(NotFound):
        anamnese_service.salvar(6, {})


def test_obter_sem_versoes_usa_anamnese_base(monkeypatch):
    monkeypatch.setattr(anamnese_repo, "obter_versao", lambda paciente_id, version=None: None)
    monkeypatch.setattr(
        anamnese_repo,
        "obter_base",
        lambda paciente_id: {
            "paciente_id": paciente_id,
            "payload": {"diagnostico": "TEA"},
            "created_at": "2023-01-01 08:00:00",
            "updated_at": "2023-02-01 08:00:00",
        },
    )

    anamnese = anamnese_service.obter(5)

    assert anamnese["diagnostico"] == "TEA"
    assert "version" not in anamnese
    assert anamnese["updated_at"] == "2023-02-01 08:00:00"


def test_obter_anamnese_inexistente(monkeypatch):
    monkeypatch.setattr(anamnese_repo, "obter_versao", lambda paciente_id, version=None: None)
    monkeypatch.setattr(anamnese_repo, "obter_base", lambda paciente_id: None)

    with pytest.raises(NotFound):
        anamnese_service.obter(5)


def test_api_salva_anamnese(client, logar, anamneses):
    logar("recepcao")

    resposta = client.post(
        "/api/anamnese",
        json={"pacienteId": 5, "status": "Finalizada", "escola": "Escola Girassol", "fezTerapia": "nao"},
    )

    assert resposta.status_code == 201
    corpo = resposta.get_json()
    assert corpo["version"] == 1
    assert corpo["escola"] == "Escola Girassol"
    assert corpo["fezTerapia"] is False


def test_api_anamnese_sem_paciente(client, logar, anamneses):
    logar("recepcao")

    resposta = client.post("/api/anamnese", json={"escola": "X"})

    assert resposta.status_code == 400
    assert resposta.get_json()["code"] == "VALIDATION_ERROR"
