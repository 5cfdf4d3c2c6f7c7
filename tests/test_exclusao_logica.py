from datetime import date, datetime, timedelta

from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import evolucoes as evolucoes_repo
from clinica.repositories import pacientes as pacientes_repo

EXCLUIDO_EM = datetime(2024, 3, 10, 9, 0, 0)


def _consulta(banco):
    query, params = banco.executados[-1]
    return query, params


def test_listagens_ignoram_registros_excluidos(banco):
    pacientes_repo.listar(nome="Lia")
    query, _ = _consulta(banco)
    assert "WHERE p.deleted_at IS NULL" in query

    atendimentos_repo.listar(paciente_id=1)
    query, _ = _consulta(banco)
    assert "a.deleted_at IS NULL AND p.deleted_at IS NULL" in query

    evolucoes_repo.listar_por_paciente(5)
    query, params = _consulta(banco)
    assert "e.deleted_at IS NULL" in query
    assert params == (5,)


def test_leitura_por_id_inclui_excluidos(banco):
    pacientes_repo.obter_por_id(1)
    atendimentos_repo.obter_por_id(2)
    evolucoes_repo.obter_por_id(3)

    for query, _ in banco.executados:
        assert "deleted_at IS NULL" not in query


def test_leitura_por_id_pode_filtrar_excluidos(banco):
    pacientes_repo.obter_por_id(1, incluir_excluidos=False)
    atendimentos_repo.obter_por_id(2, incluir_excluidos=False)
    evolucoes_repo.obter_por_id(3, incluir_excluidos=False)

    assert all("deleted_at IS NULL" in query for query, _ in banco.executados)


def test_api_paciente_excluido_continua_legivel(client, logar, banco):
    logar("admin")
    banco.resultados = [
        {
            "id": 1,
            "nome": "Lia Souza",
            "cpf": "12345678901",
            "ativo": 0,
            "deleted_at": EXCLUIDO_EM,
            "deleted_by_user_id": 2,
            "terapias": "Especial||Intensiva",
        }
    ]

    resposta = client.get("/api/pacientes/1")

    assert resposta.status_code == 200
    corpo = resposta.get_json()
    assert corpo["deleted_at"] == "2024-03-10 09:00:00"
    assert corpo["deleted_by_user_id"] == 2
    assert corpo["terapias"] == ["Especial", "Intensiva"]


def test_api_atendimento_excluido_continua_legivel(client, logar, banco):
    logar("admin")
    banco.resultados = [
        {
            "id": 2,
            "paciente_id": 1,
            "data": date(2024, 3, 4),
            "hora_inicio": timedelta(hours=8),
            "hora_fim": timedelta(hours=9),
            "presenca": "Nao informado",
            "deleted_at": EXCLUIDO_EM,
        }
    ]

    resposta = client.get("/api/atendimentos/2")

    assert resposta.status_code == 200
    corpo = resposta.get_json()
    assert corpo["deleted_at"] == "2024-03-10 09:00:00"
    assert corpo["hora_inicio"] == "08:00:00"
    query, params = banco.executados[0]
    assert "deleted_at IS NULL" not in query
    assert params == (2,)
