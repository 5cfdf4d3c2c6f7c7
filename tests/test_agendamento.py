from datetime import date, timedelta

import pytest

from clinica.errors import AppError, InvalidInput
from clinica.payloads.atendimentos import AtendimentoIn, ExcluirDiaIn, RecorrenteIn
from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import pacientes as pacientes_repo
from clinica.services import agendamento_service


@pytest.fixture
def agenda(monkeypatch, banco):
    """Atendimentos em memoria com a mesma regra de sobreposicao do banco."""
    pacientes_ativos = {1, 2}

    def bloquear_ativo(paciente_id, *, cursor):
        return {"id": paciente_id} if paciente_id in pacientes_ativos else None

    def buscar_conflito(paciente_id, data, hora_inicio, hora_fim, *, ignorar_id=None, cursor=None):
        for atendimento in banco.tabela("atendimentos"):
            if (
                atendimento["paciente_id"] == paciente_id
                and atendimento["data"] == data
                and atendimento["id"] != ignorar_id
                and atendimento["hora_fim"] > hora_inicio
                and atendimento["hora_inicio"] < hora_fim
            ):
                return atendimento
        return None

    def criar(dados, *, cursor=None):
        tabela = banco.tabela("atendimentos")
        registro = dict(dados, id=len(tabela) + 1)
        tabela.append(registro)
        return registro["id"]

    monkeypatch.setattr(pacientes_repo, "bloquear_ativo", bloquear_ativo)
    monkeypatch.setattr(atendimentos_repo, "buscar_conflito", buscar_conflito)
    monkeypatch.setattr(atendimentos_repo, "criar", criar)
    return banco


def _atendimento(**campos):
    dados = {
        "paciente_id": 1,
        "terapeuta_id": 3,
        "data": "2024-03-04",
        "hora_inicio": "08:00",
        "hora_fim": "09:00",
    }
    dados.update(campos)
    return AtendimentoIn.model_validate(dados)


def _recorrente(**campos):
    dados = {
        "pacienteId": 1,
        "terapeutaId": 3,
        "horaInicio": "08:00",
        "horaFim": "09:00",
        "periodoInicio": "2024-03-04",
        "periodoFim": "2024-03-17",
        "diasSemana": [1, 3],
    }
    dados.update(campos)
    return RecorrenteIn.model_validate(dados)


@pytest.mark.parametrize(
    "entrada, esperado",
    [("8:00", "08:00:00"), ("08:30", "08:30:00"), ("14:05:09", "14:05:09"), (" 07:15 ", "07:15:00")],
)
def test_normalizar_hora(entrada, esperado):
    assert agendamento_service.normalizar_hora(entrada) == esperado


@pytest.mark.parametrize("entrada", ["24:00", "10:60", "abc", "", None, "8h"])
def test_normalizar_hora_invalida(entrada):
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.normalizar_hora(entrada)
    assert erro.value.code == "INVALID_TIME"


def test_parse_data_invalida():
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.parse_data("2024-02-30")
    assert erro.value.code == "INVALID_DATE"

    with pytest.raises(InvalidInput):
        agendamento_service.parse_data("04/03/2024")


def test_dia_da_semana_comeca_no_domingo():
    assert agendamento_service.dia_da_semana(date(2024, 3, 3)) == 0
    assert agendamento_service.dia_da_semana(date(2024, 3, 4)) == 1
    assert agendamento_service.dia_da_semana(date(2024, 3, 9)) == 6


def test_montar_registro_normaliza_campos():
    registro = agendamento_service.montar_registro(
        paciente_id=1,
        terapeuta_id=3,
        data="2024-03-04",
        hora_inicio="8:00",
        hora_fim="9:30",
        turno="Noturno",
        presenca="Presente",
    )

    assert registro["hora_inicio"] == "08:00:00"
    assert registro["hora_fim"] == "09:30:00"
    assert registro["turno"] == "Matutino"
    assert registro["realizado"] == 1
    assert registro["status_repasse"] == "Pendente"


def test_montar_registro_presenca_desconhecida():
    registro = agendamento_service.montar_registro(
        paciente_id=1, terapeuta_id=3, data="2024-03-04", hora_inicio="08:00", hora_fim="09:00", presenca="Talvez"
    )
    assert registro["presenca"] == "Nao informado"
    assert registro["realizado"] == 0


def test_horario_final_antes_do_inicial():
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.montar_registro(
            paciente_id=1, terapeuta_id=3, data="2024-03-04", hora_inicio="09:00", hora_fim="09:00"
        )
    assert erro.value.code == "INVALID_TIME_RANGE"


def test_ausencia_exige_motivo():
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.montar_registro(
            paciente_id=1,
            terapeuta_id=3,
            data="2024-03-04",
            hora_inicio="08:00",
            hora_fim="09:00",
            presenca="Ausente",
            motivo="   ",
        )
    assert erro.value.code == "MOTIVO_REQUIRED"


def test_conflito_de_horario(contexto, agenda):
    agendamento_service.criar_atendimento(_atendimento())

    with pytest.raises(AppError) as erro:
        agendamento_service.criar_atendimento(_atendimento(hora_inicio="08:30", hora_fim="09:30"))
    assert erro.value.status == 409
    assert erro.value.code == "SCHEDULE_CONFLICT"

    # intervalos encostados nao conflitam
    agendamento_service.criar_atendimento(_atendimento(hora_inicio="09:00", hora_fim="10:00"))
    # outro paciente no mesmo horario
    agendamento_service.criar_atendimento(_atendimento(paciente_id=2))

    assert len(agenda.tabela("atendimentos")) == 3


def test_paciente_inexistente_nao_agenda(contexto, agenda):
    with pytest.raises(AppError) as erro:
        agendamento_service.criar_atendimento(_atendimento(paciente_id=99))
    assert erro.value.status == 404


def test_expandir_dias():
    dias = agendamento_service.expandir_dias(date(2024, 3, 4), date(2024, 3, 17), {1, 3})
    assert dias == [date(2024, 3, 4), date(2024, 3, 6), date(2024, 3, 11), date(2024, 3, 13)]


def test_expandir_dias_limite():
    inicio = date(2024, 1, 1)
    dias = agendamento_service.expandir_dias(inicio, inicio + timedelta(days=399), set(range(7)))
    assert len(dias) == 400

    with pytest.raises(InvalidInput) as erro:
        agendamento_service.expandir_dias(inicio, inicio + timedelta(days=400), set(range(7)))
    assert erro.value.code == "TOO_LARGE"


def test_recorrente_cria_todos_os_dias(contexto, agenda):
    resultado = agendamento_service.criar_recorrente(_recorrente())

    assert resultado["criados"] == 4
    assert [a["data"] for a in resultado["atendimentos"]] == [
        "2024-03-04",
        "2024-03-06",
        "2024-03-11",
        "2024-03-13",
    ]
    gravados = agenda.tabela("atendimentos")
    assert {a["periodo_inicio"] for a in gravados} == {"2024-03-04"}
    assert {a["periodo_fim"] for a in gravados} == {"2024-03-17"}


def test_recorrente_desfaz_lote_em_conflito(contexto, agenda):
    agendamento_service.criar_atendimento(_atendimento(data="2024-03-11", hora_inicio="08:30", hora_fim="09:15"))

    with pytest.raises(AppError) as erro:
        agendamento_service.criar_recorrente(_recorrente())

    assert erro.value.code == "SCHEDULE_CONFLICT"
    assert erro.value.details == [{"data": "2024-03-11", "atendimentoId": 1}]
    assert len(agenda.tabela("atendimentos")) == 1
    assert agenda.rollbacks == 1


def test_recorrente_sem_dia_correspondente(contexto, agenda):
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.criar_recorrente(
            _recorrente(periodoInicio="2024-03-04", periodoFim="2024-03-05", diasSemana=[0])
        )
    assert erro.value.code == "NO_MATCH"


def test_recorrente_periodo_invertido(contexto, agenda):
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.criar_recorrente(_recorrente(periodoInicio="2024-03-17", periodoFim="2024-03-04"))
    assert erro.value.code == "INVALID_PERIOD"


def test_recorrente_intervalo_grande_demais(contexto, agenda):
    with pytest.raises(InvalidInput) as erro:
        agendamento_service.criar_recorrente(
            _recorrente(periodoInicio="2024-01-01", periodoFim="2025-12-31", diasSemana=[0, 1, 2, 3, 4, 5, 6])
        )
    assert erro.value.code == "TOO_LARGE"
    assert agenda.tabela("atendimentos") == []


def test_excluir_dia_normaliza_parametros(monkeypatch):
    chamadas = []

    def excluir_dia_da_serie(**kwargs):
        chamadas.append(kwargs)
        return 3

    monkeypatch.setattr(atendimentos_repo, "excluir_dia_da_serie", excluir_dia_da_serie)
    dados = ExcluirDiaIn.model_validate(
        {
            "pacienteId": 1,
            "horaInicio": "8:00",
            "horaFim": "09:00",
            "periodoInicio": "2024-03-01",
            "periodoFim": "2024-03-31",
            "diaSemana": 1,
        }
    )

    assert agendamento_service.excluir_dia(dados, usuario_id=2) == {"removidos": 3}
    assert chamadas[0]["hora_inicio"] == "08:00:00"
    assert chamadas[0]["turno"] == "Matutino"
    assert chamadas[0]["terapeuta_id"] is None


def test_excluir_dia_converte_dia_da_semana_para_mysql(banco):
    banco.rowcount = 2

    removidos = atendimentos_repo.excluir_dia_da_serie(
        paciente_id=1,
        terapeuta_id=3,
        hora_inicio="08:00:00",
        hora_fim="09:00:00",
        turno="Matutino",
        periodo_inicio="2024-03-01",
        periodo_fim="2024-03-31",
        dia_semana=1,
        usuario_id=2,
    )

    query, params = banco.executados[0]
    assert removidos == 2
    assert query.startswith("UPDATE atendimentos SET deleted_at = NOW()")
    assert "DAYOFWEEK(data) = %s" in query
    assert "presenca <> 'Ausente'" in query
    assert params == (2, 1, "08:00:00", "09:00:00", "Matutino", "2024-03-01", "2024-03-31", 2, 3)


def test_busca_de_conflito_usa_intervalo_semiaberto(banco):
    atendimentos_repo.buscar_conflito(1, "2024-03-04", "08:00:00", "09:00:00", ignorar_id=5)

    query, params = banco.executados[0]
    assert "hora_fim > %s AND hora_inicio < %s" in query
    assert "id <> %s" in query
    assert params == (1, "2024-03-04", "08:00:00", "09:00:00", 5)
