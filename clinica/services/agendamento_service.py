from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional

from flask import current_app

from clinica.domain.status import STATUS_REPASSE_PADRAO, Presenca, Turno
from clinica.errors import AppError, InvalidInput, NotFound
from clinica.extensions import mysql
from clinica.payloads.atendimentos import AtendimentoIn, ExcluirDiaIn, RecorrenteIn
from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import pacientes as pacientes_repo

LIMITE_RECORRENCIA = 400

_HORA = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_DATA = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def normalizar_hora(valor: Optional[str]) -> str:
    """Aceita HH:MM ou HH:MM:SS e devolve sempre HH:MM:SS."""
    match = _HORA.match((valor or "").strip())
    if not match:
        raise InvalidInput("Horario invalido", "INVALID_TIME")
    horas, minutos, segundos = int(match.group(1)), int(match.group(2)), int(match.group(3) or 0)
    if horas > 23 or minutos > 59 or segundos > 59:
        raise InvalidInput("Horario invalido", "INVALID_TIME")
    return f"{horas:02d}:{minutos:02d}:{segundos:02d}"


def parse_data(valor: Optional[str], code: str = "INVALID_DATE") -> date:
    texto = (valor or "").strip()
    if not _DATA.match(texto):
        raise InvalidInput("Data invalida", code)
    try:
        return datetime.strptime(texto, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput("Data invalida", code) from None


def dia_da_semana(dia: date) -> int:
    """0 = domingo ... 6 = sabado."""
    return (dia.weekday() + 1) % 7


def normalizar_turno(valor: Optional[str]) -> str:
    return valor if valor in Turno.choices() else Turno.MATUTINO.value


def normalizar_presenca(valor: Optional[str]) -> str:
    return valor if valor in Presenca.choices() else Presenca.NAO_INFORMADO.value


def montar_registro(
    *,
    paciente_id: int,
    terapeuta_id: Optional[int],
    data: str,
    hora_inicio: str,
    hora_fim: str,
    turno: Optional[str] = None,
    presenca: Optional[str] = None,
    motivo: Optional[str] = None,
    observacoes: Optional[str] = None,
    periodo_inicio: Optional[str] = None,
    periodo_fim: Optional[str] = None,
    status_repasse: Optional[str] = None,
    resumo_repasse: Optional[str] = None,
) -> dict:
    dia = parse_data(data)
    inicio = normalizar_hora(hora_inicio)
    fim = normalizar_hora(hora_fim)
    if inicio >= fim:
        raise InvalidInput("Horario inicial deve ser anterior ao final", "INVALID_TIME_RANGE")

    presenca = normalizar_presenca(presenca)
    if presenca == Presenca.AUSENTE.value and not (motivo or "").strip():
        raise InvalidInput("Informe o motivo da ausencia", "MOTIVO_REQUIRED")

    return {
        "paciente_id": paciente_id,
        "terapeuta_id": terapeuta_id,
        "data": dia.isoformat(),
        "hora_inicio": inicio,
        "hora_fim": fim,
        "turno": normalizar_turno(turno),
        "periodo_inicio": parse_data(periodo_inicio).isoformat() if periodo_inicio else None,
        "periodo_fim": parse_data(periodo_fim).isoformat() if periodo_fim else None,
        "presenca": presenca,
        "realizado": 1 if presenca == Presenca.PRESENTE.value else 0,
        "motivo": motivo,
        "observacoes": observacoes,
        "status_repasse": status_repasse or STATUS_REPASSE_PADRAO,
        "resumo_repasse": resumo_repasse,
    }


def _gravar(registro: dict, *, cursor, atendimento_id: Optional[int] = None) -> int:
    """
    Insere ou atualiza um atendimento dentro da transacao do chamador.

    A linha do paciente fica travada (SELECT ... FOR UPDATE) antes da busca
    por conflito, de modo que duas marcacoes simultaneas para o mesmo
    paciente sao serializadas entre a verificacao e a gravacao.
    """
    if not pacientes_repo.bloquear_ativo(registro["paciente_id"], cursor=cursor):
        raise NotFound("Paciente nao encontrado")

    conflito = atendimentos_repo.buscar_conflito(
        registro["paciente_id"],
        registro["data"],
        registro["hora_inicio"],
        registro["hora_fim"],
        ignorar_id=atendimento_id,
        cursor=cursor,
    )
    if conflito:
        current_app.logger.info(
            "Conflito de horario: paciente %s em %s %s-%s (atendimento %s).",
            registro["paciente_id"],
            registro["data"],
            registro["hora_inicio"],
            registro["hora_fim"],
            conflito["id"],
        )
        raise AppError(
            "Conflito de horario para este paciente",
            409,
            "SCHEDULE_CONFLICT",
            details=[{"data": registro["data"], "atendimentoId": conflito["id"]}],
        )

    if atendimento_id is None:
        return atendimentos_repo.criar(registro, cursor=cursor)

    atendimentos_repo.atualizar(atendimento_id, registro, cursor=cursor)
    return atendimento_id


def listar(paciente_id=None, terapeuta_id=None, data_ini=None, data_fim=None) -> list[dict]:
    return atendimentos_repo.listar(
        paciente_id=paciente_id,
        terapeuta_id=terapeuta_id,
        data_ini=parse_data(data_ini).isoformat() if data_ini else None,
        data_fim=parse_data(data_fim).isoformat() if data_fim else None,
    )


def obter(atendimento_id: int) -> dict:
    atendimento = atendimentos_repo.obter_por_id(atendimento_id)
    if not atendimento:
        raise NotFound("Atendimento nao encontrado")
    return atendimento


def _registro_de(dados: AtendimentoIn) -> dict:
    return montar_registro(
        paciente_id=dados.paciente_id,
        terapeuta_id=dados.terapeuta_id,
        data=dados.data,
        hora_inicio=dados.hora_inicio,
        hora_fim=dados.hora_fim,
        turno=dados.turno,
        presenca=dados.presenca,
        motivo=dados.motivo,
        observacoes=dados.observacoes,
        periodo_inicio=dados.periodo_inicio,
        periodo_fim=dados.periodo_fim,
        status_repasse=dados.status_repasse,
        resumo_repasse=dados.resumo_repasse,
    )


def criar_atendimento(dados: AtendimentoIn) -> int:
    registro = _registro_de(dados)
    with mysql.get_cursor() as (_, cursor):
        return _gravar(registro, cursor=cursor)


def atualizar_atendimento(atendimento_id: int, dados: AtendimentoIn) -> int:
    registro = _registro_de(dados)
    with mysql.get_cursor() as (_, cursor):
        atual = atendimentos_repo.obter_por_id(
            atendimento_id, incluir_excluidos=False, cursor=cursor
        )
        if not atual:
            raise NotFound("Atendimento nao encontrado")
        return _gravar(registro, cursor=cursor, atendimento_id=atendimento_id)


def expandir_dias(inicio: date, fim: date, dias_semana: set[int]) -> list[date]:
    """Dias do intervalo [inicio, fim] cujo dia da semana foi selecionado."""
    dias: list[date] = []
    atual = inicio
    while atual <= fim:
        if dia_da_semana(atual) in dias_semana:
            dias.append(atual)
            if len(dias) > LIMITE_RECORRENCIA:
                raise InvalidInput(
                    f"Intervalo muito grande. Limite de {LIMITE_RECORRENCIA} atendimentos por lote.",
                    "TOO_LARGE",
                )
        atual += timedelta(days=1)
    return dias


def criar_recorrente(dados: RecorrenteIn) -> dict:
    """
    Gera um atendimento por dia selecionado no periodo. O lote inteiro roda
    em uma unica transacao: um conflito em qualquer dia desfaz todos.
    """
    inicio = parse_data(dados.periodo_inicio, "INVALID_PERIOD")
    fim = parse_data(dados.periodo_fim, "INVALID_PERIOD")
    if inicio > fim:
        raise InvalidInput("Periodo invalido", "INVALID_PERIOD")

    dias = expandir_dias(inicio, fim, set(dados.dias_semana))
    if not dias:
        raise InvalidInput("Nenhum dia do periodo corresponde aos dias selecionados", "NO_MATCH")

    base = montar_registro(
        paciente_id=dados.paciente_id,
        terapeuta_id=dados.terapeuta_id,
        data=dias[0].isoformat(),
        hora_inicio=dados.hora_inicio,
        hora_fim=dados.hora_fim,
        turno=dados.turno,
        presenca=dados.presenca,
        motivo=dados.motivo,
        observacoes=dados.observacoes,
        periodo_inicio=inicio.isoformat(),
        periodo_fim=fim.isoformat(),
    )

    criados: list[dict] = []
    with mysql.get_cursor() as (_, cursor):
        for dia in dias:
            registro = dict(base, data=dia.isoformat())
            atendimento_id = _gravar(registro, cursor=cursor)
            criados.append({"id": atendimento_id, "data": registro["data"]})

    current_app.logger.info(
        "Lote recorrente criado: paciente %s, %s atendimentos entre %s e %s.",
        dados.paciente_id,
        len(criados),
        inicio,
        fim,
    )
    return {"criados": len(criados), "atendimentos": criados}


def excluir_dia(dados: ExcluirDiaIn, usuario_id: Optional[int]) -> dict:
    inicio = parse_data(dados.periodo_inicio, "INVALID_PERIOD")
    fim = parse_data(dados.periodo_fim, "INVALID_PERIOD")
    if inicio > fim:
        raise InvalidInput("Periodo invalido", "INVALID_PERIOD")

    removidos = atendimentos_repo.excluir_dia_da_serie(
        paciente_id=dados.paciente_id,
        terapeuta_id=dados.terapeuta_id,
        hora_inicio=normalizar_hora(dados.hora_inicio),
        hora_fim=normalizar_hora(dados.hora_fim),
        turno=normalizar_turno(dados.turno),
        periodo_inicio=inicio.isoformat(),
        periodo_fim=fim.isoformat(),
        dia_semana=dados.dia_semana,
        usuario_id=usuario_id,
    )
    return {"removidos": removidos}


def excluir(atendimento_id: int, usuario_id: Optional[int]) -> None:
    if not atendimentos_repo.excluir_logicamente(atendimento_id, usuario_id):
        raise NotFound("Atendimento nao encontrado")
