from __future__ import annotations

import re
from typing import Optional

from flask import current_app

from clinica.domain.status import CONVENIO_PADRAO, CONVENIOS
from clinica.errors import AppError, InvalidInput, NotFound
from clinica.extensions import mysql
from clinica.payloads.pacientes import PacienteIn
from clinica.repositories import pacientes as pacientes_repo


def normalizar_cpf(valor: Optional[str]) -> str:
    return re.sub(r"\D", "", valor or "")[:11]


def normalizar_convenio(valor: Optional[str]) -> str:
    valor = (valor or "").strip()
    return valor if valor in CONVENIOS else CONVENIO_PADRAO


def _ativo(valor) -> bool:
    if valor is None:
        return True
    if isinstance(valor, str):
        return valor.strip().lower() not in {"0", "false", "nao", "não"}
    return bool(valor)


def _terapias(dados: PacienteIn) -> list[str]:
    nomes = list(dados.terapias or [])
    if isinstance(dados.terapia, str):
        nomes.append(dados.terapia)
    elif isinstance(dados.terapia, list):
        nomes.extend(dados.terapia)
    vistos = dict.fromkeys(nome.strip() for nome in nomes if nome and nome.strip())
    return list(vistos)


def montar_registro(dados: PacienteIn) -> dict:
    nome = (dados.nome or "").strip()
    cpf = normalizar_cpf(dados.cpf)
    if not nome or len(cpf) != 11:
        raise InvalidInput("Nome e CPF sao obrigatorios")

    return {
        "nome": nome,
        "cpf": cpf,
        "data_nascimento": dados.data_nascimento,
        "convenio": normalizar_convenio(dados.convenio),
        "email": dados.email,
        "nome_responsavel": dados.nome_responsavel,
        "telefone": dados.telefone,
        "telefone2": dados.telefone2,
        "nome_mae": dados.nome_mae,
        "nome_pai": dados.nome_pai,
        "sexo": dados.sexo,
        "data_inicio": dados.data_inicio,
        "foto": dados.foto,
        "laudo": dados.laudo,
        "documento": dados.documento,
        "ativo": 1 if _ativo(dados.ativo) else 0,
    }


def listar(paciente_id=None, nome=None, cpf=None) -> list[dict]:
    return pacientes_repo.listar(paciente_id=paciente_id, nome=nome, cpf=cpf)


def obter(paciente_id: int) -> dict:
    paciente = pacientes_repo.obter_por_id(paciente_id)
    if not paciente:
        raise NotFound("Paciente nao encontrado")
    return paciente


def criar(dados: PacienteIn) -> tuple[int, bool]:
    """
    Cadastra o paciente. Se ja existir paciente ativo com o mesmo CPF, o
    cadastro existente e atualizado. Retorna ``(id, reaproveitado)``.
    """
    registro = montar_registro(dados)
    terapias = _terapias(dados)

    with mysql.get_cursor() as (_, cursor):
        existente = pacientes_repo.obter_ativo_por_cpf(registro["cpf"], cursor=cursor)
        if existente:
            pacientes_repo.atualizar(existente["id"], registro, cursor=cursor)
            pacientes_repo.substituir_terapias(existente["id"], terapias, cursor=cursor)
            current_app.logger.info(
                "Paciente %s reaproveitado pelo CPF no cadastro.", existente["id"]
            )
            return existente["id"], True

        paciente_id = pacientes_repo.criar(registro, cursor=cursor)
        pacientes_repo.substituir_terapias(paciente_id, terapias, cursor=cursor)

    return paciente_id, False


def atualizar(paciente_id: int, dados: PacienteIn) -> None:
    registro = montar_registro(dados)
    terapias = _terapias(dados)

    with mysql.get_cursor() as (_, cursor):
        if not pacientes_repo.obter_por_id(paciente_id, cursor=cursor):
            raise NotFound("Paciente nao encontrado")
        pacientes_repo.atualizar(paciente_id, registro, cursor=cursor)
        pacientes_repo.substituir_terapias(paciente_id, terapias, cursor=cursor)


def definir_ativo(paciente_id: int, ativo: bool) -> None:
    if not pacientes_repo.definir_ativo(paciente_id, ativo):
        raise NotFound("Paciente nao encontrado")


def excluir(paciente_id: int, usuario_id: Optional[int]) -> None:
    paciente = pacientes_repo.obter_por_id(paciente_id, incluir_excluidos=False)
    if not paciente:
        raise NotFound("Paciente nao encontrado")
    if paciente.get("ativo"):
        raise AppError(
            "Arquive o paciente antes de exclui-lo",
            409,
            "PATIENT_MUST_BE_ARCHIVED_FIRST",
        )
    if not pacientes_repo.excluir_logicamente(paciente_id, usuario_id):
        raise NotFound("Paciente nao encontrado")
