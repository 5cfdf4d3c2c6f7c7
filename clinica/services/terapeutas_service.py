from __future__ import annotations

import re
from typing import Optional

from clinica.domain.permissoes import Permissao
from clinica.domain.status import ESPECIALIDADE_PADRAO
from clinica.errors import AppError, Forbidden, InvalidInput, NotFound
from clinica.extensions import mysql
from clinica.payloads.terapeutas import TerapeutaIn
from clinica.repositories import terapeutas as terapeutas_repo
from clinica.repositories import usuarios as usuarios_repo

from . import acesso_service


def _somente_digitos(valor: Optional[str], limite: int) -> Optional[str]:
    digitos = re.sub(r"\D", "", valor or "")[:limite]
    return digitos or None


def compor_endereco(dados: TerapeutaIn) -> Optional[str]:
    partes = [dados.logradouro, dados.numero, dados.bairro, dados.cidade]
    partes = [parte.strip() for parte in partes if parte and parte.strip()]
    if partes:
        return ", ".join(partes)
    return dados.endereco


def montar_registro(dados: TerapeutaIn) -> dict:
    cpf = _somente_digitos(dados.cpf, 11)
    if not dados.nome or not cpf or len(cpf) != 11:
        raise InvalidInput("Nome e CPF sao obrigatorios")

    if dados.usuario_id and not usuarios_repo.obter_por_id(dados.usuario_id):
        raise InvalidInput("Usuario vinculado nao encontrado")

    return {
        "nome": dados.nome,
        "cpf": cpf,
        "data_nascimento": dados.data_nascimento,
        "email": dados.email,
        "telefone": dados.telefone,
        "endereco": compor_endereco(dados),
        "logradouro": dados.logradouro,
        "numero": dados.numero,
        "bairro": dados.bairro,
        "cidade": dados.cidade,
        "cep": _somente_digitos(dados.cep, 8),
        # especialidades fora da lista sao mantidas como informadas
        "especialidade": dados.especialidade or ESPECIALIDADE_PADRAO,
        "usuario_id": dados.usuario_id,
    }


def listar(terapeuta_id=None, nome=None, cpf=None, especialidade=None) -> list[dict]:
    return terapeutas_repo.listar(
        terapeuta_id=terapeuta_id, nome=nome, cpf=cpf, especialidade=especialidade
    )


def obter(terapeuta_id: int) -> dict:
    terapeuta = terapeutas_repo.obter_por_id(terapeuta_id)
    if not terapeuta:
        raise NotFound("Terapeuta nao encontrado")
    return terapeuta


def criar(dados: TerapeutaIn) -> int:
    registro = montar_registro(dados)
    if terapeutas_repo.obter_por_cpf(registro["cpf"]):
        raise AppError("Ja existe terapeuta com este CPF", 409, "CONFLICT")
    return terapeutas_repo.criar(registro)


def atualizar(terapeuta_id: int, dados: TerapeutaIn, acesso: acesso_service.Acesso) -> None:
    """
    Quem tem ``terapeutas:edit`` altera qualquer cadastro; com apenas
    ``terapeutas:edit_self`` o terapeuta altera somente o proprio.
    """
    atual = obter(terapeuta_id)

    if not acesso_service.tem_permissao(acesso, [Permissao.TERAPEUTAS_EDIT]):
        if not acesso_service.tem_permissao(acesso, [Permissao.TERAPEUTAS_EDIT_SELF]):
            raise Forbidden()
        if atual.get("usuario_id") != acesso.user_id:
            raise Forbidden()

    registro = montar_registro(dados)
    if not acesso_service.tem_permissao(acesso, [Permissao.TERAPEUTAS_EDIT]):
        # o vinculo com o usuario nao muda pela edicao do proprio cadastro
        registro["usuario_id"] = atual.get("usuario_id")

    if terapeutas_repo.obter_por_cpf(registro["cpf"], ignorar_id=terapeuta_id):
        raise AppError("Ja existe terapeuta com este CPF", 409, "CONFLICT")

    terapeutas_repo.atualizar(terapeuta_id, registro)


def excluir(terapeuta_id: int) -> None:
    obter(terapeuta_id)
    with mysql.get_cursor() as (_, cursor):
        if terapeutas_repo.contar_evolucoes(terapeuta_id, cursor=cursor):
            raise AppError(
                "Terapeuta possui evolucoes registradas e nao pode ser excluido",
                409,
                "THERAPIST_HAS_EVOLUCOES",
            )
        terapeutas_repo.excluir(terapeuta_id, cursor=cursor)
