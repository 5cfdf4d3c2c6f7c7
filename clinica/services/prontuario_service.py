from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from flask import current_app

from clinica.database import is_unique_violation
from clinica.domain.status import DocStatus, DocTipo
from clinica.errors import AppError, Forbidden, InvalidInput, NotFound
from clinica.extensions import mysql
from clinica.payloads.prontuario import DocumentoIn, EvolucaoIn, EvolucaoUpdateIn
from clinica.repositories import documentos as documentos_repo
from clinica.repositories import evolucoes as evolucoes_repo
from clinica.utils.serializacao import formatar_data

from . import acesso_service

MAX_TENTATIVAS_VERSAO = 3


def _data_iso(valor: Optional[str]) -> str:
    if not valor:
        return date.today().isoformat()
    try:
        return datetime.strptime(valor.strip()[:10], "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise InvalidInput("Data invalida") from None


# --- Documentos ---

def listar_documentos(paciente_id: int, tipo: Optional[str] = None) -> list[dict]:
    return documentos_repo.listar(paciente_id, tipo.upper().strip() if tipo else None)


def obter_documento(documento_id: int) -> dict:
    documento = documentos_repo.obter_por_id(documento_id, incluir_excluidos=False)
    if not documento:
        raise NotFound("Documento nao encontrado")
    return documento


def salvar_documento(paciente_id: int, dados: DocumentoIn, acesso: acesso_service.Acesso) -> dict:
    """
    Grava uma nova versao do documento. O numero da versao e MAX + 1 por
    (paciente, tipo); a chave unica resolve corridas e a gravacao e repetida
    algumas vezes antes de desistir.
    """
    tipo = dados.tipo.upper().strip()
    if tipo not in DocTipo.choices():
        raise InvalidInput("Tipo de documento invalido")

    status = dados.status if dados.status in (DocStatus.RASCUNHO, DocStatus.FINALIZADO) else DocStatus.RASCUNHO.value
    titulo = (dados.titulo or tipo).strip() or tipo

    for tentativa in range(1, MAX_TENTATIVAS_VERSAO + 1):
        try:
            with mysql.get_cursor() as (_, cursor):
                versao = documentos_repo.proxima_versao(paciente_id, tipo, cursor=cursor)
                documento_id = documentos_repo.inserir(
                    paciente_id=paciente_id,
                    tipo=tipo,
                    version=versao,
                    status=status,
                    titulo=titulo,
                    payload=dados.payload,
                    created_by_user_id=acesso.user_id,
                    created_by_role=acesso.role,
                    cursor=cursor,
                )
            return {"id": documento_id, "version": versao}
        except Exception as exc:
            if is_unique_violation(exc) and tentativa < MAX_TENTATIVAS_VERSAO:
                current_app.logger.warning(
                    "Versao de documento em disputa (paciente %s, %s); tentativa %s.",
                    paciente_id,
                    tipo,
                    tentativa,
                )
                continue
            raise


def finalizar_documento(documento_id: int) -> dict:
    documento = obter_documento(documento_id)
    if documento["status"] == DocStatus.FINALIZADO:
        raise AppError("Documento ja finalizado", 409, "DOCUMENT_FINALIZED")
    if not documentos_repo.finalizar(documento_id):
        raise AppError("Documento ja finalizado", 409, "DOCUMENT_FINALIZED")
    return {"id": documento_id, "status": DocStatus.FINALIZADO.value}


def excluir_documento(documento_id: int, usuario_id: Optional[int]) -> None:
    documento = obter_documento(documento_id)
    if documento["status"] == DocStatus.FINALIZADO:
        raise AppError("Documento finalizado nao pode ser removido", 409, "DOCUMENT_FINALIZED")
    if not documentos_repo.excluir_logicamente(documento_id, usuario_id):
        # finalizado entre a leitura e a exclusao
        raise AppError("Documento finalizado nao pode ser removido", 409, "DOCUMENT_FINALIZED")


# --- Evolucoes ---

def listar_evolucoes(paciente_id: int) -> list[dict]:
    return evolucoes_repo.listar_por_paciente(paciente_id)


def obter_evolucao(evolucao_id: int, *, incluir_excluidas: bool = True) -> dict:
    evolucao = evolucoes_repo.obter_por_id(evolucao_id, incluir_excluidos=incluir_excluidas)
    if not evolucao:
        raise NotFound("Evolucao nao encontrada")
    return evolucao


def assert_dono_evolucao(acesso_paciente: acesso_service.AcessoPaciente, evolucao: dict) -> None:
    """Terapeuta so enxerga e altera evolucoes vinculadas ao proprio cadastro."""
    if acesso_paciente.acesso.is_terapeuta and acesso_paciente.terapeuta_id != evolucao["terapeuta_id"]:
        raise Forbidden()


def _terapeuta_da_evolucao(acesso: acesso_service.Acesso, informado: Optional[int]) -> int:
    terapeuta_id = informado
    if acesso.is_terapeuta:
        terapeuta_id = acesso_service.exigir_terapeuta_do_usuario(acesso)["id"]
    if not terapeuta_id:
        raise InvalidInput("Terapeuta obrigatorio para evolucao")
    return terapeuta_id


def criar_evolucao(paciente_id: int, dados: EvolucaoIn, acesso: acesso_service.Acesso) -> dict:
    data = _data_iso(dados.data)
    terapeuta_id = _terapeuta_da_evolucao(acesso, dados.terapeuta_id)
    try:
        evolucao_id = evolucoes_repo.criar(
            paciente_id=paciente_id,
            terapeuta_id=terapeuta_id,
            atendimento_id=dados.atendimento_id,
            data=data,
            payload=dados.payload,
        )
    except Exception as exc:
        if is_unique_violation(exc):
            raise AppError("Ja existe evolucao para este dia/terapeuta", 409, "CONFLICT") from exc
        raise
    return {"id": evolucao_id, "data": data}


def atualizar_evolucao(evolucao: dict, dados: EvolucaoUpdateIn, acesso: acesso_service.Acesso) -> dict:
    data = _data_iso(dados.data or formatar_data(evolucao.get("data")))
    terapeuta_id = _terapeuta_da_evolucao(acesso, dados.terapeuta_id or evolucao.get("terapeuta_id"))
    payload = dados.payload if dados.payload is not None else evolucao.get("payload") or {}
    atendimento_id = dados.atendimento_id or evolucao.get("atendimento_id")

    try:
        evolucoes_repo.atualizar(
            evolucao["id"],
            terapeuta_id=terapeuta_id,
            atendimento_id=atendimento_id,
            data=data,
            payload=payload,
        )
    except Exception as exc:
        if is_unique_violation(exc):
            raise AppError("Ja existe evolucao para este dia/terapeuta", 409, "CONFLICT") from exc
        raise
    return {"id": evolucao["id"], "data": data}


def excluir_evolucao(evolucao_id: int, usuario_id: Optional[int]) -> None:
    if not evolucoes_repo.excluir_logicamente(evolucao_id, usuario_id):
        raise NotFound("Evolucao nao encontrada")


# --- Linha do tempo ---

def _chave_data(valor) -> str:
    if isinstance(valor, datetime):
        return valor.isoformat(sep=" ")
    if isinstance(valor, date):
        return valor.isoformat()
    return str(valor or "")


def montar_timeline(documentos: list[dict], evolucoes: list[dict]) -> list[dict]:
    itens = [
        {
            "kind": "documento",
            "id": doc["id"],
            "tipo": doc["tipo"],
            "titulo": doc.get("titulo") or doc["tipo"],
            "status": doc["status"],
            "version": doc["version"],
            "data": doc.get("created_at"),
            "profissional": doc.get("autor_nome") or doc.get("created_by_role") or "Usuario",
        }
        for doc in documentos
    ]

    for evolucao in evolucoes:
        payload = evolucao.get("payload") or {}
        comportamento = bool(payload.get("comportamentos"))
        itens.append(
            {
                "kind": "evolucao",
                "id": evolucao["id"],
                "tipo": "COMPORTAMENTO" if comportamento else "EVOLUCAO",
                "titulo": payload.get("titulo")
                or ("Registro de comportamento" if comportamento else "Evolucao clinica"),
                "status": "-",
                "version": None,
                "data": evolucao.get("data") or evolucao.get("created_at"),
                "profissional": evolucao.get("terapeuta_nome") or "Terapeuta",
            }
        )

    itens.sort(key=lambda item: _chave_data(item["data"]), reverse=True)
    return itens


def timeline(paciente_id: int) -> list[dict]:
    return montar_timeline(documentos_repo.listar(paciente_id), evolucoes_repo.listar_por_paciente(paciente_id))
