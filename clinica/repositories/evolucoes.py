from __future__ import annotations

import json
from typing import Optional

from clinica.extensions import mysql
from clinica.utils.serializacao import carregar_json

_SELECT = """
    SELECT e.id, e.paciente_id, e.terapeuta_id, e.atendimento_id, e.data, e.payload,
           e.created_at, e.updated_at, e.deleted_at, e.deleted_by_user_id,
           t.nome AS terapeuta_nome
    FROM evolucoes e
    LEFT JOIN terapeutas t ON t.id = e.terapeuta_id
"""


def _decodificar(row: Optional[dict]) -> Optional[dict]:
    if row is not None:
        row["payload"] = carregar_json(row.get("payload"))
    return row


def listar_por_paciente(
    paciente_id: int,
    *,
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
) -> list[dict]:
    query = _SELECT + " WHERE e.paciente_id = %s AND e.deleted_at IS NULL"
    params: list = [paciente_id]
    if data_ini:
        query += " AND e.data >= %s"
        params.append(data_ini)
    if data_fim:
        query += " AND e.data <= %s"
        params.append(data_fim)
    query += " ORDER BY e.data DESC, e.created_at DESC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return [_decodificar(row) for row in cursor.fetchall()]


def obter_por_id(evolucao_id: int, *, incluir_excluidos: bool = True) -> Optional[dict]:
    query = _SELECT + " WHERE e.id = %s"
    if not incluir_excluidos:
        query += " AND e.deleted_at IS NULL"
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (evolucao_id,))
        return _decodificar(cursor.fetchone())


def criar(
    *,
    paciente_id: int,
    terapeuta_id: int,
    atendimento_id: Optional[int],
    data: str,
    payload: dict,
) -> int:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            """
            INSERT INTO evolucoes (paciente_id, terapeuta_id, atendimento_id, data, payload)
            VALUES (%s, %s, %s, %s, %s)
            """,
            (
                paciente_id,
                terapeuta_id,
                atendimento_id,
                data,
                json.dumps(payload, ensure_ascii=False, default=str),
            ),
        )
        return cursor.lastrowid


def atualizar(
    evolucao_id: int,
    *,
    terapeuta_id: int,
    atendimento_id: Optional[int],
    data: str,
    payload: dict,
) -> int:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            """
            UPDATE evolucoes
            SET terapeuta_id = %s, atendimento_id = %s, data = %s, payload = %s
            WHERE id = %s AND deleted_at IS NULL
            """,
            (
                terapeuta_id,
                atendimento_id,
                data,
                json.dumps(payload, ensure_ascii=False, default=str),
                evolucao_id,
            ),
        )
        return cursor.rowcount


def excluir_logicamente(evolucao_id: int, usuario_id: Optional[int]) -> bool:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            """
            UPDATE evolucoes SET deleted_at = NOW(), deleted_by_user_id = %s
            WHERE id = %s AND deleted_at IS NULL
            """,
            (usuario_id, evolucao_id),
        )
        return cursor.rowcount > 0
