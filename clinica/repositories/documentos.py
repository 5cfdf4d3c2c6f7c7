from __future__ import annotations

import json
from typing import Any, Optional

from clinica.extensions import mysql
from clinica.utils.serializacao import carregar_json

_SELECT = """
    SELECT d.id, d.paciente_id, d.tipo, d.version, d.status, d.titulo, d.payload,
           d.created_by_user_id, d.created_by_role, d.created_at, d.deleted_at,
           d.deleted_by_user_id, u.nome AS autor_nome
    FROM prontuario_documentos d
    LEFT JOIN users u ON u.id = d.created_by_user_id
"""


def _decodificar(row: Optional[dict]) -> Optional[dict]:
    if row is not None:
        row["payload"] = carregar_json(row.get("payload"))
    return row


def listar(paciente_id: int, tipo: Optional[str] = None) -> list[dict]:
    query = _SELECT + " WHERE d.paciente_id = %s AND d.deleted_at IS NULL"
    params: list[Any] = [paciente_id]
    if tipo:
        query += " AND d.tipo = %s"
        params.append(tipo)
    query += " ORDER BY d.version DESC, d.created_at DESC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return [_decodificar(row) for row in cursor.fetchall()]


def obter_por_id(documento_id: int, *, incluir_excluidos: bool = True) -> Optional[dict]:
    query = _SELECT + " WHERE d.id = %s"
    if not incluir_excluidos:
        query += " AND d.deleted_at IS NULL"
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (documento_id,))
        return _decodificar(cursor.fetchone())


def proxima_versao(paciente_id: int, tipo: str, *, cursor) -> int:
    cursor.execute(
        """
        SELECT COALESCE(MAX(version), 0) AS ultima
        FROM prontuario_documentos
        WHERE paciente_id = %s AND tipo = %s
        """,
        (paciente_id, tipo),
    )
    row = cursor.fetchone()
    return int(row["ultima"] if row else 0) + 1


def inserir(
    *,
    paciente_id: int,
    tipo: str,
    version: int,
    status: str,
    titulo: str,
    payload: dict,
    created_by_user_id: Optional[int],
    created_by_role: Optional[str],
    cursor,
) -> int:
    cursor.execute(
        """
        INSERT INTO prontuario_documentos
            (paciente_id, tipo, version, status, titulo, payload, created_by_user_id, created_by_role)
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
        """,
        (
            paciente_id,
            tipo,
            version,
            status,
            titulo,
            json.dumps(payload, ensure_ascii=False, default=str),
            created_by_user_id,
            created_by_role,
        ),
    )
    return cursor.lastrowid


def finalizar(documento_id: int) -> int:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            """
            UPDATE prontuario_documentos SET status = 'Finalizado'
            WHERE id = %s AND deleted_at IS NULL AND status <> 'Finalizado'
            """,
            (documento_id,),
        )
        return cursor.rowcount


def excluir_logicamente(documento_id: int, usuario_id: Optional[int]) -> bool:
    """Nunca remove documento finalizado, mesmo sob concorrencia."""
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            """
            UPDATE prontuario_documentos
            SET deleted_at = NOW(), deleted_by_user_id = %s
            WHERE id = %s AND deleted_at IS NULL AND status <> 'Finalizado'
            """,
            (usuario_id, documento_id),
        )
        return cursor.rowcount > 0
