from __future__ import annotations

import json
from typing import Optional

from clinica.extensions import mysql
from clinica.utils.serializacao import carregar_json


def _dump(payload: dict) -> str:
    return json.dumps(payload, ensure_ascii=False, default=str)


def obter_base(paciente_id: int) -> Optional[dict]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            "SELECT paciente_id, payload, created_at, updated_at FROM anamnese WHERE paciente_id = %s",
            (paciente_id,),
        )
        row = cursor.fetchone()
    if row:
        row["payload"] = carregar_json(row["payload"])
    return row


def obter_versao(paciente_id: int, version: Optional[int] = None) -> Optional[dict]:
    query = """
        SELECT id, paciente_id, version, status, payload, created_at
        FROM anamnese_versions
        WHERE paciente_id = %s
    """
    params: list = [paciente_id]
    if version:
        query += " AND version = %s"
        params.append(version)
    query += " ORDER BY version DESC, created_at DESC LIMIT 1"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        row = cursor.fetchone()
    if row:
        row["payload"] = carregar_json(row["payload"])
    return row


def listar_versoes(paciente_id: int, limit: int = 50) -> list[dict]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            """
            SELECT id, paciente_id, version, status, payload, created_at
            FROM anamnese_versions
            WHERE paciente_id = %s
            ORDER BY version DESC
            LIMIT %s
            """,
            (paciente_id, limit),
        )
        rows = cursor.fetchall()
    for row in rows:
        row["payload"] = carregar_json(row["payload"])
    return rows


def salvar_base(paciente_id: int, payload: dict, *, cursor) -> None:
    cursor.execute(
        """
        INSERT INTO anamnese (paciente_id, payload) VALUES (%s, %s)
        ON DUPLICATE KEY UPDATE payload = VALUES(payload), updated_at = NOW()
        """,
        (paciente_id, _dump(payload)),
    )


def proxima_versao(paciente_id: int, *, cursor) -> int:
    cursor.execute(
        "SELECT COALESCE(MAX(version), 0) AS ultima FROM anamnese_versions WHERE paciente_id = %s",
        (paciente_id,),
    )
    row = cursor.fetchone()
    return int(row["ultima"] if row else 0) + 1


def inserir_versao(paciente_id: int, version: int, status: str, payload: dict, *, cursor) -> int:
    cursor.execute(
        """
        INSERT INTO anamnese_versions (paciente_id, version, status, payload)
        VALUES (%s, %s, %s, %s)
        """,
        (paciente_id, version, status, _dump(payload)),
    )
    return cursor.lastrowid
