from __future__ import annotations

from typing import Optional

from clinica.extensions import mysql


def registrar(
    *,
    user_id: Optional[int],
    user_email: Optional[str],
    ip_origem: Optional[str],
    user_agent: Optional[str],
    browser: Optional[str],
    status: str,
) -> int:
    query = """
        INSERT INTO access_logs (user_id, user_email, ip_origem, user_agent, browser, status)
        VALUES (%s, %s, %s, %s, %s, %s)
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            query,
            (user_id, user_email, ip_origem, (user_agent or "")[:512], browser, status),
        )
        return cursor.lastrowid


def listar(status: Optional[str] = None, limit: int = 100) -> list[dict]:
    query = """
        SELECT l.id, l.user_id, l.user_email, l.ip_origem, l.user_agent,
               l.browser, l.status, l.created_at, u.nome AS user_nome
        FROM access_logs l
        LEFT JOIN users u ON u.id = l.user_id
    """
    params: list = []
    if status:
        query += " WHERE l.status = %s"
        params.append(status)
    query += " ORDER BY l.created_at DESC, l.id DESC LIMIT %s"
    params.append(limit)

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.fetchall()
