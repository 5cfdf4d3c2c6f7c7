from __future__ import annotations

from typing import Iterable

from clinica.extensions import mysql


def listar_chaves_da_role(role: str) -> set[str]:
    query = """
        SELECT p.resource, p.action
        FROM role_permissions rp
        JOIN permissions p ON p.id = rp.permission_id
        WHERE rp.role = %s
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (role,))
        return {f"{row['resource']}:{row['action']}" for row in cursor.fetchall()}


def listar_permissoes() -> list[dict]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            "SELECT id, resource, action FROM permissions ORDER BY resource ASC, action ASC"
        )
        return cursor.fetchall()


def listar_roles() -> list[dict]:
    """Roles cadastradas somadas as roles em uso por algum usuario."""
    query = """
        SELECT slug, nome FROM roles
        UNION
        SELECT DISTINCT u.role AS slug, u.role AS nome
        FROM users u
        WHERE u.role NOT IN (SELECT slug FROM roles)
        ORDER BY slug ASC
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query)
        return cursor.fetchall()


def role_existe(role: str) -> bool:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute("SELECT 1 FROM roles WHERE slug = %s LIMIT 1", (role,))
        return cursor.fetchone() is not None


def listar_ids_da_role(role: str) -> list[int]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            "SELECT permission_id FROM role_permissions WHERE role = %s ORDER BY permission_id",
            (role,),
        )
        return [row["permission_id"] for row in cursor.fetchall()]


def substituir_permissoes_da_role(role: str, permission_ids: Iterable[int]) -> list[int]:
    ids = sorted(set(permission_ids))
    with mysql.get_cursor() as (_, cursor):
        if ids:
            marcadores = ", ".join(["%s"] * len(ids))
            cursor.execute(
                f"SELECT id FROM permissions WHERE id IN ({marcadores})", tuple(ids)
            )
            ids = [row["id"] for row in cursor.fetchall()]

        cursor.execute("DELETE FROM role_permissions WHERE role = %s", (role,))
        if ids:
            cursor.executemany(
                "INSERT INTO role_permissions (role, permission_id) VALUES (%s, %s)",
                [(role, permission_id) for permission_id in ids],
            )
    return ids


def listar_todos_ids() -> list[int]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute("SELECT id FROM permissions ORDER BY id")
        return [row["id"] for row in cursor.fetchall()]
