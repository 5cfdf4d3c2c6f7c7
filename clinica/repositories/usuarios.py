from __future__ import annotations

from typing import Any, Optional

from clinica.extensions import mysql

CAMPOS_PUBLICOS = "u.id, u.nome, u.email, u.role, u.ativo, u.created_at, u.updated_at"


def listar_todos(incluir_inativos: bool = True) -> list[dict]:
    query = f"SELECT {CAMPOS_PUBLICOS} FROM users u"
    if not incluir_inativos:
        query += " WHERE u.ativo = 1"
    query += " ORDER BY u.nome ASC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query)
        return cursor.fetchall()


def obter_por_id(usuario_id: int) -> Optional[dict]:
    query = f"SELECT {CAMPOS_PUBLICOS} FROM users u WHERE u.id = %s"
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (usuario_id,))
        return cursor.fetchone()


def obter_por_email(email: str, *, com_senha: bool = False) -> Optional[dict]:
    campos = CAMPOS_PUBLICOS + (", u.senha_hash" if com_senha else "")
    query = f"SELECT {campos} FROM users u WHERE u.email = %s"
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, ((email or "").strip().lower(),))
        return cursor.fetchone()


def salvar_por_email(nome: str, email: str, senha_hash: str, role: str, ativo: int = 1) -> int:
    """Cria o usuario ou atualiza o existente com o mesmo e-mail. Retorna o id."""
    query = """
        INSERT INTO users (nome, email, senha_hash, role, ativo)
        VALUES (%s, %s, %s, %s, %s)
        ON DUPLICATE KEY UPDATE
            nome = VALUES(nome),
            senha_hash = VALUES(senha_hash),
            role = VALUES(role),
            ativo = VALUES(ativo),
            id = LAST_INSERT_ID(id)
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (nome, email.strip().lower(), senha_hash, role, ativo))
        return cursor.lastrowid


def atualizar_usuario(usuario_id: int, **campos: Any) -> int:
    if not campos:
        return 0

    if "email" in campos and campos["email"]:
        campos["email"] = campos["email"].strip().lower()

    set_clause = ", ".join(f"{campo} = %s" for campo in campos)
    query = f"UPDATE users SET {set_clause} WHERE id = %s"
    params = list(campos.values()) + [usuario_id]

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.rowcount


def excluir_usuario(usuario_id: int) -> bool:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute("DELETE FROM users WHERE id = %s", (usuario_id,))
        return cursor.rowcount > 0
