from __future__ import annotations

from typing import Any, Optional

from clinica.extensions import mysql

COLUNAS_EDITAVEIS = (
    "nome",
    "cpf",
    "data_nascimento",
    "email",
    "telefone",
    "endereco",
    "logradouro",
    "numero",
    "bairro",
    "cidade",
    "cep",
    "especialidade",
    "usuario_id",
)

_SELECT = """
    SELECT t.id, t.nome, t.cpf, t.data_nascimento, t.email, t.telefone,
           t.endereco, t.logradouro, t.numero, t.bairro, t.cidade, t.cep,
           t.especialidade, t.usuario_id, t.created_at, t.updated_at
    FROM terapeutas t
"""


def _sanitizar_cpf(cpf: Optional[str]) -> str:
    return "".join(filter(str.isdigit, cpf or ""))


def listar(
    *,
    terapeuta_id: Optional[int] = None,
    nome: Optional[str] = None,
    cpf: Optional[str] = None,
    especialidade: Optional[str] = None,
) -> list[dict]:
    query = _SELECT + " WHERE 1 = 1"
    params: list[Any] = []

    if terapeuta_id:
        query += " AND t.id = %s"
        params.append(terapeuta_id)
    if nome:
        query += " AND t.nome LIKE %s"
        params.append(f"%{nome}%")
    cpf_digitos = _sanitizar_cpf(cpf)
    if cpf_digitos:
        query += " AND t.cpf LIKE %s"
        params.append(f"%{cpf_digitos}%")
    if especialidade:
        query += " AND t.especialidade = %s"
        params.append(especialidade)

    query += " ORDER BY t.nome ASC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.fetchall()


def obter_por_id(terapeuta_id: int) -> Optional[dict]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(_SELECT + " WHERE t.id = %s", (terapeuta_id,))
        return cursor.fetchone()


def obter_por_usuario(usuario_id: int) -> Optional[dict]:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(_SELECT + " WHERE t.usuario_id = %s LIMIT 1", (usuario_id,))
        return cursor.fetchone()


def obter_por_cpf(cpf: str, *, ignorar_id: Optional[int] = None) -> Optional[dict]:
    query = _SELECT + " WHERE t.cpf = %s"
    params: list[Any] = [_sanitizar_cpf(cpf)]
    if ignorar_id is not None:
        query += " AND t.id <> %s"
        params.append(ignorar_id)
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.fetchone()


def criar(dados: dict) -> int:
    colunas = [coluna for coluna in COLUNAS_EDITAVEIS if coluna in dados]
    marcadores = ", ".join(["%s"] * len(colunas))
    query = f"INSERT INTO terapeutas ({', '.join(colunas)}) VALUES ({marcadores})"
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(dados[coluna] for coluna in colunas))
        return cursor.lastrowid


def atualizar(terapeuta_id: int, dados: dict) -> int:
    colunas = [coluna for coluna in COLUNAS_EDITAVEIS if coluna in dados]
    if not colunas:
        return 0
    set_clause = ", ".join(f"{coluna} = %s" for coluna in colunas)
    query = f"UPDATE terapeutas SET {set_clause} WHERE id = %s"
    params = [dados[coluna] for coluna in colunas] + [terapeuta_id]
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.rowcount


def contar_evolucoes(terapeuta_id: int, *, cursor=None) -> int:
    with mysql.cursor(cursor) as cur:
        cur.execute(
            "SELECT COUNT(*) AS total FROM evolucoes WHERE terapeuta_id = %s", (terapeuta_id,)
        )
        row = cur.fetchone()
        return int(row["total"] if row else 0)


def excluir(terapeuta_id: int, *, cursor=None) -> bool:
    """Desvincula os atendimentos e remove o terapeuta."""
    with mysql.cursor(cursor) as cur:
        cur.execute(
            "UPDATE atendimentos SET terapeuta_id = NULL WHERE terapeuta_id = %s",
            (terapeuta_id,),
        )
        cur.execute("DELETE FROM terapeutas WHERE id = %s", (terapeuta_id,))
        return cur.rowcount > 0
