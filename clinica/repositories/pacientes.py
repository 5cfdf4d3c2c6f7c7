from __future__ import annotations

from typing import Any, Iterable, Optional

from clinica.extensions import mysql

COLUNAS_EDITAVEIS = (
    "nome",
    "cpf",
    "data_nascimento",
    "convenio",
    "email",
    "nome_responsavel",
    "telefone",
    "telefone2",
    "nome_mae",
    "nome_pai",
    "sexo",
    "data_inicio",
    "foto",
    "laudo",
    "documento",
    "ativo",
)

COLUNAS_ARQUIVO = {"foto", "laudo", "documento"}

_SELECT_COM_TERAPIAS = """
    SELECT p.id, p.nome, p.cpf, p.data_nascimento, p.convenio, p.email,
           p.nome_responsavel, p.telefone, p.telefone2, p.nome_mae, p.nome_pai,
           p.sexo, p.data_inicio, p.foto, p.laudo, p.documento, p.ativo,
           p.deleted_at, p.deleted_by_user_id, p.created_at, p.updated_at,
           GROUP_CONCAT(t.nome ORDER BY t.nome SEPARATOR '||') AS terapias
    FROM pacientes p
    LEFT JOIN paciente_terapia pt ON pt.paciente_id = p.id
    LEFT JOIN terapias t ON t.id = pt.terapia_id
"""


def _sanitizar_cpf(cpf: Optional[str]) -> str:
    return "".join(filter(str.isdigit, cpf or ""))


def _com_lista_terapias(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    terapias = row.get("terapias")
    row["terapias"] = terapias.split("||") if terapias else []
    return row


def listar(
    *,
    paciente_id: Optional[int] = None,
    nome: Optional[str] = None,
    cpf: Optional[str] = None,
) -> list[dict]:
    query = _SELECT_COM_TERAPIAS + " WHERE p.deleted_at IS NULL"
    params: list[Any] = []

    if paciente_id:
        query += " AND p.id = %s"
        params.append(paciente_id)
    if nome:
        query += " AND p.nome LIKE %s"
        params.append(f"%{nome}%")
    cpf_digitos = _sanitizar_cpf(cpf)
    if cpf_digitos:
        query += " AND p.cpf LIKE %s"
        params.append(f"%{cpf_digitos}%")

    query += " GROUP BY p.id ORDER BY p.nome ASC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return [_com_lista_terapias(row) for row in cursor.fetchall()]


def obter_por_id(paciente_id: int, *, incluir_excluidos: bool = True, cursor=None) -> Optional[dict]:
    query = _SELECT_COM_TERAPIAS + " WHERE p.id = %s"
    if not incluir_excluidos:
        query += " AND p.deleted_at IS NULL"
    query += " GROUP BY p.id"

    with mysql.cursor(cursor) as cur:
        cur.execute(query, (paciente_id,))
        return _com_lista_terapias(cur.fetchone())


def obter_ativo_por_cpf(cpf: str, *, cursor=None) -> Optional[dict]:
    query = "SELECT id, nome, cpf FROM pacientes WHERE cpf = %s AND deleted_at IS NULL LIMIT 1"
    with mysql.cursor(cursor) as cur:
        cur.execute(query, (_sanitizar_cpf(cpf),))
        return cur.fetchone()


def bloquear_ativo(paciente_id: int, *, cursor) -> Optional[dict]:
    """Trava a linha do paciente ate o fim da transacao corrente."""
    cursor.execute(
        "SELECT id FROM pacientes WHERE id = %s AND deleted_at IS NULL FOR UPDATE",
        (paciente_id,),
    )
    return cursor.fetchone()


def criar(dados: dict, *, cursor=None) -> int:
    colunas = [coluna for coluna in COLUNAS_EDITAVEIS if coluna in dados]
    marcadores = ", ".join(["%s"] * len(colunas))
    query = f"INSERT INTO pacientes ({', '.join(colunas)}) VALUES ({marcadores})"
    with mysql.cursor(cursor) as cur:
        cur.execute(query, tuple(dados[coluna] for coluna in colunas))
        return cur.lastrowid


def atualizar(paciente_id: int, dados: dict, *, cursor=None) -> int:
    colunas = [coluna for coluna in COLUNAS_EDITAVEIS if coluna in dados]
    set_clause = ", ".join(f"{coluna} = %s" for coluna in colunas)
    query = (
        f"UPDATE pacientes SET {set_clause}, deleted_at = NULL, deleted_by_user_id = NULL "
        "WHERE id = %s"
    )
    params = [dados[coluna] for coluna in colunas] + [paciente_id]
    with mysql.cursor(cursor) as cur:
        cur.execute(query, tuple(params))
        return cur.rowcount


def substituir_terapias(paciente_id: int, nomes: Iterable[str], *, cursor=None) -> None:
    nomes = list(dict.fromkeys(nome for nome in nomes if nome))
    with mysql.cursor(cursor) as cur:
        cur.execute("DELETE FROM paciente_terapia WHERE paciente_id = %s", (paciente_id,))
        if not nomes:
            return

        cur.executemany(
            "INSERT IGNORE INTO terapias (nome) VALUES (%s)", [(nome,) for nome in nomes]
        )
        marcadores = ", ".join(["%s"] * len(nomes))
        cur.execute(f"SELECT id FROM terapias WHERE nome IN ({marcadores})", tuple(nomes))
        ids = [row["id"] for row in cur.fetchall()]
        cur.executemany(
            "INSERT INTO paciente_terapia (paciente_id, terapia_id) VALUES (%s, %s)",
            [(paciente_id, terapia_id) for terapia_id in ids],
        )


def definir_ativo(paciente_id: int, ativo: bool) -> bool:
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            "UPDATE pacientes SET ativo = %s WHERE id = %s AND deleted_at IS NULL",
            (1 if ativo else 0, paciente_id),
        )
        return cursor.rowcount > 0


def excluir_logicamente(paciente_id: int, usuario_id: Optional[int]) -> bool:
    query = """
        UPDATE pacientes
        SET ativo = 0, deleted_at = NOW(), deleted_by_user_id = %s
        WHERE id = %s AND deleted_at IS NULL
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (usuario_id, paciente_id))
        return cursor.rowcount > 0


def obter_arquivo(paciente_id: int, coluna: str) -> Optional[dict]:
    if coluna not in COLUNAS_ARQUIVO:
        raise ValueError(f"Coluna de arquivo invalida: {coluna}")
    query = f"SELECT id, {coluna} AS valor FROM pacientes WHERE id = %s AND deleted_at IS NULL"
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (paciente_id,))
        return cursor.fetchone()


def atualizar_arquivo(paciente_id: int, coluna: str, valor: Optional[str]) -> Optional[str]:
    """Grava a nova chave e devolve a anterior, na mesma transacao."""
    if coluna not in COLUNAS_ARQUIVO:
        raise ValueError(f"Coluna de arquivo invalida: {coluna}")
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(
            f"SELECT {coluna} AS valor FROM pacientes WHERE id = %s AND deleted_at IS NULL FOR UPDATE",
            (paciente_id,),
        )
        atual = cursor.fetchone()
        if atual is None:
            raise LookupError(paciente_id)
        cursor.execute(
            f"UPDATE pacientes SET {coluna} = %s WHERE id = %s", (valor, paciente_id)
        )
        return atual["valor"]
