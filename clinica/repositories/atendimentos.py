from __future__ import annotations

from typing import Any, Optional

from clinica.extensions import mysql

COLUNAS_EDITAVEIS = (
    "paciente_id",
    "terapeuta_id",
    "data",
    "hora_inicio",
    "hora_fim",
    "turno",
    "periodo_inicio",
    "periodo_fim",
    "presenca",
    "realizado",
    "motivo",
    "observacoes",
    "status_repasse",
    "resumo_repasse",
)

_SELECT = """
    SELECT a.id, a.paciente_id, p.nome AS paciente_nome, a.terapeuta_id,
           t.nome AS terapeuta_nome, a.data, a.hora_inicio, a.hora_fim, a.turno,
           a.periodo_inicio, a.periodo_fim, a.presenca, a.realizado, a.motivo,
           a.observacoes, a.status_repasse, a.resumo_repasse, a.deleted_at,
           a.deleted_by_user_id, a.created_at, a.updated_at
    FROM atendimentos a
    JOIN pacientes p ON p.id = a.paciente_id
    LEFT JOIN terapeutas t ON t.id = a.terapeuta_id
"""


def listar(
    *,
    paciente_id: Optional[int] = None,
    terapeuta_id: Optional[int] = None,
    data_ini: Optional[str] = None,
    data_fim: Optional[str] = None,
) -> list[dict]:
    query = _SELECT + " WHERE a.deleted_at IS NULL AND p.deleted_at IS NULL"
    params: list[Any] = []

    if paciente_id:
        query += " AND a.paciente_id = %s"
        params.append(paciente_id)
    if terapeuta_id:
        query += " AND a.terapeuta_id = %s"
        params.append(terapeuta_id)
    if data_ini:
        query += " AND a.data >= %s"
        params.append(data_ini)
    if data_fim:
        query += " AND a.data <= %s"
        params.append(data_fim)

    query += " ORDER BY a.data DESC, a.hora_inicio DESC, a.id DESC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.fetchall()


def obter_por_id(atendimento_id: int, *, incluir_excluidos: bool = True, cursor=None) -> Optional[dict]:
    query = _SELECT + " WHERE a.id = %s"
    if not incluir_excluidos:
        query += " AND a.deleted_at IS NULL"
    with mysql.cursor(cursor) as cur:
        cur.execute(query, (atendimento_id,))
        return cur.fetchone()


def buscar_conflito(
    paciente_id: int,
    data: str,
    hora_inicio: str,
    hora_fim: str,
    *,
    ignorar_id: Optional[int] = None,
    cursor=None,
) -> Optional[dict]:
    """Primeiro atendimento ativo do paciente cujo intervalo cruza [inicio, fim)."""
    query = """
        SELECT id, data, hora_inicio, hora_fim
        FROM atendimentos
        WHERE paciente_id = %s
          AND data = %s
          AND deleted_at IS NULL
          AND hora_fim > %s
          AND hora_inicio < %s
    """
    params: list[Any] = [paciente_id, data, hora_inicio, hora_fim]
    if ignorar_id is not None:
        query += " AND id <> %s"
        params.append(ignorar_id)
    query += " LIMIT 1"

    with mysql.cursor(cursor) as cur:
        cur.execute(query, tuple(params))
        return cur.fetchone()


def criar(dados: dict, *, cursor=None) -> int:
    colunas = [coluna for coluna in COLUNAS_EDITAVEIS if coluna in dados]
    marcadores = ", ".join(["%s"] * len(colunas))
    query = f"INSERT INTO atendimentos ({', '.join(colunas)}) VALUES ({marcadores})"
    with mysql.cursor(cursor) as cur:
        cur.execute(query, tuple(dados[coluna] for coluna in colunas))
        return cur.lastrowid


def atualizar(atendimento_id: int, dados: dict, *, cursor=None) -> int:
    colunas = [coluna for coluna in COLUNAS_EDITAVEIS if coluna in dados]
    set_clause = ", ".join(f"{coluna} = %s" for coluna in colunas)
    query = f"UPDATE atendimentos SET {set_clause} WHERE id = %s AND deleted_at IS NULL"
    params = [dados[coluna] for coluna in colunas] + [atendimento_id]
    with mysql.cursor(cursor) as cur:
        cur.execute(query, tuple(params))
        return cur.rowcount


def excluir_logicamente(atendimento_id: int, usuario_id: Optional[int]) -> bool:
    query = """
        UPDATE atendimentos
        SET deleted_at = NOW(), deleted_by_user_id = %s
        WHERE id = %s AND deleted_at IS NULL
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (usuario_id, atendimento_id))
        return cursor.rowcount > 0


def excluir_dia_da_serie(
    *,
    paciente_id: int,
    terapeuta_id: Optional[int],
    hora_inicio: str,
    hora_fim: str,
    turno: str,
    periodo_inicio: str,
    periodo_fim: str,
    dia_semana: int,
    usuario_id: Optional[int],
) -> int:
    """
    Remove (logicamente) os atendimentos ainda planejados de um dia da semana
    dentro do periodo. Faltas registradas e atendimentos realizados ficam.
    ``dia_semana`` usa 0 = domingo; DAYOFWEEK do MySQL usa 1 = domingo.
    """
    query = """
        UPDATE atendimentos
        SET deleted_at = NOW(), deleted_by_user_id = %s
        WHERE paciente_id = %s
          AND hora_inicio = %s
          AND hora_fim = %s
          AND turno = %s
          AND data BETWEEN %s AND %s
          AND DAYOFWEEK(data) = %s
          AND presenca <> 'Ausente'
          AND realizado = 0
          AND deleted_at IS NULL
    """
    params: list[Any] = [
        usuario_id,
        paciente_id,
        hora_inicio,
        hora_fim,
        turno,
        periodo_inicio,
        periodo_fim,
        dia_semana + 1,
    ]
    if terapeuta_id:
        query += " AND terapeuta_id = %s"
        params.append(terapeuta_id)

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.rowcount


def existe_vinculo(terapeuta_id: int, paciente_id: int) -> bool:
    query = """
        SELECT 1 FROM atendimentos
        WHERE terapeuta_id = %s AND paciente_id = %s AND deleted_at IS NULL
        LIMIT 1
    """
    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, (terapeuta_id, paciente_id))
        return cursor.fetchone() is not None


def listar_para_relatorio(
    *,
    data_ini: str,
    data_fim: str,
    paciente_id: Optional[int] = None,
    terapeuta_id: Optional[int] = None,
    presenca: Optional[str] = None,
    paciente_nome: Optional[str] = None,
) -> list[dict]:
    query = _SELECT + """
        WHERE a.deleted_at IS NULL
          AND p.deleted_at IS NULL
          AND a.data >= %s
          AND a.data <= %s
    """
    params: list[Any] = [data_ini, data_fim]
    if paciente_id:
        query += " AND a.paciente_id = %s"
        params.append(paciente_id)
    if terapeuta_id:
        query += " AND a.terapeuta_id = %s"
        params.append(terapeuta_id)
    if presenca:
        query += " AND a.presenca = %s"
        params.append(presenca)
    if paciente_nome:
        query += " AND p.nome LIKE %s"
        params.append(f"%{paciente_nome}%")

    query += " ORDER BY a.data DESC, a.hora_inicio DESC, a.id DESC"

    with mysql.get_cursor() as (_, cursor):
        cursor.execute(query, tuple(params))
        return cursor.fetchall()
