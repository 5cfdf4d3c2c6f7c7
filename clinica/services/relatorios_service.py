from __future__ import annotations

import re
from collections import Counter
from datetime import date, timedelta
from typing import Optional

from clinica.domain.status import Presenca
from clinica.errors import InvalidInput, NotFound
from clinica.repositories import anamnese as anamnese_repo
from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import evolucoes as evolucoes_repo
from clinica.repositories import pacientes as pacientes_repo
from clinica.utils.serializacao import formatar_data, formatar_hora

from . import acesso_service

DIAS_PERIODO_PADRAO = 30
LIMITE_TEXTO_OBSERVACAO = 240
LIMITE_OBSERVACOES_EVOLUTIVO = 8
LIMITE_MOTIVOS_AUSENCIA = 5
LIMITE_OBSERVACOES_CLINICO = 12

REGRA_ADESAO_BOA = "ADESAO_BOA"
REGRA_MUITAS_FALTAS = "MUITAS_FALTAS"
REGRA_MUITOS_SEM_REGISTRO = "MUITOS_SEM_REGISTRO"
REGRA_SEM_EVOLUCOES_TEXTUAIS = "SEM_EVOLUCOES_TEXTUAIS"
REGRA_COM_REGISTROS_CLINICOS = "COM_REGISTROS_CLINICOS"

_DATA = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def resolver_periodo(inicio: Optional[str], fim: Optional[str], hoje: Optional[date] = None) -> tuple[str, str]:
    """Sem datas informadas, o periodo cobre os ultimos 30 dias (inclusive hoje)."""
    hoje = hoje or date.today()
    de = _data_ou_none(inicio) or (hoje - timedelta(days=DIAS_PERIODO_PADRAO - 1)).isoformat()
    ate = _data_ou_none(fim) or hoje.isoformat()
    if de > ate:
        raise InvalidInput("Periodo invalido", "INVALID_PERIOD")
    return de, ate


def _data_ou_none(valor: Optional[str]) -> Optional[str]:
    texto = (valor or "").strip()[:10]
    if not texto or not _DATA.match(texto):
        return None
    try:
        return date.fromisoformat(texto).isoformat()
    except ValueError:
        return None


def _role_canonica(acesso: acesso_service.Acesso) -> Optional[str]:
    return acesso.primary_role.value if acesso.primary_role else acesso.role


def resolver_filtro_terapeuta(acesso: acesso_service.Acesso, terapeuta_id: Optional[int]) -> Optional[int]:
    """Terapeutas sempre enxergam apenas os proprios atendimentos."""
    if acesso.is_terapeuta:
        return acesso_service.exigir_terapeuta_do_usuario(acesso)["id"]
    return terapeuta_id or None


def duracao_minutos(hora_inicio, hora_fim) -> int:
    inicio = formatar_hora(hora_inicio)
    fim = formatar_hora(hora_fim)
    if not inicio or not fim:
        return 0
    try:
        hi, mi = (int(parte) for parte in inicio[:5].split(":"))
        hf, mf = (int(parte) for parte in fim[:5].split(":"))
    except ValueError:
        return 0
    return (hf * 60 + mf) - (hi * 60 + mi)


def taxa_presenca(presentes: int, ausentes: int) -> int:
    """Percentual inteiro de presenca sobre os atendimentos com registro."""
    denominador = presentes + ausentes
    return round(100 * presentes / denominador) if denominador else 0


def _paciente_do_relatorio(paciente_id: int) -> dict:
    paciente = pacientes_repo.obter_por_id(paciente_id, incluir_excluidos=False)
    if not paciente:
        raise NotFound("Paciente nao encontrado")
    return {
        "id": paciente["id"],
        "nome": paciente["nome"],
        "cpf": paciente["cpf"],
        "data_nascimento": paciente.get("data_nascimento"),
        "convenio": paciente.get("convenio"),
    }


# --- Evolutivo ---

def texto_observacao(atendimento: dict) -> Optional[dict]:
    for origem in ("observacoes", "resumo_repasse", "motivo"):
        texto = (atendimento.get(origem) or "").strip()
        if texto:
            break
    else:
        return None

    limpo = re.sub(r"\s+", " ", texto)
    if len(limpo) > LIMITE_TEXTO_OBSERVACAO:
        limpo = f"{limpo[:LIMITE_TEXTO_OBSERVACAO]}..."
    return {"texto": limpo, "origem": origem}


def texto_evolucao(payload: dict) -> Optional[str]:
    metas = payload.get("metas")
    partes = [
        payload.get("descricao"),
        payload.get("conduta"),
        "; ".join(str(meta) for meta in metas) if isinstance(metas, list) else None,
        payload.get("titulo"),
    ]
    partes = [str(parte).strip() for parte in partes if parte and str(parte).strip()]
    return " | ".join(partes) or None


def calcular_indicadores(atendimentos: list[dict]) -> dict:
    """``atendimentos`` chega ordenado do mais recente para o mais antigo."""
    presentes = sum(1 for a in atendimentos if a["presenca"] == Presenca.PRESENTE)
    ausentes = sum(1 for a in atendimentos if a["presenca"] == Presenca.AUSENTE)
    nao_informado = sum(1 for a in atendimentos if a["presenca"] == Presenca.NAO_INFORMADO)

    duracoes = [a["duracao_min"] for a in atendimentos if a["duracao_min"] > 0]
    total_minutos = sum(duracoes)
    denominador = presentes + ausentes

    return {
        "totalAtendimentos": len(atendimentos),
        "presentes": presentes,
        "ausentes": ausentes,
        "naoInformado": nao_informado,
        "taxaPresencaPercent": round(100 * presentes / denominador, 1) if denominador else 0,
        "tempoTotalMinutos": total_minutos,
        "mediaMinutosPorSessao": round(total_minutos / len(duracoes), 1) if duracoes else 0,
        "primeiroAtendimento": atendimentos[-1]["data"] if atendimentos else None,
        "ultimoAtendimento": atendimentos[0]["data"] if atendimentos else None,
    }


def distribuir_por_terapeuta(atendimentos: list[dict]) -> list[dict]:
    grupos: dict[int, dict] = {}
    for atendimento in atendimentos:
        chave = atendimento.get("terapeuta_id") or 0
        grupo = grupos.setdefault(
            chave,
            {
                "terapeuta_id": atendimento.get("terapeuta_id"),
                "terapeuta_nome": atendimento.get("terapeuta_nome") or "N/A",
                "total": 0,
                "presentes": 0,
                "ausentes": 0,
            },
        )
        grupo["total"] += 1
        if atendimento["presenca"] == Presenca.PRESENTE:
            grupo["presentes"] += 1
        elif atendimento["presenca"] == Presenca.AUSENTE:
            grupo["ausentes"] += 1
    return list(grupos.values())


def coletar_observacoes(atendimentos: list[dict], evolucoes: list[dict]) -> list[dict]:
    observacoes = []
    for atendimento in atendimentos:
        obs = texto_observacao(atendimento)
        if obs:
            observacoes.append(
                {
                    "data": atendimento["data"],
                    "terapeuta_nome": atendimento.get("terapeuta_nome") or "Terapeuta",
                    **obs,
                }
            )

    for evolucao in evolucoes:
        texto = texto_evolucao(evolucao.get("payload") or {})
        if texto:
            observacoes.append(
                {
                    "data": evolucao["data"],
                    "terapeuta_nome": evolucao.get("terapeuta_nome") or "Terapeuta",
                    "texto": texto,
                    "origem": "evolucao",
                }
            )

    observacoes.sort(key=lambda obs: obs["data"] or "", reverse=True)
    return observacoes


def principais_motivos_ausencia(atendimentos: list[dict]) -> list[dict]:
    motivos = Counter(
        (a.get("motivo") or "").strip()
        for a in atendimentos
        if a["presenca"] == Presenca.AUSENTE and (a.get("motivo") or "").strip()
    )
    return [
        {"motivo": motivo, "count": total}
        for motivo, total in motivos.most_common(LIMITE_MOTIVOS_AUSENCIA)
    ]


def regras_disparadas(indicadores: dict, total_observacoes: int, total_evolucoes: int) -> list[str]:
    taxa = indicadores["taxaPresencaPercent"]
    total = indicadores["totalAtendimentos"]
    regras = []
    if taxa >= 85 and total >= 4:
        regras.append(REGRA_ADESAO_BOA)
    if indicadores["ausentes"] >= 3 or taxa < 70:
        regras.append(REGRA_MUITAS_FALTAS)
    if total and indicadores["naoInformado"] / total > 0.4:
        regras.append(REGRA_MUITOS_SEM_REGISTRO)
    if not total_observacoes and not total_evolucoes:
        regras.append(REGRA_SEM_EVOLUCOES_TEXTUAIS)
    if total_observacoes + total_evolucoes >= 5:
        regras.append(REGRA_COM_REGISTROS_CLINICOS)
    return regras


def resumo_automatico(indicadores: dict, total_observacoes: int, regras: list[str]) -> dict:
    taxa = indicadores["taxaPresencaPercent"]
    if taxa >= 85:
        adesao = "Adesao considerada boa no periodo, com alta taxa de presenca."
    elif taxa < 70:
        adesao = "Adesao abaixo do esperado, com presencas reduzidas."
    else:
        adesao = "Adesao moderada, com variacao na presenca."

    if indicadores["ausentes"] >= 3:
        faltas = "Houve numero elevado de faltas; investigar causas e ajustar agenda."
    else:
        faltas = "Faltas dentro do esperado."

    if total_observacoes:
        registros = f"Foram registrados {total_observacoes} apontamentos clinicos relevantes."
    else:
        registros = "Nao ha registros textuais de evolucao no periodo."

    if REGRA_MUITAS_FALTAS in regras:
        recomendacao = "Recomenda-se reforcar contato com a familia e revisar horarios."
    elif REGRA_SEM_EVOLUCOES_TEXTUAIS in regras:
        recomendacao = "Reforcar registro de observacoes clinicas para melhor acompanhamento."
    else:
        recomendacao = "Manter acompanhamento atual e revisitar metas periodicamente."

    return {
        "texto": f"{adesao} {faltas}\n{registros}\n{recomendacao}",
        "regrasDisparadas": regras,
    }


def _atendimento_do_relatorio(row: dict) -> dict:
    return {
        "id": row["id"],
        "data": formatar_data(row["data"]),
        "hora_inicio": formatar_hora(row.get("hora_inicio")),
        "hora_fim": formatar_hora(row.get("hora_fim")),
        "duracao_min": duracao_minutos(row.get("hora_inicio"), row.get("hora_fim")),
        "presenca": row["presenca"],
        "terapeuta_id": row.get("terapeuta_id"),
        "terapeuta_nome": row.get("terapeuta_nome"),
        "motivo": row.get("motivo"),
        "observacoes": row.get("observacoes"),
        "resumo_repasse": row.get("resumo_repasse"),
    }


def consolidar_evolutivo(
    acesso: acesso_service.Acesso,
    paciente_id: int,
    inicio: Optional[str] = None,
    fim: Optional[str] = None,
    terapeuta_id: Optional[int] = None,
) -> dict:
    de, ate = resolver_periodo(inicio, fim)
    acesso_service.assert_acesso_paciente(acesso, paciente_id)
    terapeuta_filtro = resolver_filtro_terapeuta(acesso, terapeuta_id)
    paciente = _paciente_do_relatorio(paciente_id)

    atendimentos = [
        _atendimento_do_relatorio(row)
        for row in atendimentos_repo.listar_para_relatorio(
            data_ini=de, data_fim=ate, paciente_id=paciente_id, terapeuta_id=terapeuta_filtro
        )
    ]
    evolucoes = [
        {
            "id": row["id"],
            "data": formatar_data(row["data"]),
            "terapeuta_id": row.get("terapeuta_id"),
            "terapeuta_nome": row.get("terapeuta_nome"),
            "payload": row.get("payload") or {},
        }
        for row in evolucoes_repo.listar_por_paciente(paciente_id, data_ini=de, data_fim=ate)
    ]

    indicadores = calcular_indicadores(atendimentos)
    observacoes = coletar_observacoes(atendimentos, evolucoes)
    regras = regras_disparadas(indicadores, len(observacoes), len(evolucoes))

    return {
        "paciente": paciente,
        "periodo": {"from": de, "to": ate},
        "filtros": {"terapeutaId": terapeuta_filtro, "role": _role_canonica(acesso)},
        "indicadores": indicadores,
        "distribuicao": {
            "porPresenca": {
                Presenca.PRESENTE.value: indicadores["presentes"],
                Presenca.AUSENTE.value: indicadores["ausentes"],
                Presenca.NAO_INFORMADO.value: indicadores["naoInformado"],
            },
            "porTerapeuta": distribuir_por_terapeuta(atendimentos),
        },
        "destaques": {
            "ultimasObservacoes": observacoes[:LIMITE_OBSERVACOES_EVOLUTIVO],
            "principaisMotivosAusencia": principais_motivos_ausencia(atendimentos),
        },
        "resumoAutomatico": resumo_automatico(indicadores, len(observacoes), regras),
        "evolucoes": evolucoes,
        "atendimentos": atendimentos,
    }


# --- Assiduidade ---

def consolidar_linhas_assiduidade(rows: list[dict]) -> list[dict]:
    por_paciente: dict[int, dict] = {}
    for row in rows:
        linha = por_paciente.setdefault(
            row["paciente_id"],
            {
                "pacienteNome": row.get("paciente_nome") or "Paciente",
                "total": 0,
                "presencas": 0,
                "faltas": 0,
                "neutros": 0,
                "ultimo": "",
                "terapeutas": [],
            },
        )
        linha["total"] += 1
        if row["presenca"] == Presenca.PRESENTE:
            linha["presencas"] += 1
        elif row["presenca"] == Presenca.AUSENTE:
            linha["faltas"] += 1
        else:
            linha["neutros"] += 1

        data = formatar_data(row["data"]) or ""
        if data > linha["ultimo"]:
            linha["ultimo"] = data
        nome = row.get("terapeuta_nome")
        if nome and nome not in linha["terapeutas"]:
            linha["terapeutas"].append(nome)

    linhas = [
        {
            "pacienteNome": linha["pacienteNome"],
            "total": linha["total"],
            "presencas": linha["presencas"],
            "faltas": linha["faltas"],
            "taxa": taxa_presenca(linha["presencas"], linha["faltas"]),
            "neutros": linha["neutros"],
            "ultimo": linha["ultimo"],
            "terapeutas": ", ".join(linha["terapeutas"]) or "-",
        }
        for linha in por_paciente.values()
    ]
    linhas.sort(key=lambda linha: (linha["taxa"], linha["pacienteNome"]))
    return linhas


def consolidar_assiduidade(
    acesso: acesso_service.Acesso,
    inicio: Optional[str] = None,
    fim: Optional[str] = None,
    terapeuta_id: Optional[int] = None,
    presenca: Optional[str] = None,
    paciente_nome: Optional[str] = None,
) -> dict:
    de, ate = resolver_periodo(inicio, fim)
    terapeuta_filtro = resolver_filtro_terapeuta(acesso, terapeuta_id)
    nome = (paciente_nome or "").strip() or None

    rows = atendimentos_repo.listar_para_relatorio(
        data_ini=de,
        data_fim=ate,
        terapeuta_id=terapeuta_filtro,
        presenca=presenca or None,
        paciente_nome=nome,
    )

    presentes = sum(1 for row in rows if row["presenca"] == Presenca.PRESENTE)
    faltas = sum(1 for row in rows if row["presenca"] == Presenca.AUSENTE)

    return {
        "periodo": {"from": de, "to": ate},
        "filtros": {
            "terapeutaId": terapeuta_filtro,
            "pacienteNome": nome,
            "presenca": presenca or None,
            "role": _role_canonica(acesso),
        },
        "resumo": {
            "total": len(rows),
            "presentes": presentes,
            "faltas": faltas,
            "semRegistro": len(rows) - presentes - faltas,
            "taxa": taxa_presenca(presentes, faltas),
        },
        "linhas": consolidar_linhas_assiduidade(rows),
    }


# --- Clinico ---

def consolidar_clinico(
    acesso: acesso_service.Acesso,
    paciente_id: int,
    inicio: Optional[str] = None,
    fim: Optional[str] = None,
    terapeuta_id: Optional[int] = None,
    version: Optional[int] = None,
) -> dict:
    acesso_service.assert_acesso_paciente(acesso, paciente_id)
    de, ate = resolver_periodo(inicio, fim)
    terapeuta_filtro = resolver_filtro_terapeuta(acesso, terapeuta_id)
    paciente = _paciente_do_relatorio(paciente_id)

    rows = atendimentos_repo.listar_para_relatorio(
        data_ini=de, data_fim=ate, paciente_id=paciente_id, terapeuta_id=terapeuta_filtro
    )
    presentes = sum(1 for row in rows if row["presenca"] == Presenca.PRESENTE)
    ausentes = sum(1 for row in rows if row["presenca"] == Presenca.AUSENTE)

    observacoes = [
        {
            "data": formatar_data(row["data"]),
            "hora_inicio": (formatar_hora(row.get("hora_inicio")) or "")[:5],
            "presenca": row["presenca"],
            "observacoes": row.get("observacoes"),
            "motivo": row.get("motivo"),
        }
        for row in rows
        if (row.get("observacoes") or "").strip() or (row.get("motivo") or "").strip()
    ][:LIMITE_OBSERVACOES_CLINICO]

    versao = anamnese_repo.obter_versao(paciente_id, version)
    anamnese = None
    if versao:
        anamnese = {
            "version": versao["version"],
            "status": versao["status"],
            "created_at": formatar_data(versao.get("created_at")),
        }

    return {
        "paciente": paciente,
        "periodo": {"from": de, "to": ate},
        "filtros": {"terapeutaId": terapeuta_filtro, "role": _role_canonica(acesso), "version": version},
        "atendimentos": {
            "total": len(rows),
            "presentes": presentes,
            "ausentes": ausentes,
            "taxaPresenca": taxa_presenca(presentes, ausentes),
            "observacoes": observacoes,
        },
        "anamnese": anamnese,
    }
