from __future__ import annotations

import re
from typing import Any, Optional

from flask import current_app

from clinica.database import is_unique_violation
from clinica.domain.status import AnamneseStatus
from clinica.errors import NotFound
from clinica.extensions import mysql
from clinica.repositories import anamnese as anamnese_repo
from clinica.repositories import pacientes as pacientes_repo

MAX_TENTATIVAS_VERSAO = 3
LIMITE_VERSOES_PADRAO = 50
LIMITE_VERSOES_MAXIMO = 200

CAMPOS_BOOLEANOS = ("possuiDiagnostico", "fezTerapia", "gravidezPlanejada")
CAMPOS_DATA = ("dataEntrevista",)

CAMPOS = (
    "entrevistaPor",
    "dataEntrevista",
    "possuiDiagnostico",
    "diagnostico",
    "laudoDiagnostico",
    "medicoAcompanhante",
    "comorbidadesFamiliares",
    "quemPercebeu",
    "sinaisPercebidos",
    "idadeDiagnostico",
    "percepcaoFamilia",
    "fezTerapia",
    "terapias",
    "frequencia",
    "atividadesExtras",
    "gravidezPlanejada",
    "intercorrenciasGestacionais",
    "usoMedicamentos",
    "tipoParto",
    "intercorrenciasParto",
    "marcosMotores",
    "linguagem",
    "comunicacao",
    "escola",
    "serie",
    "professor",
    "acompanhanteEscolar",
    "observacoesEscolares",
    "frustracoes",
    "humor",
    "estereotipias",
    "autoagressao",
    "heteroagressao",
    "seletividadeAlimentar",
    "rotinaSono",
    "medicamentosUsoAnterior",
    "medicamentosUsoAtual",
    "dificuldadesFamilia",
    "expectativasTerapia",
)

_VERDADEIROS = {"1", "true", "sim", "yes", "on"}
_FALSOS = {"0", "false", "nao", "não", "no", "off"}
_DATA = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def _snake(campo: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", campo).lower()


def _ler(corpo: dict, campo: str):
    if corpo.get(campo) is not None:
        return corpo[campo]
    return corpo.get(_snake(campo))


def texto_ou_none(valor) -> Optional[str]:
    if valor is None:
        return None
    texto = str(valor).strip()
    return texto or None


def booleano_ou_none(valor) -> Optional[bool]:
    if isinstance(valor, bool):
        return valor
    texto = texto_ou_none(valor)
    if texto is None:
        return None
    texto = texto.lower()
    if texto in _VERDADEIROS:
        return True
    if texto in _FALSOS:
        return False
    return None


def data_ou_none(valor) -> Optional[str]:
    texto = texto_ou_none(valor)
    if texto is None:
        return None
    texto = texto[:10]
    return texto if _DATA.match(texto) else None


def montar_payload(paciente_id: int, corpo: dict) -> dict[str, Any]:
    """Somente os campos conhecidos do questionario sao gravados."""
    payload: dict[str, Any] = {"paciente_id": paciente_id}
    for campo in CAMPOS:
        valor = _ler(corpo, campo)
        if campo in CAMPOS_BOOLEANOS:
            payload[campo] = booleano_ou_none(valor)
        elif campo in CAMPOS_DATA:
            payload[campo] = data_ou_none(valor)
        else:
            payload[campo] = texto_ou_none(valor)
    return payload


def normalizar_status(valor: Optional[str]) -> str:
    if valor == AnamneseStatus.FINALIZADA:
        return AnamneseStatus.FINALIZADA.value
    return AnamneseStatus.RASCUNHO.value


def assert_paciente_existe(paciente_id: int) -> None:
    if not pacientes_repo.obter_por_id(paciente_id, incluir_excluidos=False):
        raise NotFound("Paciente nao encontrado")


def salvar(paciente_id: int, corpo: dict, status: Optional[str] = None) -> dict:
    """Atualiza a anamnese corrente e registra uma nova versao."""
    assert_paciente_existe(paciente_id)
    status = normalizar_status(status)
    payload = montar_payload(paciente_id, corpo)

    for tentativa in range(1, MAX_TENTATIVAS_VERSAO + 1):
        try:
            with mysql.get_cursor() as (_, cursor):
                anamnese_repo.salvar_base(paciente_id, payload, cursor=cursor)
                versao = anamnese_repo.proxima_versao(paciente_id, cursor=cursor)
                anamnese_repo.inserir_versao(paciente_id, versao, status, payload, cursor=cursor)
            break
        except Exception as exc:
            if is_unique_violation(exc) and tentativa < MAX_TENTATIVAS_VERSAO:
                current_app.logger.warning(
                    "Versao de anamnese em disputa (paciente %s); tentativa %s.", paciente_id, tentativa
                )
                continue
            raise

    salva = anamnese_repo.obter_versao(paciente_id, versao)
    return dict(
        payload,
        version=versao,
        status=status,
        created_at=salva["created_at"] if salva else None,
        paciente_id=paciente_id,
    )


def obter(paciente_id: int, version: Optional[int] = None) -> dict:
    """Versao pedida (ou a mais recente); sem versoes, cai na anamnese base."""
    versao = anamnese_repo.obter_versao(paciente_id, version)
    if versao:
        return dict(
            versao["payload"],
            version=versao["version"],
            status=versao["status"],
            created_at=versao["created_at"],
            paciente_id=paciente_id,
        )

    base = anamnese_repo.obter_base(paciente_id)
    if not base:
        raise NotFound("Anamnese nao encontrada")
    return dict(
        base["payload"],
        paciente_id=paciente_id,
        created_at=base["created_at"],
        updated_at=base["updated_at"],
    )


def limite_versoes(valor) -> int:
    try:
        limite = int(valor)
    except (TypeError, ValueError):
        return LIMITE_VERSOES_PADRAO
    if limite <= 0:
        return LIMITE_VERSOES_PADRAO
    return min(limite, LIMITE_VERSOES_MAXIMO)


def listar_versoes(paciente_id: int, limite=None) -> list[dict]:
    assert_paciente_existe(paciente_id)
    return anamnese_repo.listar_versoes(paciente_id, limite_versoes(limite))
