from __future__ import annotations

from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from clinica.domain.status import ArquivoTipo
from clinica.errors import NotFound
from clinica.repositories import pacientes as pacientes_repo
from clinica.storage import R2Storage, build_object_key


def eh_url_legada(valor: Optional[str]) -> bool:
    """Cadastros antigos guardam a URL publica no lugar da chave do bucket."""
    texto = (valor or "").strip().lower()
    return texto.startswith("http://") or texto.startswith("https://")


def _prefixo(paciente_id: int, kind: ArquivoTipo) -> str:
    return f"pacientes/{paciente_id}/{kind.value}"


def _arquivo_atual(paciente_id: int, kind: ArquivoTipo) -> Optional[str]:
    row = pacientes_repo.obter_arquivo(paciente_id, kind.value)
    if row is None:
        raise NotFound("Paciente nao encontrado")
    return row["valor"]


def gerar_upload(
    storage: R2Storage,
    paciente_id: int,
    kind: ArquivoTipo,
    filename: str,
    content_type: Optional[str] = None,
) -> dict:
    _arquivo_atual(paciente_id, kind)
    key = build_object_key(_prefixo(paciente_id, kind), filename)
    return {
        "key": key,
        "url": storage.signed_put_url(key, content_type),
        "expiresInSeconds": storage.expires_in,
    }


def confirmar_upload(
    storage: R2Storage,
    paciente_id: int,
    kind: ArquivoTipo,
    key: Optional[str],
) -> dict:
    """
    Grava a chave enviada (ou limpa o campo com ``None``). O objeto anterior
    e removido do bucket quando deixou de ser referenciado; falhas nessa
    limpeza nao desfazem a gravacao.
    """
    try:
        anterior = pacientes_repo.atualizar_arquivo(paciente_id, kind.value, key)
    except LookupError:
        raise NotFound("Paciente nao encontrado") from None

    if anterior and anterior != key and not eh_url_legada(anterior):
        try:
            storage.delete_object(anterior)
        except (BotoCoreError, ClientError) as exc:
            current_app.logger.warning(
                "Nao foi possivel remover o objeto anterior %s do paciente %s: %s",
                anterior,
                paciente_id,
                exc,
            )

    return {"ok": True}


def url_de_leitura(storage: R2Storage, paciente_id: int, kind: ArquivoTipo) -> dict:
    key = _arquivo_atual(paciente_id, kind)
    if not key:
        return {"url": None, "key": None}
    if eh_url_legada(key):
        return {"url": key, "key": key}
    return {
        "url": storage.signed_get_url(key),
        "key": key,
        "expiresInSeconds": storage.expires_in,
    }
