from datetime import date
from typing import Annotated, Optional, Type, TypeVar

from flask import request
from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, ValidationError
from pydantic.alias_generators import to_camel

from clinica.errors import AppError, detalhes_validacao

M = TypeVar("M", bound=BaseModel)


def _vazio_para_none(valor):
    if isinstance(valor, str) and not valor.strip():
        return None
    return valor


TextoOpcional = Annotated[Optional[str], BeforeValidator(_vazio_para_none)]
DataOpcional = Annotated[Optional[date], BeforeValidator(_vazio_para_none)]
IdOpcional = Annotated[Optional[int], BeforeValidator(_vazio_para_none)]
EmailOpcional = Annotated[Optional[EmailStr], BeforeValidator(_vazio_para_none)]


class Entrada(BaseModel):
    """Base dos payloads: aceita chaves em camelCase ou snake_case."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


def parse_body(model: Type[M]) -> M:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    return model.model_validate(data)


def parse_query(model: Type[M]) -> M:
    try:
        return model.model_validate(request.args.to_dict())
    except ValidationError as exc:
        raise AppError(
            "Filtro invalido", 400, "VALIDATION_ERROR", details=detalhes_validacao(exc)
        ) from exc
