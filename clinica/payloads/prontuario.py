from typing import Any, Optional

from pydantic import Field

from . import Entrada, IdOpcional, TextoOpcional


class DocumentoIn(Entrada):
    tipo: str = Field(min_length=1, max_length=40)
    status: TextoOpcional = None
    titulo: TextoOpcional = Field(default=None, max_length=180)
    payload: dict[str, Any] = Field(default_factory=dict)


class DocumentoFiltro(Entrada):
    tipo: TextoOpcional = None


class EvolucaoIn(Entrada):
    data: TextoOpcional = None
    atendimento_id: IdOpcional = Field(default=None, gt=0)
    terapeuta_id: IdOpcional = Field(default=None, gt=0)
    payload: dict[str, Any] = Field(default_factory=dict)


class EvolucaoUpdateIn(Entrada):
    data: TextoOpcional = None
    atendimento_id: IdOpcional = Field(default=None, gt=0)
    terapeuta_id: IdOpcional = Field(default=None, gt=0)
    payload: Optional[dict[str, Any]] = None
