from pydantic import Field

from . import Entrada, TextoOpcional


class AnamneseMeta(Entrada):
    """Campos de controle; as respostas do questionario seguem no corpo bruto."""

    paciente_id: int = Field(gt=0)
    status: TextoOpcional = None


class AnamneseStatusIn(Entrada):
    status: TextoOpcional = None


class AnamneseVersaoFiltro(Entrada):
    version: int | None = Field(default=None, gt=0)


class AnamneseVersoesFiltro(Entrada):
    limit: TextoOpcional = None
