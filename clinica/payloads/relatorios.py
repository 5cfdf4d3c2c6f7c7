from pydantic import Field

from . import Entrada, IdOpcional, TextoOpcional


class PeriodoFiltro(Entrada):
    from_: TextoOpcional = Field(default=None, alias="from")
    to: TextoOpcional = None
    terapeuta_id: IdOpcional = Field(default=None, gt=0)


class EvolutivoFiltro(PeriodoFiltro):
    paciente_id: int = Field(gt=0)


class ClinicoFiltro(PeriodoFiltro):
    paciente_id: int = Field(gt=0)
    version: IdOpcional = Field(default=None, gt=0)


class AssiduidadeFiltro(PeriodoFiltro):
    presenca: TextoOpcional = None
    paciente_nome: TextoOpcional = Field(default=None, max_length=120)
