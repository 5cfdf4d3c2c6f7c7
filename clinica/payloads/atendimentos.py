from typing import Annotated, Optional

from pydantic import Field

from . import Entrada, IdOpcional, TextoOpcional


class AtendimentoFiltro(Entrada):
    paciente_id: IdOpcional = Field(default=None, gt=0)
    terapeuta_id: IdOpcional = Field(default=None, gt=0)
    data_ini: TextoOpcional = None
    data_fim: TextoOpcional = None


class AtendimentoIn(Entrada):
    paciente_id: int = Field(gt=0)
    terapeuta_id: int = Field(gt=0)
    data: str = Field(min_length=1, max_length=10)
    hora_inicio: str = Field(min_length=1, max_length=8)
    hora_fim: str = Field(min_length=1, max_length=8)
    turno: TextoOpcional = None
    periodo_inicio: TextoOpcional = None
    periodo_fim: TextoOpcional = None
    presenca: TextoOpcional = None
    motivo: TextoOpcional = Field(default=None, max_length=255)
    observacoes: TextoOpcional = None
    status_repasse: TextoOpcional = Field(default=None, max_length=30)
    resumo_repasse: TextoOpcional = None


class RecorrenteIn(Entrada):
    paciente_id: int = Field(gt=0)
    terapeuta_id: int = Field(gt=0)
    hora_inicio: str = Field(min_length=1, max_length=8)
    hora_fim: str = Field(min_length=1, max_length=8)
    turno: TextoOpcional = None
    periodo_inicio: str = Field(min_length=10, max_length=10)
    periodo_fim: str = Field(min_length=10, max_length=10)
    presenca: TextoOpcional = None
    motivo: TextoOpcional = Field(default=None, max_length=255)
    observacoes: TextoOpcional = None
    # 0 = domingo ... 6 = sabado
    dias_semana: list[Annotated[int, Field(ge=0, le=6)]] = Field(min_length=1)


class ExcluirDiaIn(Entrada):
    paciente_id: int = Field(gt=0)
    terapeuta_id: Optional[int] = Field(default=None, gt=0)
    hora_inicio: str = Field(min_length=1, max_length=8)
    hora_fim: str = Field(min_length=1, max_length=8)
    turno: TextoOpcional = None
    periodo_inicio: str = Field(min_length=10, max_length=10)
    periodo_fim: str = Field(min_length=10, max_length=10)
    dia_semana: int = Field(ge=0, le=6)
