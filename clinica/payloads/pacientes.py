from typing import Union

from pydantic import AliasChoices, Field

from clinica.domain.status import ArquivoTipo

from . import DataOpcional, EmailOpcional, Entrada, IdOpcional, TextoOpcional


class PacienteFiltro(Entrada):
    id: IdOpcional = Field(default=None, gt=0)
    nome: TextoOpcional = Field(default=None, max_length=120)
    cpf: TextoOpcional = Field(default=None, max_length=20)


class PacienteIn(Entrada):
    nome: str = Field(default="", max_length=120)
    cpf: str = Field(default="", max_length=20)
    data_nascimento: DataOpcional = Field(
        default=None,
        validation_alias=AliasChoices("nascimento", "dataNascimento", "data_nascimento"),
    )
    convenio: TextoOpcional = None
    email: EmailOpcional = None
    nome_responsavel: TextoOpcional = Field(default=None, max_length=255)
    telefone: TextoOpcional = Field(default=None, max_length=20)
    telefone2: TextoOpcional = Field(default=None, max_length=20)
    nome_mae: TextoOpcional = Field(default=None, max_length=255)
    nome_pai: TextoOpcional = Field(default=None, max_length=255)
    sexo: TextoOpcional = Field(default=None, max_length=20)
    data_inicio: DataOpcional = None
    foto: TextoOpcional = Field(
        default=None, validation_alias=AliasChoices("fotoAtual", "foto")
    )
    laudo: TextoOpcional = Field(
        default=None, validation_alias=AliasChoices("laudoAtual", "laudo")
    )
    documento: TextoOpcional = Field(
        default=None, validation_alias=AliasChoices("documentoAtual", "documento")
    )
    ativo: Union[bool, int, str, None] = None
    terapias: list[str] = Field(default_factory=list)
    terapia: Union[str, list[str], None] = None


class PacienteAtivoIn(Entrada):
    ativo: bool


class ArquivoPresignIn(Entrada):
    kind: ArquivoTipo
    filename: str = Field(min_length=1, max_length=200)
    content_type: TextoOpcional = Field(default=None, max_length=120)


class ArquivoCommitIn(Entrada):
    kind: ArquivoTipo
    key: TextoOpcional = Field(default=None, max_length=512)


class ArquivoLeituraFiltro(Entrada):
    kind: ArquivoTipo
