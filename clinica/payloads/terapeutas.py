from pydantic import AliasChoices, Field

from . import DataOpcional, EmailOpcional, Entrada, IdOpcional, TextoOpcional


class TerapeutaFiltro(Entrada):
    id: IdOpcional = Field(default=None, gt=0)
    nome: TextoOpcional = Field(default=None, max_length=120)
    cpf: TextoOpcional = Field(default=None, max_length=20)
    especialidade: TextoOpcional = Field(default=None, max_length=80)


class TerapeutaIn(Entrada):
    nome: str = Field(min_length=1, max_length=120)
    cpf: str = Field(min_length=11, max_length=20)
    data_nascimento: DataOpcional = Field(
        default=None,
        validation_alias=AliasChoices("nascimento", "dataNascimento", "data_nascimento"),
    )
    email: EmailOpcional = None
    telefone: TextoOpcional = Field(default=None, max_length=20)
    endereco: TextoOpcional = Field(default=None, max_length=255)
    logradouro: TextoOpcional = Field(default=None, max_length=180)
    numero: TextoOpcional = Field(default=None, max_length=20)
    bairro: TextoOpcional = Field(default=None, max_length=120)
    cidade: TextoOpcional = Field(default=None, max_length=120)
    cep: TextoOpcional = Field(default=None, max_length=12)
    especialidade: TextoOpcional = Field(default=None, max_length=80)
    usuario_id: IdOpcional = None
