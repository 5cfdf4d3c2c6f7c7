from typing import Optional

from pydantic import EmailStr, Field

from . import Entrada, TextoOpcional


class LoginIn(Entrada):
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)


class UsuarioCreateIn(Entrada):
    nome: str = Field(min_length=1, max_length=120)
    email: EmailStr
    senha: str = Field(min_length=8, max_length=72)
    role: str = Field(min_length=1, max_length=32)


class UsuarioUpdateIn(Entrada):
    nome: str = Field(min_length=1, max_length=120)
    email: EmailStr
    role: str = Field(min_length=1, max_length=32)
    senha: Optional[str] = Field(default=None, min_length=8, max_length=72)
    ativo: Optional[bool] = None


class RolePermissoesIn(Entrada):
    permissions: list[int] = Field(default_factory=list)


class LogsFiltro(Entrada):
    status: TextoOpcional = None
    limit: int = Field(default=100, ge=1, le=500)
