from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from clinica.domain.permissoes import ADMIN_ROLES, Papel, canonizar_role, resolver_chaves
from clinica.errors import AppError, Forbidden, InvalidInput
from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import permissoes as permissoes_repo
from clinica.repositories import terapeutas as terapeutas_repo
from clinica.repositories import usuarios as usuarios_repo


@dataclass
class Acesso:
    exists: bool
    usuario: Optional[dict] = None
    roles: list[str] = field(default_factory=list)
    primary_role: Optional[Papel] = None
    permissoes: set[str] = field(default_factory=set)

    @property
    def user_id(self) -> Optional[int]:
        return self.usuario["id"] if self.usuario else None

    @property
    def role(self) -> Optional[str]:
        return self.usuario["role"] if self.usuario else None

    @property
    def is_admin(self) -> bool:
        return self.primary_role in ADMIN_ROLES

    @property
    def is_terapeuta(self) -> bool:
        return self.primary_role == Papel.TERAPEUTA

    def to_dict(self) -> dict:
        return {
            "role": self.primary_role.value if self.primary_role else self.role,
            "roles": self.roles,
            "permissions": sorted(self.permissoes),
            "user": self.usuario,
        }


@dataclass
class AcessoPaciente:
    user_id: int
    acesso: Acesso
    terapeuta_id: Optional[int]


def carregar_acesso(user_id: int) -> Acesso:
    usuario = usuarios_repo.obter_por_id(user_id)
    if not usuario or not usuario.get("ativo", 1):
        return Acesso(exists=False)

    role = usuario["role"]
    canonica = canonizar_role(role)
    roles = [canonica.value] if canonica else []
    if role not in roles:
        roles.append(role)

    return Acesso(
        exists=True,
        usuario={"id": usuario["id"], "nome": usuario["nome"], "email": usuario["email"], "role": role},
        roles=roles,
        primary_role=canonica,
        permissoes=permissoes_repo.listar_chaves_da_role(role),
    )


def tem_permissao(acesso: Acesso, chaves: Iterable) -> bool:
    if not acesso.exists:
        return False
    if acesso.is_admin:
        return True
    return bool(resolver_chaves(chaves) & acesso.permissoes)


def assert_permissao(acesso: Acesso, chaves: Iterable) -> None:
    if not acesso.exists:
        raise AppError("Nao autenticado", 401, "UNAUTHORIZED")
    if not tem_permissao(acesso, chaves):
        raise Forbidden()


def terapeuta_do_usuario(user_id: int) -> Optional[dict]:
    return terapeutas_repo.obter_por_usuario(user_id)


def exigir_terapeuta_do_usuario(acesso: Acesso) -> dict:
    terapeuta = terapeuta_do_usuario(acesso.user_id)
    if not terapeuta:
        raise Forbidden("Terapeuta nao encontrado")
    return terapeuta


def assert_acesso_paciente(acesso: Acesso, paciente_id) -> AcessoPaciente:
    """
    Admins acessam qualquer paciente. Terapeutas so acessam pacientes com
    quem tenham atendimento ativo. As demais roles sao recusadas.
    """
    if not acesso or not acesso.exists or not acesso.user_id:
        raise AppError("Nao autenticado", 401, "UNAUTHORIZED")

    try:
        paciente_id = int(paciente_id)
    except (TypeError, ValueError):
        raise InvalidInput("Paciente invalido") from None
    if paciente_id <= 0:
        raise InvalidInput("Paciente invalido")

    if acesso.is_admin:
        return AcessoPaciente(user_id=acesso.user_id, acesso=acesso, terapeuta_id=None)

    if not acesso.is_terapeuta:
        raise Forbidden()

    terapeuta = terapeuta_do_usuario(acesso.user_id)
    if not terapeuta:
        raise Forbidden("Terapeuta sem vinculo")

    if not atendimentos_repo.existe_vinculo(terapeuta["id"], paciente_id):
        raise Forbidden("Acesso negado ao paciente")

    return AcessoPaciente(user_id=acesso.user_id, acesso=acesso, terapeuta_id=terapeuta["id"])
