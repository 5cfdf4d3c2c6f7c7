from enum import Enum
from typing import Iterable, Optional


class Permissao(str, Enum):
    PACIENTES_VIEW = "pacientes:view"
    PACIENTES_CREATE = "pacientes:create"
    PACIENTES_EDIT = "pacientes:edit"
    PACIENTES_DELETE = "pacientes:delete"

    CONSULTAS_VIEW = "consultas:view"
    CONSULTAS_CREATE = "consultas:create"
    CONSULTAS_EDIT = "consultas:edit"
    CONSULTAS_CANCEL = "consultas:cancel"
    CONSULTAS_PRESENCE = "consultas:presence"
    CONSULTAS_REPASSE_EDIT = "consultas:repasse_edit"

    PRONTUARIO_VIEW = "prontuario:view"
    PRONTUARIO_CREATE = "prontuario:create"
    PRONTUARIO_VERSION = "prontuario:version"
    PRONTUARIO_FINALIZE = "prontuario:finalize"
    PRONTUARIO_PDF = "prontuario:pdf"
    PRONTUARIO_DELETE = "prontuario:delete"

    EVOLUCOES_VIEW = "evolucoes:view"
    EVOLUCOES_CREATE = "evolucoes:create"
    EVOLUCOES_EDIT = "evolucoes:edit"
    EVOLUCOES_DELETE = "evolucoes:delete"

    RELATORIOS_VIEW = "relatorios:view"
    RELATORIOS_EXPORT = "relatorios:export"
    RELATORIOS_ADMIN_VIEW = "relatorios_admin:view"
    RELATORIOS_ADMIN_EXPORT = "relatorios_admin:export"
    RELATORIOS_CLINICOS_VIEW = "relatorios_clinicos:view"
    RELATORIOS_CLINICOS_EXPORT = "relatorios_clinicos:export"

    TERAPEUTAS_VIEW = "terapeutas:view"
    TERAPEUTAS_CREATE = "terapeutas:create"
    TERAPEUTAS_EDIT = "terapeutas:edit"
    TERAPEUTAS_EDIT_SELF = "terapeutas:edit_self"
    TERAPEUTAS_DELETE = "terapeutas:delete"

    CONFIGURACOES_MANAGE = "configuracoes:manage"

    ATENDIMENTOS_VIEW = "atendimentos:view"
    ATENDIMENTOS_CREATE = "atendimentos:create"
    ATENDIMENTOS_EDIT = "atendimentos:edit"
    ATENDIMENTOS_DELETE = "atendimentos:delete"

    @property
    def resource(self) -> str:
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        return self.value.split(":", 1)[1]

    @classmethod
    def choices(cls):
        return [permissao.value for permissao in cls]


# Chaves equivalentes: quem possui a chave da direita tambem satisfaz a da esquerda.
ALIASES: dict[Permissao, tuple[Permissao, ...]] = {
    Permissao.CONSULTAS_VIEW: (Permissao.ATENDIMENTOS_VIEW,),
    Permissao.CONSULTAS_CREATE: (Permissao.ATENDIMENTOS_CREATE,),
    Permissao.CONSULTAS_EDIT: (Permissao.ATENDIMENTOS_EDIT,),
    Permissao.CONSULTAS_CANCEL: (Permissao.ATENDIMENTOS_DELETE,),
    Permissao.CONSULTAS_PRESENCE: (Permissao.ATENDIMENTOS_EDIT,),
    Permissao.CONSULTAS_REPASSE_EDIT: (Permissao.ATENDIMENTOS_EDIT,),
    Permissao.RELATORIOS_CLINICOS_VIEW: (Permissao.RELATORIOS_VIEW,),
    Permissao.RELATORIOS_CLINICOS_EXPORT: (Permissao.RELATORIOS_EXPORT,),
    Permissao.PRONTUARIO_VERSION: (Permissao.PRONTUARIO_DELETE,),
}


class Papel(str, Enum):
    ADMIN = "ADMIN"
    ADMIN_GERAL = "ADMIN_GERAL"
    TERAPEUTA = "TERAPEUTA"
    RECEPCAO = "RECEPCAO"


ROLE_CANONICALS: dict[str, Papel] = {
    "admin": Papel.ADMIN,
    "ADMIN": Papel.ADMIN,
    "admin-geral": Papel.ADMIN_GERAL,
    "ADMIN_GERAL": Papel.ADMIN_GERAL,
    "terapeuta": Papel.TERAPEUTA,
    "TERAPEUTA": Papel.TERAPEUTA,
    "recepcao": Papel.RECEPCAO,
    "RECEPCAO": Papel.RECEPCAO,
}

ADMIN_ROLES = frozenset({Papel.ADMIN, Papel.ADMIN_GERAL})

ROLE_ADMIN_GERAL = "admin-geral"

ROLES_PADRAO = {
    "admin-geral": "Admin Geral",
    "admin": "Admin",
    "terapeuta": "Terapeuta",
    "recepcao": "Recepcao",
}

# None significa todas as permissoes do catalogo.
PERMISSOES_PADRAO_POR_ROLE: dict[str, Optional[tuple[Permissao, ...]]] = {
    "admin-geral": None,
    "admin": None,
    "recepcao": (
        Permissao.PACIENTES_VIEW,
        Permissao.PACIENTES_CREATE,
        Permissao.PACIENTES_EDIT,
        Permissao.CONSULTAS_VIEW,
        Permissao.CONSULTAS_CREATE,
        Permissao.CONSULTAS_EDIT,
        Permissao.CONSULTAS_CANCEL,
        Permissao.CONSULTAS_PRESENCE,
        Permissao.CONSULTAS_REPASSE_EDIT,
        Permissao.RELATORIOS_ADMIN_VIEW,
        Permissao.RELATORIOS_ADMIN_EXPORT,
        Permissao.TERAPEUTAS_VIEW,
    ),
    "terapeuta": (
        Permissao.PACIENTES_VIEW,
        Permissao.CONSULTAS_VIEW,
        Permissao.CONSULTAS_PRESENCE,
        Permissao.PRONTUARIO_VIEW,
        Permissao.PRONTUARIO_CREATE,
        Permissao.PRONTUARIO_VERSION,
        Permissao.PRONTUARIO_FINALIZE,
        Permissao.PRONTUARIO_PDF,
        Permissao.EVOLUCOES_VIEW,
        Permissao.EVOLUCOES_CREATE,
        Permissao.EVOLUCOES_EDIT,
        Permissao.RELATORIOS_CLINICOS_VIEW,
        Permissao.RELATORIOS_CLINICOS_EXPORT,
        Permissao.TERAPEUTAS_VIEW,
        Permissao.TERAPEUTAS_EDIT_SELF,
    ),
}


def canonizar_role(role: Optional[str]) -> Optional[Papel]:
    if not role:
        return None
    return ROLE_CANONICALS.get(role.strip())


def is_admin(role: Optional[str]) -> bool:
    return canonizar_role(role) in ADMIN_ROLES


def resolver_chaves(chaves: Iterable[Permissao]) -> set[str]:
    """
    Expande as chaves pedidas com os aliases equivalentes.
    Aceita apenas membros do enum: chaves desconhecidas falham aqui e nao no banco.
    """
    resolvidas: set[str] = set()
    for chave in chaves:
        permissao = Permissao(chave)
        resolvidas.add(permissao.value)
        resolvidas.update(alias.value for alias in ALIASES.get(permissao, ()))
    return resolvidas
