from __future__ import annotations

from typing import Iterable, Optional

from flask import current_app

from clinica.database import is_unique_violation
from clinica.domain.permissoes import ROLE_ADMIN_GERAL
from clinica.errors import AppError, InvalidInput, NotFound
from clinica.payloads.usuarios import UsuarioCreateIn, UsuarioUpdateIn
from clinica.repositories import acessos as acessos_repo
from clinica.repositories import permissoes as permissoes_repo
from clinica.repositories import usuarios as usuarios_repo
from clinica.utils.security import hash_password, is_legacy_hash, verify_password

STATUS_SUCESSO = "SUCESSO"
STATUS_FALHA = "FALHA"

# A ordem importa: Edge e Opera tambem anunciam "Chrome" no user agent.
_NAVEGADORES = (
    ("Edg/", "Edge"),
    ("OPR/", "Opera"),
    ("Opera", "Opera"),
    ("Firefox/", "Firefox"),
    ("Chrome/", "Chrome"),
    ("Safari/", "Safari"),
)


def detectar_navegador(user_agent: Optional[str]) -> str:
    for marcador, nome in _NAVEGADORES:
        if marcador in (user_agent or ""):
            return nome
    return "Desconhecido"


def _assert_role_valida(role: str) -> str:
    role = role.strip()
    if not permissoes_repo.role_existe(role):
        raise InvalidInput("Role invalida", "INVALID_ROLE")
    return role


def listar() -> list[dict]:
    return usuarios_repo.listar_todos()


def criar(dados: UsuarioCreateIn) -> dict:
    """Cria o usuario; se o e-mail ja existir, o cadastro e reativado e sobrescrito."""
    role = _assert_role_valida(dados.role)
    usuario_id = usuarios_repo.salvar_por_email(
        nome=dados.nome,
        email=dados.email,
        senha_hash=hash_password(dados.senha),
        role=role,
    )
    return {"id": usuario_id, "email": dados.email.lower(), "role": role}


def atualizar(usuario_id: int, dados: UsuarioUpdateIn) -> dict:
    if not usuarios_repo.obter_por_id(usuario_id):
        raise NotFound("Usuario nao encontrado")
    role = _assert_role_valida(dados.role)

    campos = {"nome": dados.nome, "email": dados.email, "role": role}
    if dados.senha:
        campos["senha_hash"] = hash_password(dados.senha)
    if dados.ativo is not None:
        campos["ativo"] = 1 if dados.ativo else 0

    try:
        usuarios_repo.atualizar_usuario(usuario_id, **campos)
    except Exception as exc:
        if is_unique_violation(exc):
            raise AppError("E-mail ja cadastrado", 409, "CONFLICT") from exc
        raise
    return {"ok": True, "id": usuario_id, "email": dados.email.lower(), "role": role}


def excluir(usuario_id: int, solicitante_id: int) -> dict:
    if usuario_id == solicitante_id:
        raise InvalidInput("Nao e possivel excluir o proprio usuario", "SELF_DELETE")
    if not usuarios_repo.excluir_usuario(usuario_id):
        raise NotFound("Usuario nao encontrado")
    return {"ok": True, "id": usuario_id}


def listar_roles() -> list[dict]:
    return [{"nome": row["slug"], "descricao": row["nome"]} for row in permissoes_repo.listar_roles()]


def listar_permissoes() -> list[dict]:
    return permissoes_repo.listar_permissoes()


def permissoes_da_role(role: str) -> dict:
    ids = set(permissoes_repo.listar_ids_da_role(role))
    return {
        "role": {"nome": role},
        "permissions": [p for p in permissoes_repo.listar_permissoes() if p["id"] in ids],
    }


def atualizar_permissoes_da_role(role: str, permission_ids: Iterable[int]) -> dict:
    """admin-geral sempre recebe o catalogo completo, independente do pedido."""
    if role == ROLE_ADMIN_GERAL:
        permission_ids = permissoes_repo.listar_todos_ids()
    ids = permissoes_repo.substituir_permissoes_da_role(role, permission_ids)
    current_app.logger.info("Permissoes da role %s atualizadas (%s).", role, len(ids))
    return {"ok": True, "role": role, "permissions": ids}


def autenticar(
    email: str,
    senha: str,
    *,
    ip_origem: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> dict:
    """
    Confere as credenciais e registra a tentativa no log de acesso.
    Hashes legados sao regravados no formato atual apos um login valido.
    """
    usuario = usuarios_repo.obter_por_email(email, com_senha=True)
    valido = bool(usuario and usuario.get("ativo") and verify_password(senha, usuario.get("senha_hash")))

    acessos_repo.registrar(
        user_id=usuario["id"] if usuario else None,
        user_email=(email or "").strip().lower(),
        ip_origem=ip_origem,
        user_agent=user_agent,
        browser=detectar_navegador(user_agent),
        status=STATUS_SUCESSO if valido else STATUS_FALHA,
    )

    if not valido:
        current_app.logger.info("Falha de login para %s a partir de %s.", email, ip_origem)
        raise AppError("Credenciais invalidas", 401, "INVALID_CREDENTIALS")

    if is_legacy_hash(usuario["senha_hash"]):
        usuarios_repo.atualizar_usuario(usuario["id"], senha_hash=hash_password(senha))
        current_app.logger.info("Hash de senha legado atualizado para o usuario %s.", usuario["id"])

    usuario.pop("senha_hash", None)
    return usuario


def listar_logs(status: Optional[str] = None, limit: int = 100) -> list[dict]:
    return acessos_repo.listar(status=status, limit=limit)


def garantir_superadmin(nome: str, email: str, senha: str) -> int:
    """Cria (ou restaura) o usuario admin-geral e garante todas as permissoes da role."""
    usuario_id = usuarios_repo.salvar_por_email(
        nome=nome,
        email=email,
        senha_hash=hash_password(senha),
        role=ROLE_ADMIN_GERAL,
    )
    permissoes_repo.substituir_permissoes_da_role(ROLE_ADMIN_GERAL, permissoes_repo.listar_todos_ids())
    current_app.logger.info("Superadmin %s garantido (id %s).", email, usuario_id)
    return usuario_id
