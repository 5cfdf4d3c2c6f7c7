from functools import wraps

from flask import g
from flask_login import current_user

from clinica.domain.permissoes import Papel
from clinica.errors import AppError, Forbidden
from clinica.services import acesso_service


def permission_required(*permissoes):
    """
    Exige que o usuário autenticado possua ao menos uma das permissões
    informadas (ou um alias equivalente). Roles administrativas sempre passam.
    O acesso resolvido fica disponível em ``g.acesso``.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AppError("Nao autenticado", 401, "UNAUTHORIZED")
            acesso = acesso_service.carregar_acesso(current_user.id)
            acesso_service.assert_permissao(acesso, permissoes)
            g.acesso = acesso
            return func(*args, **kwargs)

        return wrapper

    return decorator


def admin_geral_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AppError("Nao autenticado", 401, "UNAUTHORIZED")
        acesso = acesso_service.carregar_acesso(current_user.id)
        if not acesso.exists:
            raise AppError("Nao autenticado", 401, "UNAUTHORIZED")
        if acesso.primary_role != Papel.ADMIN_GERAL:
            raise Forbidden()
        g.acesso = acesso
        return func(*args, **kwargs)

    return wrapper
