from flask import jsonify, request, session
from flask_login import current_user, login_required, login_user, logout_user

from clinica.errors import AppError
from clinica.models.usuario import Usuario
from clinica.payloads import parse_body
from clinica.payloads.usuarios import LoginIn
from clinica.services import acesso_service
from clinica.services import usuarios_service
from . import auth_bp


def _ip_origem() -> str | None:
    encaminhado = request.headers.get("X-Forwarded-For", "")
    if encaminhado:
        return encaminhado.split(",")[0].strip()
    return request.remote_addr


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    dados = parse_body(LoginIn)
    usuario_db = usuarios_service.autenticar(
        dados.email,
        dados.password,
        ip_origem=_ip_origem(),
        user_agent=request.headers.get("User-Agent"),
    )

    usuario = Usuario.from_row(usuario_db)
    session.permanent = True
    login_user(usuario)
    return jsonify({"ok": True, "user": usuario.to_dict()})


@auth_bp.route("/auth/logout", methods=["POST"])
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({"ok": True})


def _acesso_atual() -> acesso_service.Acesso:
    acesso = acesso_service.carregar_acesso(current_user.id)
    if not acesso.exists:
        raise AppError("Usuario nao encontrado", 401, "UNAUTHORIZED")
    return acesso


@auth_bp.route("/me")
@login_required
def me():
    return jsonify(_acesso_atual().usuario)


@auth_bp.route("/me/permissions")
@login_required
def me_permissions():
    return jsonify(_acesso_atual().to_dict())
