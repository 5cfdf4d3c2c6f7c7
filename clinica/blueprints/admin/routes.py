from __future__ import annotations

from flask import current_app, g, jsonify
from flask_login import login_required

from clinica.extensions import mysql
from clinica.payloads import parse_body, parse_query
from clinica.payloads.usuarios import LogsFiltro, RolePermissoesIn, UsuarioCreateIn, UsuarioUpdateIn
from clinica.services import usuarios_service
from clinica.utils.decorators import admin_geral_required

from . import admin_bp


@admin_bp.route("/health")
def health():
    mysql.ping()
    return jsonify({"ok": True, "service": current_app.config.get("CLINICA_NOME", "clinica")})


# --- Usuarios ---

@admin_bp.route("/users")
@login_required
@admin_geral_required
def listar_usuarios():
    return jsonify(usuarios_service.listar())


@admin_bp.route("/users", methods=["POST"])
@login_required
@admin_geral_required
def criar_usuario():
    dados = parse_body(UsuarioCreateIn)
    return jsonify(usuarios_service.criar(dados)), 201


@admin_bp.route("/users/<int:usuario_id>", methods=["PUT"])
@login_required
@admin_geral_required
def atualizar_usuario(usuario_id: int):
    dados = parse_body(UsuarioUpdateIn)
    return jsonify(usuarios_service.atualizar(usuario_id, dados))


@admin_bp.route("/users/<int:usuario_id>", methods=["DELETE"])
@login_required
@admin_geral_required
def excluir_usuario(usuario_id: int):
    return jsonify(usuarios_service.excluir(usuario_id, g.acesso.user_id))


# --- Roles e permissoes ---

@admin_bp.route("/roles")
@login_required
@admin_geral_required
def listar_roles():
    return jsonify(usuarios_service.listar_roles())


@admin_bp.route("/permissions")
@login_required
@admin_geral_required
def listar_permissoes():
    return jsonify(usuarios_service.listar_permissoes())


@admin_bp.route("/roles/<role>/permissions")
@login_required
@admin_geral_required
def permissoes_da_role(role: str):
    return jsonify(usuarios_service.permissoes_da_role(role))


@admin_bp.route("/roles/<role>/permissions", methods=["POST"])
@login_required
@admin_geral_required
def atualizar_permissoes_da_role(role: str):
    dados = parse_body(RolePermissoesIn)
    return jsonify(usuarios_service.atualizar_permissoes_da_role(role, dados.permissions))


@admin_bp.route("/logs-acesso")
@login_required
@admin_geral_required
def logs_acesso():
    filtro = parse_query(LogsFiltro)
    return jsonify(usuarios_service.listar_logs(filtro.status, filtro.limit))
