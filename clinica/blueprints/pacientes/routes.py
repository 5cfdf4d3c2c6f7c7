from __future__ import annotations

from flask import current_app, g, jsonify
from flask_login import login_required

from clinica.domain.permissoes import Permissao
from clinica.extensions import get_storage
from clinica.payloads import parse_body, parse_query
from clinica.payloads.pacientes import (
    ArquivoCommitIn,
    ArquivoLeituraFiltro,
    ArquivoPresignIn,
    PacienteAtivoIn,
    PacienteFiltro,
    PacienteIn,
)
from clinica.services import acesso_service, arquivos_service, pacientes_service
from clinica.utils.decorators import permission_required

from . import pacientes_bp


@pacientes_bp.route("/pacientes")
@login_required
@permission_required(Permissao.PACIENTES_VIEW)
def listar():
    filtro = parse_query(PacienteFiltro)
    return jsonify(pacientes_service.listar(filtro.id, filtro.nome, filtro.cpf))


@pacientes_bp.route("/pacientes/<int:paciente_id>")
@login_required
@permission_required(Permissao.PACIENTES_VIEW)
def detalhe(paciente_id: int):
    return jsonify(pacientes_service.obter(paciente_id))


@pacientes_bp.route("/pacientes", methods=["POST"])
@login_required
@permission_required(Permissao.PACIENTES_CREATE)
def criar():
    dados = parse_body(PacienteIn)
    paciente_id, reaproveitado = pacientes_service.criar(dados)
    if reaproveitado:
        return jsonify({"id": paciente_id, "reaproveitado": True}), 200
    current_app.logger.info("Paciente %s cadastrado.", paciente_id)
    return jsonify({"id": paciente_id}), 201


@pacientes_bp.route("/pacientes/<int:paciente_id>", methods=["PUT"])
@login_required
@permission_required(Permissao.PACIENTES_EDIT)
def atualizar(paciente_id: int):
    dados = parse_body(PacienteIn)
    pacientes_service.atualizar(paciente_id, dados)
    return jsonify({"ok": True, "id": paciente_id})


@pacientes_bp.route("/pacientes/<int:paciente_id>/ativo", methods=["PATCH"])
@login_required
@permission_required(Permissao.PACIENTES_EDIT)
def definir_ativo(paciente_id: int):
    dados = parse_body(PacienteAtivoIn)
    pacientes_service.definir_ativo(paciente_id, dados.ativo)
    return jsonify({"ok": True, "id": paciente_id, "ativo": dados.ativo})


@pacientes_bp.route("/pacientes/<int:paciente_id>", methods=["DELETE"])
@login_required
@permission_required(Permissao.PACIENTES_DELETE)
def excluir(paciente_id: int):
    pacientes_service.excluir(paciente_id, g.acesso.user_id)
    return jsonify({"ok": True, "id": paciente_id})


# --- Arquivos do paciente (R2) ---

@pacientes_bp.route("/pacientes/<int:paciente_id>/arquivos/presign", methods=["POST"])
@login_required
@permission_required(Permissao.PACIENTES_EDIT)
def presign_arquivo(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    dados = parse_body(ArquivoPresignIn)
    resposta = arquivos_service.gerar_upload(
        get_storage(), paciente_id, dados.kind, dados.filename, dados.content_type
    )
    return jsonify(resposta)


@pacientes_bp.route("/pacientes/<int:paciente_id>/arquivos/commit", methods=["POST"])
@login_required
@permission_required(Permissao.PACIENTES_EDIT)
def commit_arquivo(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    dados = parse_body(ArquivoCommitIn)
    return jsonify(arquivos_service.confirmar_upload(get_storage(), paciente_id, dados.kind, dados.key))


@pacientes_bp.route("/pacientes/<int:paciente_id>/arquivos/read-url")
@login_required
@permission_required(Permissao.PACIENTES_VIEW)
def url_leitura_arquivo(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    filtro = parse_query(ArquivoLeituraFiltro)
    return jsonify(arquivos_service.url_de_leitura(get_storage(), paciente_id, filtro.kind))
