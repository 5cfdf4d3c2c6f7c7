from __future__ import annotations

from flask import g, jsonify
from flask_login import login_required

from clinica.domain.permissoes import Permissao
from clinica.payloads import parse_body, parse_query
from clinica.payloads.prontuario import DocumentoFiltro, DocumentoIn, EvolucaoIn, EvolucaoUpdateIn
from clinica.services import acesso_service, prontuario_service
from clinica.utils.decorators import permission_required

from . import prontuario_bp


@prontuario_bp.route("/prontuario/<int:paciente_id>")
@login_required
@permission_required(Permissao.PRONTUARIO_VIEW)
def timeline(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    return jsonify(prontuario_service.timeline(paciente_id))


# --- Documentos ---

@prontuario_bp.route("/prontuario/documentos/<int:paciente_id>")
@login_required
@permission_required(Permissao.PRONTUARIO_VIEW)
def listar_documentos(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    filtro = parse_query(DocumentoFiltro)
    return jsonify(prontuario_service.listar_documentos(paciente_id, filtro.tipo))


@prontuario_bp.route("/prontuario/documentos/<int:paciente_id>", methods=["POST"])
@login_required
@permission_required(Permissao.PRONTUARIO_CREATE)
def criar_documento(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    dados = parse_body(DocumentoIn)
    return jsonify(prontuario_service.salvar_documento(paciente_id, dados, g.acesso)), 201


@prontuario_bp.route("/prontuario/documento/<int:documento_id>")
@login_required
@permission_required(Permissao.PRONTUARIO_VIEW)
def detalhe_documento(documento_id: int):
    documento = prontuario_service.obter_documento(documento_id)
    acesso_service.assert_acesso_paciente(g.acesso, documento["paciente_id"])
    return jsonify(documento)


@prontuario_bp.route("/prontuario/documento/<int:documento_id>/finalizar", methods=["PUT"])
@login_required
@permission_required(Permissao.PRONTUARIO_FINALIZE)
def finalizar_documento(documento_id: int):
    documento = prontuario_service.obter_documento(documento_id)
    acesso_service.assert_acesso_paciente(g.acesso, documento["paciente_id"])
    return jsonify(prontuario_service.finalizar_documento(documento_id))


@prontuario_bp.route("/prontuario/documento/<int:documento_id>", methods=["DELETE"])
@login_required
@permission_required(Permissao.PRONTUARIO_VERSION)
def excluir_documento(documento_id: int):
    documento = prontuario_service.obter_documento(documento_id)
    acesso_service.assert_acesso_paciente(g.acesso, documento["paciente_id"])
    prontuario_service.excluir_documento(documento_id, g.acesso.user_id)
    return jsonify({"ok": True, "id": documento_id})


# --- Evolucoes ---

@prontuario_bp.route("/prontuario/evolucoes/<int:paciente_id>")
@login_required
@permission_required(Permissao.EVOLUCOES_VIEW)
def listar_evolucoes(paciente_id: int):
    acesso_paciente = acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    evolucoes = prontuario_service.listar_evolucoes(paciente_id)
    if acesso_paciente.terapeuta_id is not None:
        evolucoes = [e for e in evolucoes if e["terapeuta_id"] == acesso_paciente.terapeuta_id]
    return jsonify(evolucoes)


@prontuario_bp.route("/prontuario/evolucoes/<int:paciente_id>", methods=["POST"])
@login_required
@permission_required(Permissao.EVOLUCOES_CREATE)
def criar_evolucao(paciente_id: int):
    acesso_service.assert_acesso_paciente(g.acesso, paciente_id)
    dados = parse_body(EvolucaoIn)
    return jsonify(prontuario_service.criar_evolucao(paciente_id, dados, g.acesso)), 201


@prontuario_bp.route("/prontuario/evolucao/<int:evolucao_id>")
@login_required
@permission_required(Permissao.EVOLUCOES_VIEW)
def detalhe_evolucao(evolucao_id: int):
    evolucao = prontuario_service.obter_evolucao(evolucao_id)
    acesso_paciente = acesso_service.assert_acesso_paciente(g.acesso, evolucao["paciente_id"])
    prontuario_service.assert_dono_evolucao(acesso_paciente, evolucao)
    return jsonify(evolucao)


@prontuario_bp.route("/prontuario/evolucao/<int:evolucao_id>", methods=["PUT"])
@login_required
@permission_required(Permissao.EVOLUCOES_EDIT)
def atualizar_evolucao(evolucao_id: int):
    evolucao = prontuario_service.obter_evolucao(evolucao_id, incluir_excluidas=False)
    acesso_paciente = acesso_service.assert_acesso_paciente(g.acesso, evolucao["paciente_id"])
    prontuario_service.assert_dono_evolucao(acesso_paciente, evolucao)
    dados = parse_body(EvolucaoUpdateIn)
    return jsonify(prontuario_service.atualizar_evolucao(evolucao, dados, g.acesso))


@prontuario_bp.route("/prontuario/evolucao/<int:evolucao_id>", methods=["DELETE"])
@login_required
@permission_required(Permissao.EVOLUCOES_DELETE)
def excluir_evolucao(evolucao_id: int):
    evolucao = prontuario_service.obter_evolucao(evolucao_id, incluir_excluidas=False)
    acesso_paciente = acesso_service.assert_acesso_paciente(g.acesso, evolucao["paciente_id"])
    prontuario_service.assert_dono_evolucao(acesso_paciente, evolucao)
    prontuario_service.excluir_evolucao(evolucao_id, g.acesso.user_id)
    return jsonify({"ok": True, "id": evolucao_id})
