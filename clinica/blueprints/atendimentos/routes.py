from flask import g, jsonify
from flask_login import login_required

from clinica.domain.permissoes import Permissao
from clinica.payloads import parse_body, parse_query
from clinica.payloads.atendimentos import AtendimentoFiltro, AtendimentoIn, ExcluirDiaIn, RecorrenteIn
from clinica.services import agendamento_service
from clinica.utils.decorators import permission_required

from . import atendimentos_bp


@atendimentos_bp.route("/atendimentos")
@login_required
@permission_required(Permissao.CONSULTAS_VIEW)
def listar():
    filtro = parse_query(AtendimentoFiltro)
    return jsonify(
        agendamento_service.listar(
            paciente_id=filtro.paciente_id,
            terapeuta_id=filtro.terapeuta_id,
            data_ini=filtro.data_ini,
            data_fim=filtro.data_fim,
        )
    )


@atendimentos_bp.route("/atendimentos/<int:atendimento_id>")
@login_required
@permission_required(Permissao.CONSULTAS_VIEW)
def detalhe(atendimento_id: int):
    return jsonify(agendamento_service.obter(atendimento_id))


@atendimentos_bp.route("/atendimentos", methods=["POST"])
@login_required
@permission_required(Permissao.CONSULTAS_CREATE)
def criar():
    dados = parse_body(AtendimentoIn)
    return jsonify({"id": agendamento_service.criar_atendimento(dados)}), 201


@atendimentos_bp.route("/atendimentos/<int:atendimento_id>", methods=["PUT"])
@login_required
@permission_required(Permissao.CONSULTAS_EDIT, Permissao.CONSULTAS_PRESENCE)
def atualizar(atendimento_id: int):
    dados = parse_body(AtendimentoIn)
    agendamento_service.atualizar_atendimento(atendimento_id, dados)
    return jsonify({"ok": True, "id": atendimento_id})


@atendimentos_bp.route("/atendimentos/<int:atendimento_id>", methods=["DELETE"])
@login_required
@permission_required(Permissao.CONSULTAS_CANCEL)
def excluir(atendimento_id: int):
    agendamento_service.excluir(atendimento_id, g.acesso.user_id)
    return jsonify({"ok": True, "id": atendimento_id})


@atendimentos_bp.route("/atendimentos/recorrente", methods=["POST"])
@login_required
@permission_required(Permissao.CONSULTAS_CREATE)
def criar_recorrente():
    dados = parse_body(RecorrenteIn)
    return jsonify(agendamento_service.criar_recorrente(dados)), 201


@atendimentos_bp.route("/atendimentos/excluir-dia", methods=["POST"])
@login_required
@permission_required(Permissao.CONSULTAS_CANCEL)
def excluir_dia():
    dados = parse_body(ExcluirDiaIn)
    return jsonify(agendamento_service.excluir_dia(dados, g.acesso.user_id))
