from flask import g, jsonify
from flask_login import login_required

from clinica.domain.permissoes import Permissao
from clinica.payloads import parse_body, parse_query
from clinica.payloads.terapeutas import TerapeutaFiltro, TerapeutaIn
from clinica.services import terapeutas_service
from clinica.utils.decorators import permission_required

from . import terapeutas_bp


@terapeutas_bp.route("/terapeutas")
@login_required
@permission_required(Permissao.TERAPEUTAS_VIEW)
def listar():
    filtro = parse_query(TerapeutaFiltro)
    return jsonify(
        terapeutas_service.listar(filtro.id, filtro.nome, filtro.cpf, filtro.especialidade)
    )


@terapeutas_bp.route("/terapeutas/<int:terapeuta_id>")
@login_required
@permission_required(Permissao.TERAPEUTAS_VIEW)
def detalhe(terapeuta_id: int):
    return jsonify(terapeutas_service.obter(terapeuta_id))


@terapeutas_bp.route("/terapeutas", methods=["POST"])
@login_required
@permission_required(Permissao.TERAPEUTAS_CREATE)
def criar():
    dados = parse_body(TerapeutaIn)
    return jsonify({"id": terapeutas_service.criar(dados)}), 201


@terapeutas_bp.route("/terapeutas/<int:terapeuta_id>", methods=["PUT"])
@login_required
@permission_required(Permissao.TERAPEUTAS_EDIT, Permissao.TERAPEUTAS_EDIT_SELF)
def atualizar(terapeuta_id: int):
    dados = parse_body(TerapeutaIn)
    terapeutas_service.atualizar(terapeuta_id, dados, g.acesso)
    return jsonify({"ok": True, "id": terapeuta_id})


@terapeutas_bp.route("/terapeutas/<int:terapeuta_id>", methods=["DELETE"])
@login_required
@permission_required(Permissao.TERAPEUTAS_DELETE)
def excluir(terapeuta_id: int):
    terapeutas_service.excluir(terapeuta_id)
    return jsonify({"ok": True, "id": terapeuta_id})
