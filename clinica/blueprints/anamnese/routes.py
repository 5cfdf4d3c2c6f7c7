from flask import jsonify, request
from flask_login import login_required

from clinica.domain.permissoes import Permissao
from clinica.payloads import parse_body, parse_query
from clinica.payloads.anamnese import AnamneseMeta, AnamneseStatusIn, AnamneseVersaoFiltro, AnamneseVersoesFiltro
from clinica.services import anamnese_service
from clinica.utils.decorators import permission_required

from . import anamnese_bp


def _corpo() -> dict:
    corpo = request.get_json(silent=True)
    return corpo if isinstance(corpo, dict) else {}


@anamnese_bp.route("/anamnese", methods=["POST"])
@login_required
@permission_required(Permissao.PACIENTES_EDIT)
def criar():
    meta = parse_body(AnamneseMeta)
    salva = anamnese_service.salvar(meta.paciente_id, _corpo(), meta.status)
    return jsonify(salva), 201


@anamnese_bp.route("/anamnese/<int:paciente_id>", methods=["PUT"])
@login_required
@permission_required(Permissao.PACIENTES_EDIT)
def atualizar(paciente_id: int):
    meta = parse_body(AnamneseStatusIn)
    return jsonify(anamnese_service.salvar(paciente_id, _corpo(), meta.status))


@anamnese_bp.route("/anamnese/<int:paciente_id>")
@login_required
@permission_required(Permissao.PACIENTES_VIEW)
def detalhe(paciente_id: int):
    filtro = parse_query(AnamneseVersaoFiltro)
    return jsonify(anamnese_service.obter(paciente_id, filtro.version))


@anamnese_bp.route("/anamnese/<int:paciente_id>/versions")
@login_required
@permission_required(Permissao.PACIENTES_VIEW)
def versoes(paciente_id: int):
    filtro = parse_query(AnamneseVersoesFiltro)
    return jsonify(anamnese_service.listar_versoes(paciente_id, filtro.limit))
