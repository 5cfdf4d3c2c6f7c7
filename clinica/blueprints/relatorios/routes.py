from flask import Response, current_app, g, jsonify
from flask_login import login_required

from clinica.domain.permissoes import Permissao
from clinica.payloads import parse_query
from clinica.payloads.relatorios import AssiduidadeFiltro, ClinicoFiltro, EvolutivoFiltro
from clinica.services import relatorios_pdf, relatorios_service
from clinica.utils.decorators import permission_required

from . import relatorios_bp


def _resposta_pdf(conteudo: bytes, nome_arquivo: str) -> Response:
    return Response(
        conteudo,
        mimetype="application/pdf",
        headers={
            "Content-Disposition": f'inline; filename="{nome_arquivo}"',
            "Cache-Control": "no-store",
        },
    )


def _evolutivo() -> dict:
    filtro = parse_query(EvolutivoFiltro)
    return relatorios_service.consolidar_evolutivo(
        g.acesso, filtro.paciente_id, filtro.from_, filtro.to, filtro.terapeuta_id
    )


def _clinico() -> dict:
    filtro = parse_query(ClinicoFiltro)
    return relatorios_service.consolidar_clinico(
        g.acesso, filtro.paciente_id, filtro.from_, filtro.to, filtro.terapeuta_id, filtro.version
    )


@relatorios_bp.route("/relatorios/assiduidade")
@login_required
@permission_required(Permissao.RELATORIOS_CLINICOS_VIEW)
def assiduidade():
    filtro = parse_query(AssiduidadeFiltro)
    return jsonify(
        relatorios_service.consolidar_assiduidade(
            g.acesso,
            filtro.from_,
            filtro.to,
            filtro.terapeuta_id,
            filtro.presenca,
            filtro.paciente_nome,
        )
    )


@relatorios_bp.route("/relatorios/evolutivo")
@login_required
@permission_required(Permissao.RELATORIOS_CLINICOS_VIEW)
def evolutivo():
    return jsonify(_evolutivo())


@relatorios_bp.route("/relatorios/evolutivo/pdf")
@login_required
@permission_required(Permissao.RELATORIOS_CLINICOS_EXPORT)
def evolutivo_pdf():
    pdf = relatorios_pdf.gerar_pdf_evolutivo(_evolutivo(), current_app.config["CLINICA_NOME"])
    return _resposta_pdf(pdf, "relatorio-evolutivo.pdf")


@relatorios_bp.route("/relatorios/clinico")
@login_required
@permission_required(Permissao.RELATORIOS_CLINICOS_VIEW)
def clinico():
    return jsonify(_clinico())


@relatorios_bp.route("/relatorios/clinico/pdf")
@login_required
@permission_required(Permissao.RELATORIOS_CLINICOS_EXPORT)
def clinico_pdf():
    pdf = relatorios_pdf.gerar_pdf_clinico(_clinico(), current_app.config["CLINICA_NOME"])
    return _resposta_pdf(pdf, "relatorio-clinico.pdf")
