"""
Geracao dos PDFs de relatorio.

Os relatorios sao desenhados diretamente no canvas do reportlab, linha a
linha, com quebra de texto pela largura util da pagina e nova pagina quando
o espaco acaba.
"""
from __future__ import annotations

import io
from typing import Optional

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from clinica.utils.data_portugues import data_simples, emitido_em

MARGEM = 40
FONTE = "Helvetica"
FONTE_NEGRITO = "Helvetica-Bold"
COR_MARCA = Color(0.42, 0.27, 0.14)
COR_TEXTO = Color(0.12, 0.12, 0.12)
LIMITE_ATENDIMENTOS_PDF = 40


class _Pagina:
    """Cursor vertical sobre o canvas; abre nova pagina quando falta espaco."""

    def __init__(self, titulo_documento: str):
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        self.canvas.setTitle(titulo_documento)
        self.largura, self.altura = A4
        self.largura_util = self.largura - 2 * MARGEM
        self.y = self.altura - MARGEM

    def garantir_espaco(self, necessario: float) -> None:
        if self.y - necessario > MARGEM:
            return
        self.canvas.showPage()
        self.y = self.altura - MARGEM

    def linha(self, texto: str, *, negrito: bool = False, tamanho: int = 11, cor: Color = COR_TEXTO) -> None:
        self.garantir_espaco(tamanho + 4)
        self.canvas.setFont(FONTE_NEGRITO if negrito else FONTE, tamanho)
        self.canvas.setFillColor(cor)
        self.canvas.drawString(MARGEM, self.y, texto)
        self.y -= tamanho + 4

    def paragrafo(self, texto: str, *, tamanho: int = 11, prefixo: str = "", entrelinha: Optional[int] = None) -> None:
        entrelinha = entrelinha or tamanho + 4
        for parte in quebrar_texto(texto, FONTE, tamanho, self.largura_util) or [""]:
            self.garantir_espaco(entrelinha)
            self.canvas.setFont(FONTE, tamanho)
            self.canvas.setFillColor(COR_TEXTO)
            self.canvas.drawString(MARGEM, self.y, f"{prefixo}{parte}")
            self.y -= entrelinha

    def espaco(self, pontos: float) -> None:
        self.y -= pontos

    def secao(self, titulo: str) -> None:
        self.linha(titulo, negrito=True, tamanho=13)

    def finalizar(self) -> bytes:
        self.canvas.save()
        return self.buffer.getvalue()


def quebrar_texto(texto: str, fonte: str, tamanho: int, largura: float) -> list[str]:
    """Quebra por palavras respeitando a largura; cada quebra de linha vira um paragrafo."""
    linhas: list[str] = []
    for paragrafo in (texto or "").split("\n"):
        palavras = " ".join(paragrafo.split())
        if palavras:
            linhas.extend(simpleSplit(palavras, fonte, tamanho, largura))
    return linhas


def _cabecalho(pagina: _Pagina, titulo: str, cor_marca: Color, nome_clinica: str) -> None:
    pagina.linha(nome_clinica, negrito=True, tamanho=18, cor=cor_marca)
    pagina.linha(titulo, negrito=True, tamanho=14)
    pagina.linha(f"Emitido em {emitido_em()}", tamanho=10)
    pagina.espaco(6)


def _identificacao(pagina: _Pagina, paciente: dict, periodo: dict) -> None:
    pagina.linha(f"Paciente: {paciente['nome']} (ID {paciente['id']})", negrito=True)
    pagina.linha(f"CPF: {paciente.get('cpf') or '-'}   Convenio: {paciente.get('convenio') or 'Particular'}")
    pagina.linha(f"Periodo: {data_simples(periodo['from'])} a {data_simples(periodo['to'])}")
    pagina.espaco(8)


def gerar_pdf_evolutivo(relatorio: dict, nome_clinica: str = "Clinica Girassois") -> bytes:
    pagina = _Pagina("Relatorio evolutivo")
    _cabecalho(pagina, "RELATORIO EVOLUTIVO", COR_MARCA, nome_clinica)
    _identificacao(pagina, relatorio["paciente"], relatorio["periodo"])

    ind = relatorio["indicadores"]
    pagina.secao("Indicadores")
    pagina.linha(
        f"Total: {ind['totalAtendimentos']}  Presencas: {ind['presentes']}  "
        f"Ausencias: {ind['ausentes']}  Sem registro: {ind['naoInformado']}"
    )
    pagina.linha(
        f"Taxa de presenca: {ind['taxaPresencaPercent']}%  Tempo total (min): {ind['tempoTotalMinutos']}  "
        f"Media (min): {ind['mediaMinutosPorSessao']}"
    )
    pagina.espaco(6)

    resumo = relatorio.get("resumoAutomatico") or {}
    pagina.secao("Resumo automatico")
    pagina.paragrafo((resumo.get("texto") or "").strip() or "-")
    pagina.linha(f"Regras: {', '.join(resumo.get('regrasDisparadas') or []) or '-'}", tamanho=10)
    pagina.espaco(6)

    destaques = relatorio.get("destaques") or {}
    pagina.secao("Ultimas observacoes")
    observacoes = destaques.get("ultimasObservacoes") or []
    if not observacoes:
        pagina.linha("- Sem observacoes registradas.")
    for obs in observacoes:
        texto = f"{data_simples(obs['data'])} - {obs.get('terapeuta_nome') or 'Terapeuta'}: {obs.get('texto') or ''}"
        pagina.paragrafo(texto, prefixo="- ")
    pagina.espaco(6)

    pagina.secao("Principais motivos de ausencia")
    motivos = destaques.get("principaisMotivosAusencia") or []
    if not motivos:
        pagina.linha("- Sem faltas registradas.")
    for motivo in motivos:
        pagina.linha(f"- {motivo['motivo']} ({motivo['count']})")
    pagina.espaco(6)

    pagina.secao("Atendimentos (resumo)")
    atendimentos = relatorio.get("atendimentos") or []
    if not atendimentos:
        pagina.linha("- Nenhum atendimento no periodo.")
    for atendimento in atendimentos[:LIMITE_ATENDIMENTOS_PDF]:
        obs = (atendimento.get("observacoes") or atendimento.get("resumo_repasse") or atendimento.get("motivo") or "").strip()
        linha = (
            f"{data_simples(atendimento['data'])} | {(atendimento.get('terapeuta_nome') or 'Terapeuta').strip()} | "
            f"{atendimento['presenca']} | {atendimento.get('duracao_min') or 0} min | {obs}"
        )
        pagina.paragrafo(linha, tamanho=9, entrelinha=12)
        pagina.espaco(2)
    if len(atendimentos) > LIMITE_ATENDIMENTOS_PDF:
        pagina.linha(f"(Mostrando {LIMITE_ATENDIMENTOS_PDF} de {len(atendimentos)} atendimentos)", tamanho=9)

    return pagina.finalizar()


def gerar_pdf_clinico(relatorio: dict, nome_clinica: str = "Clinica Girassois") -> bytes:
    pagina = _Pagina("Relatorio clinico")
    _cabecalho(pagina, "RELATORIO CLINICO", COR_TEXTO, nome_clinica)
    _identificacao(pagina, relatorio["paciente"], relatorio["periodo"])

    atend = relatorio["atendimentos"]
    pagina.secao("Atendimentos")
    pagina.linha(
        f"Total: {atend['total']}  Presencas: {atend['presentes']}  "
        f"Faltas: {atend['ausentes']}  Taxa: {atend['taxaPresenca']}%"
    )
    pagina.espaco(6)

    pagina.secao("Anamnese")
    anamnese = relatorio.get("anamnese")
    if anamnese:
        pagina.linha(
            f"Versao {anamnese['version']} - {anamnese.get('status') or ''} - "
            f"{data_simples(anamnese['created_at']) if anamnese.get('created_at') else ''}"
        )
    else:
        pagina.linha("Sem anamnese encontrada")
    pagina.espaco(6)

    pagina.secao("Observacoes recentes")
    if not atend["observacoes"]:
        pagina.linha("- Sem observacoes")
    for obs in atend["observacoes"]:
        texto = (obs.get("observacoes") or obs.get("motivo") or "-").strip()
        pagina.paragrafo(
            f"{data_simples(obs['data'])} {obs.get('hora_inicio') or ''} - {obs['presenca']} - {texto}",
            tamanho=10,
            entrelinha=14,
        )
        pagina.espaco(2)

    return pagina.finalizar()
