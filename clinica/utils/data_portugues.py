from datetime import date, datetime

MESES = (
    "janeiro", "fevereiro", "marco", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)


def _como_data(valor):
    if isinstance(valor, (date, datetime)):
        return valor
    try:
        return date.fromisoformat(str(valor)[:10])
    except ValueError:
        return None


def data_simples(valor=None):
    """dd/mm/aaaa; textos que nao sao datas ISO voltam como vieram."""
    if valor is None:
        valor = date.today()
    convertida = _como_data(valor)
    if convertida is None:
        return str(valor)
    return convertida.strftime("%d/%m/%Y")


def data_extenso(valor=None):
    convertida = _como_data(valor if valor is not None else date.today())
    if convertida is None:
        return str(valor)
    return f"{convertida.day} de {MESES[convertida.month - 1]} de {convertida.year}"


def emitido_em(momento=None):
    momento = momento or datetime.now()
    return f"{data_extenso(momento)} as {momento.strftime('%H:%M')}"
