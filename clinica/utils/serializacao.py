import json
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum

from flask.json.provider import DefaultJSONProvider


def formatar_hora(valor) -> str | None:
    """TIME do MySQL chega como timedelta; normaliza para HH:MM:SS."""
    if valor is None:
        return None
    if isinstance(valor, timedelta):
        total = int(valor.total_seconds())
        horas, resto = divmod(total, 3600)
        minutos, segundos = divmod(resto, 60)
        return f"{horas:02d}:{minutos:02d}:{segundos:02d}"
    if isinstance(valor, time):
        return valor.strftime("%H:%M:%S")
    return str(valor)


def formatar_data(valor) -> str | None:
    if valor is None:
        return None
    if isinstance(valor, datetime):
        return valor.date().isoformat()
    if isinstance(valor, date):
        return valor.isoformat()
    return str(valor)[:10]


def carregar_json(valor) -> dict:
    if valor is None:
        return {}
    if isinstance(valor, (bytes, bytearray)):
        valor = valor.decode("utf-8")
    if isinstance(valor, str):
        return json.loads(valor) if valor else {}
    return dict(valor)


class ClinicaJSONProvider(DefaultJSONProvider):
    ensure_ascii = False
    sort_keys = False

    @staticmethod
    def default(o):
        if isinstance(o, datetime):
            return o.isoformat(sep=" ", timespec="seconds")
        if isinstance(o, date):
            return o.isoformat()
        if isinstance(o, (time, timedelta)):
            return formatar_hora(o)
        if isinstance(o, Decimal):
            return float(o)
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, (set, frozenset)):
            return sorted(o)
        return DefaultJSONProvider.default(o)
