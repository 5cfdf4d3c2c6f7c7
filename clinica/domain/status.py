from enum import Enum


class Presenca(str, Enum):
    PRESENTE = "Presente"
    AUSENTE = "Ausente"
    NAO_INFORMADO = "Nao informado"

    @classmethod
    def choices(cls):
        return [status.value for status in cls]


class Turno(str, Enum):
    MATUTINO = "Matutino"
    VESPERTINO = "Vespertino"

    @classmethod
    def choices(cls):
        return [turno.value for turno in cls]


class DocTipo(str, Enum):
    ANAMNESE = "ANAMNESE"
    PLANO_TERAPEUTICO = "PLANO_TERAPEUTICO"
    RELATORIO_MULTIPROFISSIONAL = "RELATORIO_MULTIPROFISSIONAL"
    OUTRO = "OUTRO"

    @classmethod
    def choices(cls):
        return [tipo.value for tipo in cls]


class DocStatus(str, Enum):
    RASCUNHO = "Rascunho"
    FINALIZADO = "Finalizado"


class AnamneseStatus(str, Enum):
    RASCUNHO = "Rascunho"
    FINALIZADA = "Finalizada"


class ArquivoTipo(str, Enum):
    FOTO = "foto"
    LAUDO = "laudo"
    DOCUMENTO = "documento"

    @classmethod
    def choices(cls):
        return [tipo.value for tipo in cls]


STATUS_REPASSE_PADRAO = "Pendente"

CONVENIOS = ("Particular", "Unimed", "Bradesco", "CASSI")
CONVENIO_PADRAO = "Particular"

ESPECIALIDADES = (
    "Psicologia",
    "Terapia Ocupacional",
    "Fonoaudiologia",
    "Fisioterapia",
    "Psicopedagogia",
    "Acompanhante Terapeutico (AT)",
)
ESPECIALIDADE_PADRAO = "Nao informado"

TERAPIAS_PADRAO = ("Convencional", "Intensiva", "Especial", "Intercambio")
