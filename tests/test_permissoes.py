import pytest

from clinica.domain.permissoes import Papel, Permissao, canonizar_role, is_admin, resolver_chaves
from clinica.errors import AppError, Forbidden, InvalidInput
from clinica.repositories import atendimentos as atendimentos_repo
from clinica.repositories import terapeutas as terapeutas_repo
from clinica.services import acesso_service
from clinica.services.acesso_service import Acesso


def test_resolver_chaves_inclui_aliases():
    assert resolver_chaves([Permissao.CONSULTAS_VIEW]) == {"consultas:view", "atendimentos:view"}
    assert resolver_chaves([Permissao.PRONTUARIO_VERSION]) == {"prontuario:version", "prontuario:delete"}


def test_resolver_chaves_recusa_chave_desconhecida():
    with pytest.raises(ValueError):
        resolver_chaves(["consultas:teleportar"])


def test_canonizar_role():
    assert canonizar_role("admin-geral") == Papel.ADMIN_GERAL
    assert canonizar_role(" terapeuta ") == Papel.TERAPEUTA
    assert canonizar_role("RECEPCAO") == Papel.RECEPCAO
    assert canonizar_role("financeiro") is None
    assert canonizar_role(None) is None
    assert is_admin("ADMIN")
    assert not is_admin("recepcao")


def test_permissao_por_alias():
    acesso = Acesso(
        exists=True,
        usuario={"id": 9, "nome": "X", "email": "x@clinica.com.br", "role": "recepcao"},
        primary_role=Papel.RECEPCAO,
        permissoes={"atendimentos:view"},
    )
    assert acesso_service.tem_permissao(acesso, [Permissao.CONSULTAS_VIEW])
    assert not acesso_service.tem_permissao(acesso, [Permissao.CONSULTAS_CANCEL])


def test_admin_tem_todas_as_permissoes(acesso):
    assert acesso_service.tem_permissao(acesso("admin"), [Permissao.CONFIGURACOES_MANAGE])


def test_usuario_inexistente_nao_autenticado():
    with pytest.raises(AppError) as erro:
        acesso_service.assert_permissao(Acesso(exists=False), [Permissao.PACIENTES_VIEW])
    assert erro.value.status == 401


def test_permissao_negada(acesso):
    with pytest.raises(Forbidden):
        acesso_service.assert_permissao(acesso("terapeuta"), [Permissao.PACIENTES_DELETE])


def test_carregar_acesso_usuario_inativo(monkeypatch):
    monkeypatch.setattr(
        acesso_service.usuarios_repo,
        "obter_por_id",
        lambda user_id: {"id": user_id, "nome": "X", "email": "x@clinica.com.br", "role": "admin", "ativo": 0},
    )
    assert not acesso_service.carregar_acesso(5).exists


def test_carregar_acesso_roles(monkeypatch):
    monkeypatch.setattr(
        acesso_service.usuarios_repo,
        "obter_por_id",
        lambda user_id: {"id": user_id, "nome": "X", "email": "x@clinica.com.br", "role": "terapeuta", "ativo": 1},
    )
    monkeypatch.setattr(acesso_service.permissoes_repo, "listar_chaves_da_role", lambda role: {"pacientes:view"})

    acesso = acesso_service.carregar_acesso(5)

    assert acesso.roles == ["TERAPEUTA", "terapeuta"]
    assert acesso.is_terapeuta
    assert acesso.to_dict()["role"] == "TERAPEUTA"
    assert acesso.to_dict()["permissions"] == ["pacientes:view"]


def test_admin_acessa_qualquer_paciente(acesso):
    resultado = acesso_service.assert_acesso_paciente(acesso("admin"), 42)
    assert resultado.terapeuta_id is None


@pytest.mark.parametrize("paciente_id", ["abc", 0, -3])
def test_paciente_invalido(acesso, paciente_id):
    with pytest.raises(InvalidInput):
        acesso_service.assert_acesso_paciente(acesso("admin"), paciente_id)


def test_recepcao_nao_acessa_prontuario_do_paciente(acesso):
    with pytest.raises(Forbidden):
        acesso_service.assert_acesso_paciente(acesso("recepcao"), 42)


def test_terapeuta_com_vinculo(monkeypatch, acesso):
    monkeypatch.setattr(terapeutas_repo, "obter_por_usuario", lambda user_id: {"id": 7})
    monkeypatch.setattr(atendimentos_repo, "existe_vinculo", lambda terapeuta_id, paciente_id: True)

    resultado = acesso_service.assert_acesso_paciente(acesso("terapeuta"), "42")

    assert resultado.terapeuta_id == 7
    assert resultado.user_id == 3


def test_terapeuta_sem_atendimento_com_o_paciente(monkeypatch, acesso):
    monkeypatch.setattr(terapeutas_repo, "obter_por_usuario", lambda user_id: {"id": 7})
    monkeypatch.setattr(atendimentos_repo, "existe_vinculo", lambda terapeuta_id, paciente_id: False)

    with pytest.raises(Forbidden):
        acesso_service.assert_acesso_paciente(acesso("terapeuta"), 42)


def test_usuario_terapeuta_sem_cadastro(monkeypatch, acesso):
    monkeypatch.setattr(terapeutas_repo, "obter_por_usuario", lambda user_id: None)

    with pytest.raises(Forbidden):
        acesso_service.assert_acesso_paciente(acesso("terapeuta"), 42)
