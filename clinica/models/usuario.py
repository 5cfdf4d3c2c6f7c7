from dataclasses import dataclass

from flask_login import UserMixin


@dataclass
class Usuario(UserMixin):
    """Usuario da sessao. Permissoes sao sempre recarregadas do banco a cada pedido."""

    id: int
    nome: str
    email: str
    role: str
    ativo: bool = True

    @property
    def is_active(self) -> bool:
        return bool(self.ativo)

    @classmethod
    def from_row(cls, row: dict) -> "Usuario":
        return cls(
            id=int(row["id"]),
            nome=row["nome"],
            email=row["email"],
            role=(row.get("role") or "").strip().lower(),
            ativo=bool(row.get("ativo", 1)),
        )

    def get_id(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict:
        return {"id": self.id, "nome": self.nome, "email": self.email, "role": self.role}
