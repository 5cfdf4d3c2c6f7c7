import hashlib
import hmac
import re

from werkzeug.security import check_password_hash, generate_password_hash

_SHA256_LEGADO = re.compile(r"^[a-f0-9]{64}$")


def hash_password(senha: str) -> str:
    return generate_password_hash(senha, method="pbkdf2:sha256", salt_length=12)


def verify_password(senha: str, senha_hash: str | None) -> bool:
    """
    Confere a senha contra o hash salvo. Contas antigas ainda guardam um
    SHA-256 hexadecimal puro; o formato e reconhecido pelo proprio hash.
    """
    if not senha or not senha_hash:
        return False
    if _SHA256_LEGADO.match(senha_hash):
        digest = hashlib.sha256(senha.encode("utf-8")).hexdigest()
        return hmac.compare_digest(digest, senha_hash)
    return check_password_hash(senha_hash, senha)


def is_legacy_hash(senha_hash: str | None) -> bool:
    return bool(senha_hash and _SHA256_LEGADO.match(senha_hash))
