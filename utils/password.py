import bcrypt
from flask import current_app, has_app_context

DEFAULT_ROUNDS = 12
# bcrypt 只使用前 72 字节
_MAX_BYTES = 72


def _rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_ROUNDS))
    return DEFAULT_ROUNDS


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_MAX_BYTES]


def hash_password(plain: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or _rounds())
    return bcrypt.hashpw(_encode(plain), salt).decode("utf-8")


def verify_password(hashed: str | None, plain: str) -> bool:
    if not hashed or plain is None:
        return False
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except ValueError:
        # 非 bcrypt 格式的历史数据
        return False
