import time, json, base64, hmac, hashlib
from flask import current_app


def _b64(data: bytes):
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64json(obj):
    return _b64(json.dumps(obj, separators=(",", ":")).encode())


class TokenError(ValueError):
    pass


class TokenExpiredError(TokenError):
    pass


def _secret() -> bytes:
    return current_app.config["JWT_SECRET_KEY"].encode()


def create_token(user_id: int, username: str, role: str | None, role_id: int | None,
                 expires_seconds: int | None = None):
    if expires_seconds is None:
        expires_seconds = current_app.config.get("JWT_EXPIRES_SECONDS", 24 * 3600)
    now = int(time.time())
    header = {"alg": "HS256", "typ": "JWT"}
    # 载荷仅供参考，鉴权时以数据库中的用户状态/角色为准
    payload = {
        "userId": user_id,
        "username": username,
        "role": role,
        "roleId": role_id,
        "iat": now,
        "exp": now + expires_seconds,
    }
    h_b = _b64json(header)
    p_b = _b64json(payload)
    signing = h_b + b"." + p_b
    sig = _b64(hmac.new(_secret(), signing, hashlib.sha256).digest())
    return (signing + b"." + sig).decode()


def _decode_segment(seg: str):
    pad = "=" * (-len(seg) % 4)
    return json.loads(base64.urlsafe_b64decode(seg + pad).decode())


def decode_token(token: str):
    try:
        h_b, p_b, sig_b = token.split(".")
        signing = f"{h_b}.{p_b}".encode()
        expected = _b64(hmac.new(_secret(), signing, hashlib.sha256).digest()).decode()
        if not hmac.compare_digest(expected, sig_b):
            raise TokenError("signature mismatch")

        header = _decode_segment(h_b)
        if header.get("alg") != "HS256":
            raise TokenError("unsupported algorithm")

        payload = _decode_segment(p_b)
        if not isinstance(payload, dict):
            raise TokenError("payload is not an object")
        exp = payload.get("exp")
        if exp is not None and time.time() > exp:
            raise TokenExpiredError("token expired")
        return payload
    except TokenError:
        raise
    except Exception:
        raise TokenError("malformed token")
