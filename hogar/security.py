import datetime
import uuid

import bcrypt
import jwt

from hogar.config import settings

def new_uuid() -> str:
    """UUID v4 como string (compatible con columnas UUID-as-text)."""
    return str(uuid.uuid4())

def normalize_email(email: str) -> str:
    return email.strip().lower()

def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

# Hash de relleno: se compara cuando el email no existe para que el tiempo
# de respuesta no revele si la cuenta está registrada.
_DUMMY_HASH = bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=settings.bcrypt_rounds)).decode("utf-8")

def verify_password(plain: str, hashed: str | None) -> bool:
    # hashed es bcrypt (formato $2b$...) compatible con bcrypt.checkpw
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), (hashed or _DUMMY_HASH).encode("utf-8"))
    except ValueError:
        return False

def create_access_token(sub: str, role: str, email: str | None = None, expires_minutes: int | None = None) -> str:
    now = datetime.datetime.now(datetime.timezone.utc)
    minutes = expires_minutes if expires_minutes is not None else settings.jwt_expires_minutes
    payload = {
        "sub": sub,
        "role": role,
        "iat": now,
        "exp": now + datetime.timedelta(minutes=minutes),
        "typ": "access",
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_alg)

def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_alg])
