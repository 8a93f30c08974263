from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from passlib.context import CryptContext

from tasktracker.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

TOKEN_ACCESS = "access"
TOKEN_REFRESH = "refresh"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)

def create_jwt(payload: dict, secret: str, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    data = payload.copy()
    data.update({"iat": int(now.timestamp()), "exp": int((now + expires_delta).timestamp())})
    return jwt.encode(data, secret, algorithm="HS256")

def decode_jwt(token: str, secret: str) -> dict:
    return jwt.decode(token, secret, algorithms=["HS256"])

def _token_settings(token_type: str) -> tuple[str, timedelta]:
    if token_type == TOKEN_REFRESH:
        return settings.JWT_REFRESH_SECRET, timedelta(days=settings.REFRESH_TOKEN_TTL_DAYS)
    return settings.JWT_SECRET, timedelta(minutes=settings.ACCESS_TOKEN_TTL_MINUTES)

def create_token(claims: dict, token_type: str) -> str:
    secret, ttl = _token_settings(token_type)
    return create_jwt({**claims, "type": token_type}, secret, ttl)

def verify_token(token: str, token_type: str) -> dict | None:
    secret, _ = _token_settings(token_type)
    try:
        payload = decode_jwt(token, secret)
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload
