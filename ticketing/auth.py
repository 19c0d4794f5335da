from datetime import UTC, datetime, timedelta

import jwt
import structlog
from passlib.context import CryptContext

from ticketing.config import settings
from ticketing.exceptions import AuthenticationError

logger = structlog.get_logger()

_pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return _pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return _pwd_context.verify(password, password_hash)


def create_access_token(user_id: str, role: str) -> str:
    expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"sub": user_id, "role": role, "exp": expire}
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict:
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("token_rejected", reason="expired")
        raise AuthenticationError() from None
    except jwt.InvalidTokenError:
        logger.info("token_rejected", reason="invalid")
        raise AuthenticationError() from None

    if not claims.get("sub"):
        raise AuthenticationError()
    return claims
