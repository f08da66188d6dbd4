"""
Credential utilities: bcrypt password hashing and signed bearer tokens.
"""
from datetime import datetime, timedelta, timezone
import bcrypt
import jwt

from taskgate.core import config
from taskgate.core.errors import Unauthenticated

# bcrypt only considers the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def hash_password(plain_password: str) -> str:
    """Hash a plaintext password with a fresh bcrypt salt."""
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user_id: str, email: str, role: str, organization_id: str | None) -> str:
    """
    Issue a signed session token.

    Claims: sub, email, role, organizationId, iat, exp.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "role": role,
        "organizationId": organization_id,
        "iat": now,
        "exp": now + timedelta(minutes=config.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def verify_access_token(token: str) -> dict:
    """
    Verify a session token and return its payload.

    Raises:
        Unauthenticated: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise Unauthenticated("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise Unauthenticated(f"Invalid token: {str(e)}") from e
