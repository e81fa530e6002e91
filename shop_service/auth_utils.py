# shop_service/auth_utils.py
import hashlib
import hmac
import os
from datetime import datetime, timedelta, timezone

import jwt

from shop_service.exceptions import UnauthorizedError

PBKDF2_ITERATIONS = 260_000


def hash_password(password: str, salt: bytes = None) -> str:
    """Hash a password with salted PBKDF2-SHA256, stored as iterations$salt$hash."""
    if salt is None:
        salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, PBKDF2_ITERATIONS)
    return f"{PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a password against a stored hash."""
    try:
        iterations, salt_hex, digest_hex = hashed_password.split("$")
        salt = bytes.fromhex(salt_hex)
        iterations = int(iterations)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", plain_password.encode(), salt, iterations)
    return hmac.compare_digest(digest.hex(), digest_hex)


def create_access_token(data: dict, secret: str, algorithm: str = "HS256", expires_hours: int = 24) -> str:
    """Create a signed JWT that expires after the given number of hours."""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    to_encode.update({"iat": now, "exp": now + timedelta(hours=expires_hours)})
    return jwt.encode(to_encode, secret, algorithm=algorithm)


def decode_access_token(token: str, secret: str, algorithm: str = "HS256") -> dict:
    try:
        payload = jwt.decode(
            token, secret, algorithms=[algorithm],
            options={"require": ["exp", "user_id", "role"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    if not isinstance(payload.get("user_id"), int):
        raise UnauthorizedError("Invalid token")
    return payload
