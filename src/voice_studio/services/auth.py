"""Bearer token signing and password hashing for dashboard users."""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone

PBKDF2_ITERATIONS = 200_000


def hash_password(password: str, salt: str | None = None) -> str:
    """Hash a password with PBKDF2-SHA256. Returns ``salt$hexdigest``."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: str) -> bool:
    salt, _, _ = stored.partition("$")
    return hmac.compare_digest(hash_password(password, salt), stored)


def create_token(user_id: str, secret: str, expiry_hours: int) -> str:
    """Create a signed ``user_id|expiry|signature`` token."""
    expiry = datetime.now(timezone.utc) + timedelta(hours=expiry_hours)
    # Use | as separator since : appears in ISO timestamps
    payload = f"{user_id}|{expiry.isoformat()}"
    signature = hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()
    return f"{payload}|{signature}"


def verify_token(token: str, secret: str) -> str | None:
    """Verify a token and return user_id if valid."""
    parts = token.split("|")
    if len(parts) != 3:
        return None

    user_id, expiry_str, signature = parts
    payload = f"{user_id}|{expiry_str}"
    expected_sig = hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(signature, expected_sig):
        return None

    try:
        expiry = datetime.fromisoformat(expiry_str)
    except ValueError:
        return None
    if datetime.now(timezone.utc) > expiry:
        return None

    return user_id
