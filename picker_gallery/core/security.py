"""Admin credential checks and password hashing helpers."""

import secrets

from passlib.context import CryptContext

from .config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def admin_auth_configured() -> bool:
    """Return True when an admin username and a password or hash are set."""
    return bool(settings.admin_username and (settings.admin_password_hash or settings.admin_password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plaintext password against a stored hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using the configured context."""
    return pwd_context.hash(password)


def verify_admin_credentials(username: str, password: str) -> bool:
    """Check operator credentials against the configured admin account."""
    if not admin_auth_configured():
        return False
    username_ok = secrets.compare_digest(username.encode("utf-8"), (settings.admin_username or "").encode("utf-8"))
    if settings.admin_password_hash:
        password_ok = verify_password(password, settings.admin_password_hash)
    else:
        password_ok = secrets.compare_digest(
            password.encode("utf-8"), (settings.admin_password or "").encode("utf-8")
        )
    return username_ok and password_ok
