from flask import current_app

from rupay.extensions import bcrypt
from rupay.utils.exceptions import AuthError


def require_strong_password(password):
    min_length = current_app.config["MIN_PASSWORD_LENGTH"]
    if len(password or "") < min_length:
        raise AuthError(
            f"Password must be at least {min_length} characters",
            code="WEAK_PASSWORD",
            status=422,
        )


def hash_password(password: str) -> str:
    return bcrypt.generate_password_hash(password).decode("utf-8")


def check_password(password, hashed_password):
    if not password or not hashed_password:
        return False
    return bcrypt.check_password_hash(hashed_password, password)
