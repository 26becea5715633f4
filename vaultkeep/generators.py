import base64
import secrets
import string

SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"
API_KEY_PREFIX = "vk_"


def generate_random_key(length: int) -> str:
    """``length`` random bytes as unpadded URL-safe base64."""
    return base64.urlsafe_b64encode(secrets.token_bytes(length)).decode().rstrip("=")


def generate_jwt_secret() -> str:
    return generate_random_key(32)


def generate_encryption_key() -> str:
    return generate_random_key(32)


def generate_api_key() -> str:
    return API_KEY_PREFIX + generate_random_key(24)


def generate_password(length: int = 24, include_symbols: bool = True) -> str:
    if length < 1:
        raise ValueError("Password length must be positive")
    chars = string.ascii_letters + string.digits
    if include_symbols:
        chars += SYMBOLS
    return ''.join(secrets.choice(chars) for _ in range(length))
