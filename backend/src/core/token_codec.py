"""Generation, hashing and display formatting of API tokens."""
import hashlib
import secrets

TOKEN_PREFIX = "wea_"
TOKEN_RANDOM_BYTES = 32
DISPLAY_PREFIX_LENGTH = 12

# token_urlsafe(32) yields 43 unpadded base64url characters
TOKEN_LENGTH = len(TOKEN_PREFIX) + 43


def generate_token() -> str:
    """
    Generate a new plaintext API token.

    The plaintext should only be shown once at creation; persist hash_token()
    of it instead.
    """
    return f"{TOKEN_PREFIX}{secrets.token_urlsafe(TOKEN_RANDOM_BYTES)}"


def hash_token(token: str) -> str:
    """Hash a token for storage and for comparison against stored hashes."""
    return hashlib.sha256(token.encode()).hexdigest()


def display_prefix(token: str) -> str:
    """First characters of a token, safe to show and log indefinitely."""
    return token[:DISPLAY_PREFIX_LENGTH]


def looks_like_api_token(value: str) -> bool:
    """True if value carries the API token prefix and the generated length."""
    return value.startswith(TOKEN_PREFIX) and len(value) == TOKEN_LENGTH
