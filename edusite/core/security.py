"""Password hashing and session-token issuance/signing for cookie authentication."""

import hashlib
import hmac
import re
import secrets

from itsdangerous import BadSignature, Signer

from edusite.core.config import settings

# scrypt parameters. Stored hashes carry no parameters, so these are fixed.
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
SCRYPT_KEY_LEN = 64
# OpenSSL needs ~128 * r * N bytes; leave headroom above its 32 MiB default.
SCRYPT_MAXMEM = 256 * SCRYPT_R * SCRYPT_N
SALT_BYTES = 16
HASH_SEPARATOR = "."
_HEX_RE = re.compile(r"(?:[0-9a-fA-F]{2})+")

# Min lengths for registration input (username/full name are trimmed first).
USERNAME_MIN_LEN = 3
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 6
FULL_NAME_MAX_LEN = 255

SESSION_TOKEN_BYTES = 32
SESSION_SIGNER_SALT = "edusite.session.v1"


def _derive(password: str, salt_hex: str) -> bytes:
    # The salt's hex text is the KDF salt input; hashes written by the
    # previous Node service use the same convention and keep verifying.
    return hashlib.scrypt(
        password.encode("utf-8", errors="surrogatepass"),
        salt=salt_hex.encode("ascii"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        maxmem=SCRYPT_MAXMEM,
        dklen=SCRYPT_KEY_LEN,
    )


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage as ``hex(key).hex(salt)``. Do not store plain passwords."""
    salt_hex = secrets.token_hex(SALT_BYTES)
    return f"{_derive(plain_password, salt_hex).hex()}{HASH_SEPARATOR}{salt_hex}"


def verify_password(plain_password: str, hashed: str) -> bool:
    """
    Verify a plain password against a stored hash in constant time.
    Returns False for malformed stored hashes instead of raising.
    """
    if not isinstance(hashed, str) or hashed.count(HASH_SEPARATOR) != 1:
        return False
    key_hex, salt_hex = hashed.split(HASH_SEPARATOR)
    if not _HEX_RE.fullmatch(key_hex) or not _HEX_RE.fullmatch(salt_hex):
        return False
    expected = bytes.fromhex(key_hex)
    if len(expected) != SCRYPT_KEY_LEN:
        return False
    return hmac.compare_digest(expected, _derive(plain_password, salt_hex))


# Built at import so the first unknown-username login costs the same as later ones.
_DUMMY_PASSWORD_HASH = hash_password(secrets.token_urlsafe(16))


def dummy_password_hash() -> str:
    """Hash compared against when a username does not exist, so both failure paths cost one derivation."""
    return _DUMMY_PASSWORD_HASH


def new_session_token() -> str:
    """Opaque random session identifier (never derived from user data)."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


def _signer() -> Signer:
    return Signer(settings.SESSION_SECRET.get_secret_value(), salt=SESSION_SIGNER_SALT)


def sign_session_token(token: str) -> str:
    """Return the cookie value for a session token."""
    return _signer().sign(token).decode("utf-8")


def unsign_session_token(cookie_value: str | None) -> str | None:
    """Return the session token carried by a cookie value, or None if absent or tampered with."""
    if not cookie_value:
        return None
    try:
        return _signer().unsign(cookie_value).decode("utf-8")
    except BadSignature:
        return None
