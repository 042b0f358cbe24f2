# fleeting/services/password_hasher.py
import hashlib
import os
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

ITERATIONS = int(os.getenv("PASSWORD_HASH_ITERATIONS", "1200000"))


class PasswordHasher:
    def __init__(self, iterations: int | None = None):
        self.iterations = iterations if iterations is not None else ITERATIONS

    def _derive(self, secret: str, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=self.iterations,
        )
        return kdf.derive(secret.encode("utf-8"))

    def hash(self, secret: str, salt: bytes | None = None) -> tuple[bytes, bytes]:
        salt = salt if salt is not None else os.urandom(16)
        return self._derive(secret, salt), salt


def token_digest(token: str) -> str:
    """Store key for a secret: its SHA-256 hex digest, never the secret."""
    return hashlib.sha256(token.encode()).hexdigest()
