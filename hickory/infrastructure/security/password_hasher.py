# hickory/infrastructure/security/password_hasher.py
import base64
import binascii
import hashlib
import hmac
import os

from hickory.core.exceptions import ValidationError


class PasswordHasher:
    DEFAULT_ALGO = "pbkdf2_sha256"
    DEFAULT_ITERATIONS = 600_000
    SALT_BYTES = 16
    MIN_LENGTH = 8

    @classmethod
    def hash_password(
        cls, password: str, *, iterations: int | None = None
    ) -> tuple[str, str, str, int]:
        """Returns (hash, salt, algo, iterations), hash and salt base64 encoded."""
        if not password or len(password) < cls.MIN_LENGTH:
            raise ValidationError(f"Password must be at least {cls.MIN_LENGTH} characters.")

        it = iterations or cls.DEFAULT_ITERATIONS
        salt = os.urandom(cls.SALT_BYTES)
        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, it)

        return (
            base64.b64encode(dk).decode("ascii"),
            base64.b64encode(salt).decode("ascii"),
            cls.DEFAULT_ALGO,
            it,
        )

    @classmethod
    def verify_password(
        cls,
        password: str,
        *,
        password_hash: str,
        password_salt: str,
        iterations: int,
        algo: str,
    ) -> bool:
        if algo != cls.DEFAULT_ALGO:
            return False

        try:
            salt = base64.b64decode(password_salt.encode("ascii"), validate=True)
            expected = base64.b64decode(password_hash.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError):
            return False

        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
        return hmac.compare_digest(dk, expected)
