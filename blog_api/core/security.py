"""
Password hashing utilities.

New hashes use ``bcrypt`` with the cost factor from ``BCRYPT_ROUNDS``.
``pbkdf2_sha256`` hashes still verify but are reported by ``needs_update``,
so a successful login replaces them with bcrypt.
"""

from passlib.context import CryptContext
from passlib.exc import UnknownHashError

from blog_api.core.config import settings

# bcrypt silently ignores everything past 72 bytes
BCRYPT_MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """One-way, salted password transform with a tunable cost factor."""

    def __init__(self, rounds: int = 10) -> None:
        self._context = CryptContext(
            schemes=["bcrypt", "pbkdf2_sha256"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, plaintext: str) -> str:
        """
        Hash a password using the default scheme.

        Args:
            plaintext: Plain text password

        Returns:
            Hashed password string
        """
        return self._context.hash(plaintext)

    def verify(self, plaintext: str, hashed: str | None) -> bool:
        """
        Verify a plain password against a stored hash.

        A mismatch is a normal ``False``. So is a value that is not a hash
        this context recognises.

        Args:
            plaintext: The plain text password
            hashed: The stored hash

        Returns:
            True if password matches, False otherwise
        """
        if not hashed:
            return False
        try:
            return self._context.verify(plaintext, hashed)
        except (UnknownHashError, ValueError):
            return False

    def needs_update(self, hashed: str) -> bool:
        """True when ``hashed`` uses a deprecated scheme or an out-of-policy cost."""
        try:
            return self._context.needs_update(hashed)
        except (UnknownHashError, ValueError):
            return False

    def dummy_verify(self) -> None:
        """Spend roughly the time of a real verify when no user was found."""
        self._context.dummy_verify()


password_hasher = PasswordHasher(rounds=settings.BCRYPT_ROUNDS)
