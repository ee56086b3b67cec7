# ================================
# FILE: incident_edge/security.py
# ================================
from passlib.context import CryptContext

DEFAULT_ROUNDS = 12


class MalformedCredential(ValueError):
    """The stored credential is not a hash this context can read."""


class CredentialHasher:
    """Password hashing for stored user credentials.

    New credentials use ``bcrypt_sha256``: the password is pre-hashed with
    SHA-256 so every byte counts, then run through bcrypt. The resulting
    string carries its own salt and cost, so nothing else needs storing.

    Plain ``bcrypt`` hashes (what older deployments stored) still verify,
    but are marked deprecated so ``verify_and_update`` hands back a
    replacement credential on a successful login.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self._context = CryptContext(
            schemes=["bcrypt_sha256", "bcrypt"],
            deprecated="auto",
            bcrypt_sha256__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, credential: str) -> bool:
        try:
            return self._context.verify(password, credential)
        except (ValueError, TypeError) as e:
            raise MalformedCredential(str(e)) from e

    def verify_and_update(self, password: str, credential: str) -> tuple[bool, str | None]:
        """Like :meth:`verify`, also returning a fresh credential when the
        stored one uses a deprecated scheme or cost (``None`` otherwise)."""
        try:
            return self._context.verify_and_update(password, credential)
        except (ValueError, TypeError) as e:
            raise MalformedCredential(str(e)) from e
