"""
Credential verification.

The user service does not compare passwords itself; it delegates to a
``CredentialVerifier``.  ``hash`` produces the value that is stored for
a new or reset password and ``verify`` checks a supplied password
against a stored value.

``PlainTextVerifier`` stores and compares passwords as plain text.  It
exists for compatibility with records written by earlier versions of
the service and is not secure; select ``Pbkdf2Verifier`` (PBKDF2-HMAC
with SHA-256, stored as ``salthex$hashhex``) via ``PASSWORD_SCHEME``
for new deployments.  Existing plain text records do not verify under
the PBKDF2 scheme.
"""

import hashlib
import hmac
import os
from abc import ABC, abstractmethod


class CredentialVerifier(ABC):
    """Produce and check stored password values."""

    @abstractmethod
    def verify(self, stored: str, supplied: str) -> bool: ...

    def hash(self, password: str) -> str:
        return password


class PlainTextVerifier(CredentialVerifier):
    """Exact plain text comparison."""

    def verify(self, stored: str, supplied: str) -> bool:
        if stored is None or supplied is None:
            return False
        return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))


class Pbkdf2Verifier(CredentialVerifier):
    """Salted PBKDF2-HMAC-SHA256 hashes."""

    def __init__(self, iterations: int = 100_000):
        self.iterations = iterations

    def hash(self, password: str) -> str:
        salt = os.urandom(16)
        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, self.iterations)
        return f"{salt.hex()}${dk.hex()}"

    def verify(self, stored: str, supplied: str) -> bool:
        if not stored or supplied is None:
            return False
        try:
            salt_hex, hash_hex = stored.split("$", 1)
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(hash_hex)
        except ValueError:
            return False
        dk = hashlib.pbkdf2_hmac("sha256", supplied.encode("utf-8"), salt, self.iterations)
        return hmac.compare_digest(dk, expected)


def get_credential_verifier(scheme: str) -> CredentialVerifier:
    """Return the verifier for a ``PASSWORD_SCHEME`` value (``plain`` or ``pbkdf2``)."""
    scheme = (scheme or "plain").lower()
    if scheme == "plain":
        return PlainTextVerifier()
    if scheme == "pbkdf2":
        return Pbkdf2Verifier()
    raise ValueError(f"Unsupported password scheme: {scheme}")
