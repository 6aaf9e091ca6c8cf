"""
One-way password hashing.

``Pbkdf2Hasher`` stores hashes as ``pbkdf2_sha256$<rounds>$<salt>$<digest>``
so the round count travels with the value and ``needs_rehash`` can compare
it against the current setting.
"""

import base64
import hashlib
import hmac
import secrets
from abc import ABC, abstractmethod
from typing import Optional


class Hasher(ABC):
    """Abstract one-way hash primitive."""

    @abstractmethod
    def make(self, value: str, rounds: Optional[int] = None) -> str:
        pass

    @abstractmethod
    def check(self, value: str, hashed: str) -> bool:
        pass

    @abstractmethod
    def needs_rehash(self, hashed: str, rounds: Optional[int] = None) -> bool:
        pass


class Pbkdf2Hasher(Hasher):
    algorithm = "pbkdf2_sha256"
    salt_bytes = 16

    def __init__(self, rounds: int = 260000):
        self.rounds = rounds

    def make(self, value: str, rounds: Optional[int] = None) -> str:
        rounds = rounds or self.rounds
        salt = secrets.token_hex(self.salt_bytes)
        return f"{self.algorithm}${rounds}${salt}${self._digest(value, salt, rounds)}"

    def check(self, value: str, hashed: str) -> bool:
        parts = self._split(hashed)
        if parts is None:
            return False
        rounds, salt, digest = parts
        return hmac.compare_digest(self._digest(value, salt, rounds), digest)

    def needs_rehash(self, hashed: str, rounds: Optional[int] = None) -> bool:
        parts = self._split(hashed)
        if parts is None:
            return True
        return parts[0] != (rounds or self.rounds)

    def _digest(self, value: str, salt: str, rounds: int) -> str:
        raw = hashlib.pbkdf2_hmac("sha256", str(value).encode("utf-8"), salt.encode("ascii"), rounds)
        return base64.b64encode(raw).decode("ascii")

    def _split(self, hashed: str):
        try:
            algorithm, rounds, salt, digest = str(hashed).split("$", 3)
            if algorithm != self.algorithm:
                return None
            return int(rounds), salt, digest
        except ValueError:
            return None

    def is_hashed(self, value: str) -> bool:
        return self._split(value) is not None
