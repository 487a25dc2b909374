"""
Credential hashing for stored user records.

``PasswordHasher`` wraps bcrypt with a configurable work factor
(``BCRYPT_ROUNDS``); each hash carries its own salt.  ``burn`` spends the
same bcrypt work as a real check so that logins for unknown accounts take
as long as logins with a wrong password.
"""

from __future__ import annotations

from functools import cached_property

import bcrypt

# bcrypt only looks at the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """False for a wrong password or a stored hash bcrypt cannot parse."""
        try:
            matched = bcrypt.checkpw(password.encode(), password_hash.encode())
        except (ValueError, TypeError):
            matched = False
        return matched

    @cached_property
    def _placeholder_hash(self) -> str:
        return self.hash("placeholder-credential")

    def burn(self, password: str) -> bool:
        """Run a full verification against a throwaway hash; always False."""
        self.verify(password, self._placeholder_hash)
        return False


def password_too_long(password: str) -> bool:
    return len(password.encode()) > MAX_PASSWORD_BYTES
