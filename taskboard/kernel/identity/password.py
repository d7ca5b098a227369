"""
bcrypt password hashing for the user store.
"""

import bcrypt

# bcrypt ignores everything past the first 72 bytes
MAX_PASSWORD_BYTES = 72
DEFAULT_ROUNDS = 12


class PasswordHasher:
    """
    Salted bcrypt hashes with a fixed cost.

    `verify_unknown_user` pays for one comparison against a throwaway hash,
    so a login for an unregistered email takes as long as a wrong password.
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS):
        self.rounds = rounds
        self._dummy_hash: str = ""

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:MAX_PASSWORD_BYTES]

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check. An unparseable stored hash never matches."""
        try:
            return bcrypt.checkpw(self._encode(password), password_hash.encode("utf-8"))
        except ValueError:
            return False

    def verify_unknown_user(self, password: str) -> None:
        if not self._dummy_hash:
            self._dummy_hash = self.hash("taskboard-unknown-user")
        self.verify(password, self._dummy_hash)


default_hasher = PasswordHasher()
