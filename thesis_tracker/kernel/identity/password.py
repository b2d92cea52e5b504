"""
Password hashing utilities using bcrypt.

Used to confirm the actor's password before status changes.
"""

import bcrypt

# Number of rounds for bcrypt hashing (12 is secure default)
BCRYPT_ROUNDS = 12


class PasswordHasher:
    """Password hashing service."""

    @staticmethod
    def _truncate_password(password: str) -> bytes:
        """bcrypt only uses the first 72 bytes of a password."""
        return password.encode('utf-8')[:72]

    @staticmethod
    def hash(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password
            rounds: bcrypt cost factor

        Returns:
            Hashed password string
        """
        pwd_bytes = PasswordHasher._truncate_password(password)
        salt = bcrypt.gensalt(rounds=rounds)
        hashed = bcrypt.hashpw(pwd_bytes, salt)
        return hashed.decode('utf-8')

    @staticmethod
    def verify(plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            pwd_bytes = PasswordHasher._truncate_password(plain_password)
            hash_bytes = hashed_password.encode('utf-8')
            return bcrypt.checkpw(pwd_bytes, hash_bytes)
        except ValueError:
            return False


# Convenience functions
def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash a password."""
    return PasswordHasher.hash(password, rounds)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password."""
    return PasswordHasher.verify(plain_password, hashed_password)
