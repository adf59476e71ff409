"""Password hashing (bcrypt) and strength policy."""

import re
from dataclasses import dataclass, field
from typing import List

import bcrypt

SPECIAL_CHARACTERS = "@$!%*?&"

# bcrypt only looks at the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


@dataclass
class PasswordStrength:
    valid: bool
    score: int
    feedback: List[str] = field(default_factory=list)


class PasswordHasher:
    """bcrypt wrapper with a configurable work factor."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        if not password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(
                password.encode("utf-8")[:_BCRYPT_MAX_BYTES], password_hash.encode("utf-8")
            )
        except ValueError:
            # malformed stored hash
            return False


def validate_password_strength(password: str) -> PasswordStrength:
    """Score a password one point per satisfied rule; 4 or more is acceptable.

    >>> validate_password_strength("Sup3r$ecret!").valid
    True
    >>> validate_password_strength("password").score
    2
    """
    feedback: List[str] = []
    score = 0

    if len(password) >= 8:
        score += 1
    else:
        feedback.append("Password must be at least 8 characters long")

    if re.search(r"[a-z]", password):
        score += 1
    else:
        feedback.append("Password must contain lowercase letters")

    if re.search(r"[A-Z]", password):
        score += 1
    else:
        feedback.append("Password must contain uppercase letters")

    if re.search(r"\d", password):
        score += 1
    else:
        feedback.append("Password must contain numbers")

    if any(ch in SPECIAL_CHARACTERS for ch in password):
        score += 1
    else:
        feedback.append("Password must contain special characters")

    if len(password) >= 12:
        score += 1

    return PasswordStrength(valid=score >= 4, score=score, feedback=feedback)
