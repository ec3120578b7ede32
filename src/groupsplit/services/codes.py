from __future__ import annotations

import secrets
import string

CODE_ALPHABET = string.ascii_lowercase + string.digits


def generate_group_code(length: int = 8) -> str:
    if length < 5:
        raise ValueError("group codes must be at least 5 characters long")
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))
