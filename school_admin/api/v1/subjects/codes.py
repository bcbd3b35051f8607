"""Subject code generation for subjects created from the master list."""

import secrets
from typing import Set


def generate_subject_code(taken: Set[str]) -> str:
    """
    Random 4-digit code (1000-9999) not present in ``taken``.

    Production-safe: uses secrets for the random part. Adds the new code to ``taken``.
    """
    if len(taken) >= 9000:
        raise ValueError("No subject codes left")
    while True:
        code = str(1000 + secrets.randbelow(9000))
        if code not in taken:
            taken.add(code)
            return code
