"""Random tokens for generated file names."""

import secrets

ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ+_1234567890"


def random_string(n):
    """Return ``n`` characters picked from ALPHABET with a CSPRNG."""
    if n < 0:
        raise ValueError(f"length must not be negative, got {n}")
    return "".join(secrets.choice(ALPHABET) for _ in range(n))
