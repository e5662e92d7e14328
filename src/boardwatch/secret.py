"""Generate a random webhook secret for the GitHub App."""

from __future__ import annotations

import secrets
import string

KEY_LENGTH_BITS = 256

_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_secret(bits: int = KEY_LENGTH_BITS) -> str:
    """Return ``bits`` random bits encoded in base 36."""
    key = secrets.token_bytes(bits // 8)
    return to_base36(int.from_bytes(key, "big"))


def main() -> None:
    print(generate_secret())


if __name__ == "__main__":
    main()
