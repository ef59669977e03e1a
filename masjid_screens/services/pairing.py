import secrets
import string

PAIRING_CODE_ALPHABET = string.digits + string.ascii_uppercase
PAIRING_CODE_LENGTH = 6


def generate_code(rng: secrets.SystemRandom | None = None) -> str:
    """Return a uniformly random pairing code, e.g. ``"AB12CD"``.

    Codes are short enough to type with a TV remote. Uniqueness is not
    guaranteed here; the screen registry re-checks live codes before
    persisting one.
    """
    source = rng or secrets.SystemRandom()
    return "".join(source.choice(PAIRING_CODE_ALPHABET) for _ in range(PAIRING_CODE_LENGTH))


def generate_api_key() -> str:
    # 256 bits, hex encoded.
    return secrets.token_hex(32)


def normalize_code(value: str | None) -> str:
    return (value or "").strip().upper()
