import hashlib
import string

HEX_LENGTH = 40


def digest(data: bytes) -> bytes:
    return hashlib.sha1(data).digest()


def hexdigest(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def is_hex_digest(value) -> bool:
    return (
        isinstance(value, str)
        and len(value) == HEX_LENGTH
        and all(c in string.hexdigits for c in value)
    )
