import zlib

from .errors import CorruptData


def compress(data: bytes) -> bytes:
    return zlib.compress(data)


def decompress(data: bytes) -> bytes:
    # zlib.decompress ignores bytes past the end of the stream, so use a
    # decompress object to catch truncation and trailing garbage.
    d = zlib.decompressobj()
    try:
        out = d.decompress(data) + d.flush()
    except zlib.error as e:
        raise CorruptData(f"invalid compressed data: {e}") from e
    if not d.eof:
        raise CorruptData("truncated compressed data")
    if d.unused_data:
        raise CorruptData("trailing bytes after compressed data")
    return out
