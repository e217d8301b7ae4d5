import zlib

import pytest

from objgit import CorruptData
from objgit.compressor import compress, decompress


@pytest.mark.parametrize("data", [b"", b"hello", bytes(range(256)) * 40])
def test_round_trip(data):
    assert decompress(compress(data)) == data


def test_output_is_zlib_stream():
    assert zlib.decompress(compress(b"blob 0\0")) == b"blob 0\0"


def test_truncated_stream():
    packed = compress(b"some content that compresses" * 10)
    with pytest.raises(CorruptData):
        decompress(packed[:-6])


def test_bad_checksum():
    packed = bytearray(compress(b"checksummed"))
    packed[-1] ^= 0xFF
    with pytest.raises(CorruptData):
        decompress(bytes(packed))


def test_invalid_header():
    with pytest.raises(CorruptData):
        decompress(b"not compressed at all")


def test_empty_input():
    with pytest.raises(CorruptData):
        decompress(b"")


def test_trailing_garbage():
    with pytest.raises(CorruptData):
        decompress(compress(b"abc") + b"extra")
