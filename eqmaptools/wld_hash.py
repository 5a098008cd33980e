"""Decoding of the XOR-obscured string table and strings inside WLD files."""

from __future__ import annotations

from itertools import cycle

_KEY = bytes((0x95, 0x3A, 0xC5, 0x2A, 0x95, 0x7A, 0x95, 0x6A))


def decode_string_hash(data: bytes | bytearray | memoryview) -> bytes:
    """XOR ``data`` with the repeating 8-byte WLD key; applying it twice restores the input."""
    return bytes(b ^ k for b, k in zip(bytes(data), cycle(_KEY)))