"""CRC-32 checksum used to key file names inside PFS archives."""

from __future__ import annotations

_POLYNOMIAL = 0x04C11DB7
_MASK = 0xFFFFFFFF


def _build_table() -> tuple[int, ...]:
    table = []
    for value in range(256):
        acc = value << 24
        for _ in range(8):
            if acc & 0x80000000:
                acc = ((acc << 1) ^ _POLYNOMIAL) & _MASK
            else:
                acc = (acc << 1) & _MASK
        table.append(acc)
    return tuple(table)


_TABLE = _build_table()


def _to_signed(value: int) -> int:
    return value - (1 << 32) if value & 0x80000000 else value


def crc_update(crc: int, data: bytes | bytearray | memoryview) -> int:
    """Feed ``data`` into a running CRC and return the new value as a signed 32-bit int."""
    crc &= _MASK
    for byte in bytes(data):
        crc = ((crc << 8) & _MASK) ^ _TABLE[((crc >> 24) ^ byte) & 0xFF]
    return _to_signed(crc)


def filename_crc(name: str | bytes) -> int:
    """Return the archive checksum of a file name.

    The checksum covers the name's bytes plus a terminating NUL byte; an
    empty name has checksum 0. A ``str`` is encoded as latin-1 so that
    names decoded byte-for-byte from an archive map back to the same bytes.
    """
    raw = name.encode("latin-1") if isinstance(name, str) else bytes(name)
    if not raw:
        return 0
    return crc_update(0, raw + b"\x00")