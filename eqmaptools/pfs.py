"""Reading and writing PFS archives (the S3D/EQG container format)."""

from __future__ import annotations

import os
import string
import struct
import zlib
from dataclasses import dataclass

from .pfs_crc import filename_crc

MAX_BLOCK_SIZE = 8192
"""Largest uncompressed block; the game client crashes on bigger ones."""

_MAGIC = b"PFS "
_HEADER_VERSION = 131072
_FILENAME_TABLE_CRC = 0x61580AC9
_FOOTER_MAGIC = b"STEVE"

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_U32 = struct.Struct("<I")
_DIR_ENTRY = struct.Struct("<iII")


class PfsError(Exception):
    """Raised when an archive cannot be read, written or changed."""


@dataclass(frozen=True)
class _StoredFile:
    blocks: bytes
    size: int


def _normalise(name: str) -> str:
    return name.translate(_ASCII_LOWER)


def _read_u32(buffer: bytes, pos: int) -> int:
    if pos < 0 or pos + 4 > len(buffer):
        raise PfsError(f"unexpected end of data at offset {pos}")
    return _U32.unpack_from(buffer, pos)[0]


def _read_bytes(buffer: bytes, pos: int, length: int) -> bytes:
    if pos < 0 or pos + length > len(buffer):
        raise PfsError(f"unexpected end of data at offset {pos}")
    return buffer[pos : pos + length]


def _deflate_blocks(data: bytes) -> bytes:
    out = bytearray()
    for start in range(0, len(data), MAX_BLOCK_SIZE):
        chunk = data[start : start + MAX_BLOCK_SIZE]
        packed = zlib.compress(chunk)
        out += _U32.pack(len(packed))
        out += _U32.pack(len(chunk))
        out += packed
    return bytes(out)


def _inflate_blocks(buffer: bytes, offset: int, size: int) -> bytes:
    out = bytearray()
    position = offset
    inflated = 0
    while inflated < size:
        deflate_length = _read_u32(buffer, position)
        inflate_length = _read_u32(buffer, position + 4)
        if inflate_length == 0:
            raise PfsError(f"empty data block at offset {position}")
        packed = _read_bytes(buffer, position + 8, deflate_length)
        try:
            chunk = zlib.decompress(packed)
        except zlib.error as exc:
            raise PfsError(f"corrupt data block at offset {position}: {exc}") from exc
        out += chunk[:inflate_length].ljust(inflate_length, b"\x00")
        inflated += inflate_length
        position += deflate_length + 8
    return bytes(out[:size].ljust(size, b"\x00"))


def _block_span(buffer: bytes, offset: int, size: int) -> bytes:
    position = offset
    inflated = 0
    while inflated < size:
        deflate_length = _read_u32(buffer, position)
        inflate_length = _read_u32(buffer, position + 4)
        if inflate_length == 0:
            raise PfsError(f"empty data block at offset {position}")
        inflated += inflate_length
        position += deflate_length + 8
    return _read_bytes(buffer, offset, position - offset)


class PfsArchive:
    """An in-memory PFS archive of compressed files keyed by lower-case name.

    ``footer_date`` is the date stamp written in the archive footer; ``None``
    means the archive has no footer.
    """

    def __init__(self, footer_date: int | None = None) -> None:
        self.footer_date = footer_date
        self._files: dict[str, _StoredFile] = {}

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> PfsArchive:
        """Read an archive from disk."""
        try:
            with open(path, "rb") as fh:
                buffer = fh.read()
        except OSError as exc:
            raise PfsError(f"cannot read archive {os.fspath(path)!r}: {exc}") from exc
        return cls._from_bytes(buffer)

    @classmethod
    def _from_bytes(cls, buffer: bytes) -> PfsArchive:
        dir_offset = _read_u32(buffer, 0)
        if _read_bytes(buffer, 4, 4) != _MAGIC:
            raise PfsError("not a PFS archive")

        dir_count = _read_u32(buffer, dir_offset)
        directory: list[tuple[int, int, int]] = []
        names: list[tuple[int, str]] = []
        for index in range(dir_count):
            entry_pos = dir_offset + 4 + index * _DIR_ENTRY.size
            _read_bytes(buffer, entry_pos, _DIR_ENTRY.size)
            crc, offset, size = _DIR_ENTRY.unpack_from(buffer, entry_pos)
            if crc == _FILENAME_TABLE_CRC:
                names.extend(cls._parse_filename_table(_inflate_blocks(buffer, offset, size)))
            else:
                directory.append((crc, offset, size))

        archive = cls()
        for crc, offset, size in directory:
            name = next((n for n_crc, n in names if n_crc == crc), None)
            if name is not None:
                archive._files[name] = _StoredFile(_block_span(buffer, offset, size), size)

        footer_offset = dir_offset + 4 + _DIR_ENTRY.size * dir_count
        if footer_offset != len(buffer):
            _read_bytes(buffer, footer_offset, len(_FOOTER_MAGIC))
            archive.footer_date = _read_u32(buffer, footer_offset + len(_FOOTER_MAGIC))
        return archive

    @staticmethod
    def _parse_filename_table(table: bytes) -> list[tuple[int, str]]:
        count = _read_u32(table, 0)
        pos = 4
        entries = []
        for _ in range(count):
            length = _read_u32(table, pos)
            pos += 4
            raw = _read_bytes(table, pos, length)
            pos += length
            name = _normalise(raw[: max(length - 1, 0)].decode("latin-1"))
            entries.append((filename_crc(name), name))
        return entries

    def to_bytes(self) -> bytes:
        """Serialise the archive to its on-disk form."""
        buffer = bytearray()
        buffer += _U32.pack(0)
        buffer += _MAGIC
        buffer += _U32.pack(_HEADER_VERSION)

        entries: list[tuple[int, int, int]] = []
        names = bytearray(_U32.pack(len(self._files)))
        for name in sorted(self._files):
            stored = self._files[name]
            entries.append((filename_crc(name), len(buffer), stored.size))
            buffer += stored.blocks
            raw = name.encode("latin-1")
            names += _U32.pack(len(raw) + 1)
            names += raw + b"\x00"

        names_offset = len(buffer)
        buffer += _deflate_blocks(bytes(names))

        dir_offset = len(buffer)
        buffer[0:4] = _U32.pack(dir_offset)
        buffer += _U32.pack(len(entries) + 1)
        for crc, offset, size in entries:
            buffer += _DIR_ENTRY.pack(crc, offset, size)
        buffer += _DIR_ENTRY.pack(_FILENAME_TABLE_CRC, names_offset, len(names))

        if self.footer_date is not None:
            buffer += _FOOTER_MAGIC
            buffer += _U32.pack(self.footer_date & 0xFFFFFFFF)
        return bytes(buffer)

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write the archive to disk."""
        data = self.to_bytes()
        try:
            with open(path, "wb") as fh:
                fh.write(data)
        except OSError as exc:
            raise PfsError(f"cannot write archive {os.fspath(path)!r}: {exc}") from exc

    def clear(self) -> None:
        """Remove every file and the footer."""
        self.footer_date = None
        self._files.clear()

    def get(self, name: str) -> bytes:
        """Return the uncompressed contents of a file; ``KeyError`` if absent."""
        stored = self._files[_normalise(name)]
        return _inflate_blocks(stored.blocks, 0, stored.size)

    def set(self, name: str, data: bytes) -> None:
        """Store ``data`` under ``name``, replacing any existing file."""
        data = bytes(data)
        self._files[_normalise(name)] = _StoredFile(_deflate_blocks(data), len(data))

    def delete(self, name: str) -> None:
        """Remove a file if it is present."""
        self._files.pop(_normalise(name), None)

    def rename(self, name: str, new_name: str) -> None:
        """Rename a file; fails if the target exists or the source does not."""
        old_key, new_key = _normalise(name), _normalise(new_name)
        if new_key in self._files:
            raise PfsError(f"file {new_key!r} already exists")
        if old_key not in self._files:
            raise KeyError(old_key)
        self._files[new_key] = self._files.pop(old_key)

    def exists(self, name: str) -> bool:
        """Whether a file of that name is stored."""
        return _normalise(name) in self._files

    def filenames(self, ext: str = "*") -> list[str]:
        """Sorted names ending in ``ext`` (longer than it), or all names for ``"*"``."""
        ext = _normalise(ext)
        if ext == "*":
            return sorted(self._files)
        return sorted(n for n in self._files if len(n) > len(ext) and n.endswith(ext))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.exists(name)

    def __len__(self) -> int:
        return len(self._files)