"""Loading the fragment list of a WLD file, either raw or from inside a PFS archive."""

from __future__ import annotations

import os
import struct

from .pfs import PfsArchive, PfsError
from .wld_fragment import FragmentError, parse_fragment
from .wld_hash import decode_string_hash
from .wld_model import WldFragment

WLD_MAGIC = 0x54503D02
OLD_VERSION = 0x00015500

# magic, version, fragment count, region count, unknown, hash length, unknown
_HEADER = struct.Struct("<7I")
# size (counts the name reference and the body), type id, name reference
_FRAGMENT_HEADER = struct.Struct("<IIi")


class WldError(ValueError):
    """Raised when a WLD file cannot be found, read or decoded."""


def _slice(data: bytes, pos: int, length: int, what: str) -> bytes:
    if length < 0 or pos + length > len(data):
        raise WldError(f"WLD data truncated in {what} at offset {pos}")
    return data[pos : pos + length]


def parse_wld(data: bytes) -> list[WldFragment]:
    """Decode every fragment of a WLD file, in file order.

    Fragments may refer to earlier ones; each is decoded with the list of
    those already decoded. Unknown fragment types yield a fragment with no data.
    """
    data = bytes(data)
    header = _slice(data, 0, _HEADER.size, "header")
    magic, version, count, _, _, hash_length, _ = _HEADER.unpack(header)
    if magic != WLD_MAGIC:
        raise WldError(f"header magic of {magic:#x} did not match expected {WLD_MAGIC:#x}")
    old = version == OLD_VERSION

    pos = _HEADER.size
    string_hash = decode_string_hash(_slice(data, pos, hash_length, "string hash"))
    pos += hash_length

    fragments: list[WldFragment] = []
    for _ in range(count):
        raw = _slice(data, pos, _FRAGMENT_HEADER.size, "fragment header")
        size, type_id, name_ref = _FRAGMENT_HEADER.unpack(raw)
        pos += _FRAGMENT_HEADER.size
        if size < 4:
            raise WldError(f"fragment of type {type_id:#x} has invalid size {size}")
        body_length = size - 4
        body = _slice(data, pos, body_length, f"fragment of type {type_id:#x}")
        try:
            fragment = parse_fragment(fragments, type_id, body, name_ref, string_hash, old)
        except FragmentError as exc:
            raise WldError(f"bad fragment {len(fragments) + 1} of type {type_id:#x}: {exc}") from exc
        fragments.append(fragment)
        pos += body_length
    return fragments


def load_wld(archive_path: str | os.PathLike[str], wld_name: str) -> list[WldFragment]:
    """Open a PFS archive and decode the named WLD file inside it."""
    try:
        archive = PfsArchive.load(archive_path)
    except PfsError as exc:
        raise WldError(f"unable to open file {os.fspath(archive_path)}: {exc}") from exc
    try:
        data = archive.get(wld_name)
    except (KeyError, PfsError) as exc:
        raise WldError(f"unable to open wld file {wld_name}") from exc
    return parse_wld(data)