"""Detection of Linux swap areas and software-suspend images."""

from __future__ import annotations

import struct

from .constants import Usage, swab32
from .core import IdInfo, IdMag, Probe

__all__ = [
    "probe_swap",
    "probe_swsuspend",
    "SWAP_IDINFO",
    "SWSUSPEND_IDINFO",
    "TOI_MAGIC",
]

TOI_MAGIC = b"\xed\xc3\x02\xe9\x98\x56\xe5\x0c"

# The swap header follows 1024 bytes of boot space.
_HEADER_OFFSET = 1024
_HEADER_SIZE = 516
_UUID = slice(12, 28)
_VOLUME = slice(28, 44)
# padding[32] and padding[33]: must be zero for label and UUID to be trusted.
_SANITY = slice(44 + 32 * 4, 44 + 34 * 4)

_PAGE_OFFSETS = (0xFF6, 0x1FF6, 0x3FF6, 0x7FF6, 0xFFF6)

_SUSPEND_VERSIONS = {
    b"S1SUSPEND": "s1suspend",
    b"S2SUSPEND": "s2suspend",
    b"ULSUSPEND": "ulsuspend",
    TOI_MAGIC: "tuxonice",
    b"LINHIB0001": "linhib0001",
}


def _set_info(pr: Probe, version: str) -> bool:
    hdr = pr.get_buffer(_HEADER_OFFSET, _HEADER_SIZE)

    if version == "1":
        (raw_version,) = struct.unpack_from("<I", hdr, 0)
        if raw_version != 1 and swab32(raw_version) != 1:
            return False
        if hdr[4:8] == bytes(4):
            return False

    if hdr[_SANITY] == bytes(8):
        volume = hdr[_VOLUME]
        if volume[0]:
            pr.set_label(volume)
        pr.set_uuid(hdr[_UUID])

    pr.set_version(version)
    return True


def probe_swap(pr: Probe, mag: IdMag) -> bool:
    """Recognise a swap area; version 1 areas also yield label and UUID."""
    if mag is None:
        return False
    if pr.get_buffer(0, len(TOI_MAGIC)) == TOI_MAGIC:
        # TuxOnIce keeps a valid swap header at the end of the first page.
        return False
    if mag.magic == b"SWAP-SPACE":
        pr.set_version("0")
        return True
    if mag.magic == b"SWAPSPACE2":
        return _set_info(pr, "1")
    return False


def probe_swsuspend(pr: Probe, mag: IdMag) -> bool:
    """Recognise a hibernation image written into a swap area."""
    if mag is None:
        return False
    version = _SUSPEND_VERSIONS.get(mag.magic)
    if version is None:
        return False
    return _set_info(pr, version)


SWAP_IDINFO = IdInfo(
    name="swap",
    usage=Usage.OTHER,
    probefunc=probe_swap,
    minsz=10 * 4096,
    magics=tuple(
        IdMag(magic, 0, offset)
        for offset in _PAGE_OFFSETS
        for magic in (b"SWAP-SPACE", b"SWAPSPACE2")
    ),
)

SWSUSPEND_IDINFO = IdInfo(
    name="swsuspend",
    usage=Usage.OTHER,
    probefunc=probe_swsuspend,
    minsz=10 * 4096,
    magics=(IdMag(TOI_MAGIC, 0, 0),)
    + tuple(
        IdMag(magic, 0, offset)
        for offset in _PAGE_OFFSETS
        for magic in (b"S1SUSPEND", b"S2SUSPEND", b"ULSUSPEND", b"LINHIB0001")
    ),
)