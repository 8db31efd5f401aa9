"""Detection of squashfs images."""

from __future__ import annotations

import hashlib
import struct

from .constants import Usage
from .core import IdInfo, IdMag, Probe

__all__ = ["probe_squashfs", "SQUASHFS_IDINFO"]

_SUPERBLOCK_SIZE = 96
_VERSION_OFFSET = 28
_BIG_ENDIAN_MAGICS = (b"sqsh", b"qshs")


def probe_squashfs(pr: Probe, mag: IdMag) -> bool:
    """Report the squashfs version and a UUID hashed from the superblock."""
    sb = pr.get_sb(mag, _SUPERBLOCK_SIZE)

    order = ">" if mag.magic in _BIG_ENDIAN_MAGICS else "<"
    major, minor = struct.unpack_from(order + "HH", sb, _VERSION_OFFSET)
    pr.set_version(f"{major}.{minor}")

    words = struct.unpack("<4I", hashlib.md5(sb).digest())
    pr.set_uuid_text("-".join(f"{word:08x}" for word in reversed(words)))
    return True


SQUASHFS_IDINFO = IdInfo(
    name="squashfs",
    usage=Usage.FILESYSTEM,
    probefunc=probe_squashfs,
    magics=(
        IdMag(b"sqsh"),  # big-endian legacy
        IdMag(b"hsqs"),  # little-endian / v4
        IdMag(b"qshs"),  # big-endian legacy with LZMA
        IdMag(b"shsq"),  # little-endian / v4 with LZMA
    ),
)