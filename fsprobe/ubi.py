"""Detection of UBI volumes, UBIFS and JFFS2 filesystems."""

from __future__ import annotations

import struct

from .constants import Usage
from .core import IdInfo, IdMag, Probe

__all__ = [
    "probe_ubi",
    "probe_ubifs",
    "probe_jffs2",
    "UBI_IDINFO",
    "UBIFS_IDINFO",
    "JFFS2_IDINFO",
]

_UBI_EC_HDR_SIZE = 64
_UBIFS_SB_SIZE = 4096


def probe_ubi(pr: Probe, mag: IdMag) -> bool:
    """Report the UBI header version and the image sequence as UUID."""
    hdr = pr.get_sb(mag, _UBI_EC_HDR_SIZE)
    pr.set_version(str(hdr[4]))
    (image_seq,) = struct.unpack_from(">I", hdr, 24)
    pr.set_uuid_text(str(image_seq))
    return True


def probe_ubifs(pr: Probe, mag: IdMag) -> bool:
    """Report the UBIFS UUID and its write/read-only format versions."""
    sb = pr.get_sb(mag, _UBIFS_SB_SIZE)
    pr.set_uuid(sb[108:124])
    (fmt_version,) = struct.unpack_from("<i", sb, 80)
    (ro_compat,) = struct.unpack_from("<i", sb, 124)
    pr.set_version(f"w{fmt_version}r{ro_compat}")
    return True


def probe_jffs2(pr: Probe, mag: IdMag) -> bool:
    """Accept any JFFS2 node magic; no further details are read."""
    return True


UBI_IDINFO = IdInfo(
    name="ubi",
    usage=Usage.RAID,
    probefunc=probe_ubi,
    magics=(IdMag(b"UBI#"),),
)

UBIFS_IDINFO = IdInfo(
    name="ubifs",
    usage=Usage.FILESYSTEM,
    probefunc=probe_ubifs,
    magics=(IdMag(b"\x31\x18\x10\x06"),),
)

JFFS2_IDINFO = IdInfo(
    name="jffs2",
    usage=Usage.FILESYSTEM,
    probefunc=probe_jffs2,
    magics=(IdMag(b"\x19\x85"), IdMag(b"\x85\x19")),
)