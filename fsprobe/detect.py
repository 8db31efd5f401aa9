"""Signature scanning over all known filesystem probers."""

from __future__ import annotations

import functools
import os
import re
import stat
import struct

from .core import IdInfo, Probe, ProbeError, Source
from .hfs import HFS_IDINFO, HFSPLUS_IDINFO
from .ntfs import NTFS_IDINFO
from .squashfs import SQUASHFS_IDINFO
from .swap import SWAP_IDINFO, SWSUSPEND_IDINFO
from .ubi import JFFS2_IDINFO, UBI_IDINFO, UBIFS_IDINFO
from .vfat import VFAT_IDINFO

__all__ = ["IDINFOS", "kernel_version", "get_linux_version", "probe_file", "probe_block"]

# Probers in the order they are tried.
IDINFOS: tuple[IdInfo, ...] = (
    VFAT_IDINFO,
    SWSUSPEND_IDINFO,
    SWAP_IDINFO,
    NTFS_IDINFO,
    SQUASHFS_IDINFO,
    UBI_IDINFO,
    UBIFS_IDINFO,
    JFFS2_IDINFO,
    HFSPLUS_IDINFO,
    HFS_IDINFO,
)

_RELEASE = re.compile(r"\s*([+-]?\d+)(?:\.\s*([+-]?\d+)(?:\.\s*([+-]?\d+))?)?")


def kernel_version(major: int, minor: int, patch: int) -> int:
    """Pack a kernel version into a single comparable integer."""
    return (major << 16) + (minor << 8) + patch


@functools.lru_cache(maxsize=None)
def get_linux_version() -> int:
    """Return the running kernel's packed version, or 0 if it is unknown."""
    try:
        release = os.uname().release
    except (AttributeError, OSError):
        return 0
    match = _RELEASE.match(release)
    if match is None:
        return 0
    parts = [int(group) for group in match.groups() if group is not None]
    parts.extend([0] * (3 - len(parts)))
    return kernel_version(*parts)


def probe_file(source: Source) -> Probe:
    """Try every prober on ``source`` and return the probe with the result.

    ``probe.id`` names the last prober whose magic matched and ``probe.err``
    is False when that prober recognised the filesystem.
    """
    probe = Probe(source)
    with probe:
        for info in IDINFOS:
            mag = info.match(probe)
            if mag is None:
                continue
            try:
                found = bool(info.probefunc(probe, mag))
            except (ProbeError, struct.error):
                found = False
            probe.id = info
            probe.err = not found
            if found:
                break
    return probe


def probe_block(path: str | os.PathLike) -> Probe:
    """Probe the block device or image file at ``path``."""
    try:
        st = os.stat(path)
    except OSError as exc:
        raise ProbeError(f"cannot stat {path}: {exc}") from exc
    name = os.fspath(path)
    if (not stat.S_ISBLK(st.st_mode) and not stat.S_ISREG(st.st_mode)
            and str(name).startswith("ubi")):
        raise ProbeError(f"{name} is neither a block device nor a file")
    return probe_file(path)