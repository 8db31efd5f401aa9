"""Detection of FAT12, FAT16 and FAT32 filesystems."""

from __future__ import annotations

import struct
from typing import NamedTuple, Optional

from .constants import Usage
from .core import IdInfo, IdMag, Probe, ProbeError

__all__ = ["probe_vfat", "VFAT_IDINFO", "FAT12_MAX", "FAT16_MAX", "FAT32_MAX"]

# Maximum number of clusters for each FAT variant.
FAT12_MAX = 0xFF4
FAT16_MAX = 0xFFF4
FAT32_MAX = 0x0FFFFFF6

_SUPERBLOCK_SIZE = 512
_FSINFO_SIZE = 512

_DIR_ENTRY = struct.Struct("<11sB8xH4xH4x")
_ATTR_VOLUME_ID = 0x08
_ATTR_DIR = 0x10
_ATTR_LONG_NAME = 0x0F
_ATTR_MASK = 0x3F
_ENTRY_FREE = 0xE5

# Offsets shared by the FAT12/16 and FAT32 boot sectors.
_SECTOR_SIZE = 0x0B
_CLUSTER_SIZE = 0x0D
_RESERVED = 0x0E
_FATS = 0x10
_DIR_ENTRIES = 0x11
_SECTORS = 0x13
_MEDIA = 0x15
_FAT_LENGTH = 0x16
_TOTAL_SECT = 0x20
_PMAGIC = slice(0x1FE, 0x200)

# FAT12/16 extended boot record.
_MS_SERNO = slice(0x27, 0x2B)
_MS_MAGIC = slice(0x36, 0x3E)

# FAT32 extended boot record.
_VS_FAT32_LENGTH = 0x24
_VS_ROOT_CLUSTER = 0x2C
_VS_FSINFO_SECTOR = 0x30
_VS_SERNO = slice(0x43, 0x47)

_FSINFO_SIG1 = slice(0, 4)
_FSINFO_SIG2 = slice(484, 488)
_FSINFO_SIG1_VALID = (b"RRaA", b"RRdA", bytes(4))
_FSINFO_SIG2_VALID = (b"rrAa", bytes(4))

_FOREIGN_MAGICS = (b"JFS     ", b"HPFS    ")
_MAX_CHAIN = 100
_U32 = 0xFFFFFFFF


class _Geometry(NamedTuple):
    cluster_count: int
    fat_size: int


def _le16(buf: bytes, offset: int) -> int:
    return struct.unpack_from("<H", buf, offset)[0]


def _le32(buf: bytes, offset: int) -> int:
    return struct.unpack_from("<I", buf, offset)[0]


def _is_power_of_2(value: int) -> bool:
    return value != 0 and value & (value - 1) == 0


def _geometry(mag: IdMag, sb: bytes) -> Optional[_Geometry]:
    """Validate the boot sector; return its cluster count and FAT size."""
    if mag.length <= 2:
        # Magic-less FATs: old floppies carry a valid MBR signature.
        if sb[_PMAGIC] != b"\x55\xaa":
            return None
        # Some tools put a FAT-like pseudo header in front of JFS and HPFS.
        if sb[_MS_MAGIC] in _FOREIGN_MAGICS:
            return None

    fats = sb[_FATS]
    reserved = _le16(sb, _RESERVED)
    media = sb[_MEDIA]
    cluster_size = sb[_CLUSTER_SIZE]
    if not fats or not reserved:
        return None
    if not (media >= 0xF8 or media == 0xF0):
        return None
    if not _is_power_of_2(cluster_size):
        return None

    sector_size = _le16(sb, _SECTOR_SIZE)
    if not _is_power_of_2(sector_size) or not 512 <= sector_size <= 4096:
        return None

    dir_entries = _le16(sb, _DIR_ENTRIES)
    sect_count = _le16(sb, _SECTORS) or _le32(sb, _TOTAL_SECT)
    fat_length = _le16(sb, _FAT_LENGTH) or _le32(sb, _VS_FAT32_LENGTH)

    fat_size = (fat_length * fats) & _U32
    dir_size = (dir_entries * _DIR_ENTRY.size + sector_size - 1) // sector_size
    cluster_count = ((sect_count - (reserved + fat_size + dir_size)) & _U32) // cluster_size

    if not _le16(sb, _FAT_LENGTH) and _le32(sb, _VS_FAT32_LENGTH):
        max_count = FAT32_MAX
    else:
        max_count = FAT16_MAX if cluster_count > FAT12_MAX else FAT12_MAX
    if cluster_count > max_count:
        return None
    return _Geometry(cluster_count, fat_size)


def _search_label(pr: Probe, offset: int, entries: int) -> Optional[bytes]:
    """Look for a volume-label entry in a directory of ``entries`` entries."""
    try:
        directory = pr.get_buffer(offset, entries * _DIR_ENTRY.size)
    except ProbeError:
        return None

    for name, attr, cluster_high, cluster_low in _DIR_ENTRY.iter_unpack(directory):
        if name[0] == 0x00:
            break
        if (name[0] == _ENTRY_FREE or cluster_high or cluster_low
                or attr & _ATTR_MASK == _ATTR_LONG_NAME):
            continue
        if attr & (_ATTR_VOLUME_ID | _ATTR_DIR) == _ATTR_VOLUME_ID:
            if name[0] == 0x05:
                name = b"\xe5" + name[1:]
            return name
    return None


def _fat32_root_label(pr: Probe, sb: bytes, reserved: int, fat_size: int,
                      sector_size: int) -> Optional[bytes]:
    """Follow the root directory's cluster chain looking for the label."""
    cluster_size = sb[_CLUSTER_SIZE]
    buf_size = cluster_size * sector_size
    start_data_sect = (reserved + fat_size) & _U32
    entries = ((_le32(sb, _VS_FAT32_LENGTH) * sector_size) & _U32) // 4
    cluster = _le32(sb, _VS_ROOT_CLUSTER)

    for _ in range(_MAX_CHAIN - 1):
        if not cluster or cluster >= entries:
            break
        sect_off = ((cluster - 2) * cluster_size) & _U32
        data_off = ((start_data_sect + sect_off) & _U32) * sector_size

        label = _search_label(pr, data_off, buf_size // _DIR_ENTRY.size)
        if label is not None:
            return label

        fat_entry_off = reserved * sector_size + cluster * 4
        try:
            entry = pr.get_buffer(fat_entry_off, buf_size)
        except ProbeError:
            break
        cluster = _le32(entry, 0) & 0x0FFFFFFF
    return None


def _first_token(label: bytes) -> bytes:
    """Cut the label after its first space-delimited word."""
    stripped = label.lstrip(b" ")
    if not stripped:
        return label
    lead = len(label) - len(stripped)
    end = stripped.find(b" ")
    return label if end < 0 else label[:lead + end]


def probe_vfat(pr: Probe, mag: IdMag) -> bool:
    """Validate a FAT boot sector and read the label, serial and FAT variant."""
    sb = pr.get_sb(mag, _SUPERBLOCK_SIZE)
    geometry = _geometry(mag, sb)
    if geometry is None:
        return False

    sector_size = _le16(sb, _SECTOR_SIZE)
    reserved = _le16(sb, _RESERVED)
    vol_label: Optional[bytes] = None
    serno: Optional[bytes] = None
    version: Optional[str] = None

    if _le16(sb, _FAT_LENGTH):
        root_start = ((reserved + geometry.fat_size) * sector_size) & _U32
        vol_label = _search_label(pr, root_start, _le16(sb, _DIR_ENTRIES))
        serno = sb[_MS_SERNO]
        if geometry.cluster_count < FAT12_MAX:
            version = "FAT12"
        elif geometry.cluster_count < FAT16_MAX:
            version = "FAT16"
    elif _le32(sb, _VS_FAT32_LENGTH):
        vol_label = _fat32_root_label(pr, sb, reserved, geometry.fat_size, sector_size)
        version = "FAT32"
        serno = sb[_VS_SERNO]

        # The fsinfo signatures may also be left all zero.
        fsinfo_sect = _le16(sb, _VS_FSINFO_SECTOR)
        if fsinfo_sect:
            fsinfo = pr.get_buffer(fsinfo_sect * sector_size, _FSINFO_SIZE)
            if fsinfo[_FSINFO_SIG1] not in _FSINFO_SIG1_VALID:
                return False
            if fsinfo[_FSINFO_SIG2] not in _FSINFO_SIG2_VALID:
                return False

    if vol_label is not None:
        pr.set_label(_first_token(vol_label))

    if serno is not None:
        pr.set_uuid_text(f"{serno[3]:02X}{serno[2]:02X}-{serno[1]:02X}{serno[0]:02X}")
    if version is not None:
        pr.set_version(version)
    return True


VFAT_IDINFO = IdInfo(
    name="vfat",
    usage=Usage.FILESYSTEM,
    probefunc=probe_vfat,
    magics=(
        IdMag(b"MSWIN", 0, 0x52),
        IdMag(b"FAT32   ", 0, 0x52),
        IdMag(b"MSDOS", 0, 0x36),
        IdMag(b"FAT16   ", 0, 0x36),
        IdMag(b"FAT12   ", 0, 0x36),
        IdMag(b"FAT     ", 0, 0x36),
        IdMag(b"\xeb"),
        IdMag(b"\xe9"),
        IdMag(b"\x55\xaa", 0, 0x1FE),
    ),
)