"""Detection of NTFS volumes."""

from __future__ import annotations

import struct

from .constants import Encoding, Usage
from .core import LABEL_MAX, IdInfo, IdMag, Probe

__all__ = ["probe_ntfs", "NTFS_IDINFO"]

_SUPERBLOCK = struct.Struct("<3s8sHBHBHHBHHHII4xQQQb3xb3xQI")
_FILE_ATTRIBUTE_SIZE = 22

_MFT_RECORD_VOLUME = 3
_MAX_CLUSTER_SIZE = 64 * 1024
_ATTR_VOLUME_NAME = 0x60
_ATTR_END = 0xFFFFFFFF

_CLUSTER_SIZES = {1, 2, 4, 8, 16, 32, 64, 128}
_MFT_CLUSTER_COUNTS = {1, 2, 4, 8, 16, 32, 64}


def _volume_label(pr: Probe, record: bytes, record_size: int) -> None:
    attr_off, = struct.unpack_from("<H", record, 20)
    bytes_allocated, = struct.unpack_from("<I", record, 28)

    while (attr_off + _FILE_ATTRIBUTE_SIZE <= record_size
           and attr_off <= bytes_allocated):
        attr_type, attr_len = struct.unpack_from("<II", record, attr_off)
        if not attr_len or attr_type == _ATTR_END:
            return
        if attr_type == _ATTR_VOLUME_NAME:
            val_len, = struct.unpack_from("<I", record, attr_off + 16)
            val_off, = struct.unpack_from("<H", record, attr_off + 20)
            start = attr_off + val_off
            if start + val_len <= record_size and val_len <= LABEL_MAX:
                pr.set_utf8label(record[start:start + val_len], Encoding.UTF16LE)
            return
        attr_off += attr_len


def probe_ntfs(pr: Probe, mag: IdMag) -> bool:
    """Validate the NTFS boot sector and read the volume label and serial."""
    (_, _, sector_size, sectors_per_cluster, reserved_sectors, fats,
     root_entries, sectors, _, sectors_per_fat, _, _, _, large_sectors,
     number_of_sectors, mft_location, mft_mirror_location,
     clusters_per_mft_record, _, volume_serial, _) = _SUPERBLOCK.unpack(
        pr.get_sb(mag, _SUPERBLOCK.size))

    if not 256 <= sector_size <= 4096:
        return False
    if sectors_per_cluster not in _CLUSTER_SIZES:
        return False
    if sector_size * sectors_per_cluster > _MAX_CLUSTER_SIZE:
        return False

    # Fields unused by NTFS must be zero.
    if (reserved_sectors or root_entries or sectors or sectors_per_fat
            or large_sectors or fats):
        return False

    raw_mft = clusters_per_mft_record & 0xFF
    if not 0xE1 <= raw_mft <= 0xF7 and clusters_per_mft_record not in _MFT_CLUSTER_COUNTS:
        return False

    if clusters_per_mft_record > 0:
        mft_record_size = clusters_per_mft_record * sectors_per_cluster * sector_size
    else:
        mft_record_size = 1 << -clusters_per_mft_record

    nr_clusters = number_of_sectors // sectors_per_cluster
    if mft_location > nr_clusters or mft_mirror_location > nr_clusters:
        return False

    offset = mft_location * sector_size * sectors_per_cluster
    if pr.get_buffer(offset, mft_record_size)[:4] != b"FILE":
        return False

    offset += _MFT_RECORD_VOLUME * mft_record_size
    record = pr.get_buffer(offset, mft_record_size)
    if record[:4] != b"FILE":
        return False

    _volume_label(pr, record, mft_record_size)
    pr.set_uuid_text(f"{volume_serial:016X}")
    return True


NTFS_IDINFO = IdInfo(
    name="ntfs",
    usage=Usage.FILESYSTEM,
    probefunc=probe_ntfs,
    magics=(IdMag(b"NTFS    ", 0, 3),),
)