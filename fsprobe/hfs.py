"""Detection of HFS and HFS+ volumes."""

from __future__ import annotations

import struct

from .constants import Encoding, IdInfoFlag, Usage
from .core import LABEL_MAX, IdInfo, IdMag, Probe, ProbeError

__all__ = ["probe_hfs", "probe_hfsplus", "HFS_IDINFO", "HFSPLUS_IDINFO"]

_HFSPLUS_SIGNATURES = (b"H+", b"HX")

# Master directory block of a classic HFS volume.
_MDB_SIZE = 130
_MDB_AL_BLK_SIZE = 20
_MDB_AL_BL_ST = 28
_MDB_LABEL_LEN = 36
_MDB_LABEL = 37
_MDB_EMBED_SIG = slice(124, 126)
_MDB_EMBED_STARTBLOCK = 126

# HFS+ volume header.
_VOL_HEADER_SIZE = 512
_VOL_BLOCKSIZE = 40
_VOL_CAT_EXTENTS = slice(288, 352)

_SECTOR_SIZE = 512
_CATALOG_HEADER_SIZE = 0x2000

# B-tree node descriptor followed by the header record or the first key.
_NODE_DESCRIPTOR_SIZE = 14
_NODE_TYPE = 8
_NODE_NUM_RECS = 10
_HEADER_LEAF_COUNT = _NODE_DESCRIPTOR_SIZE + 6
_HEADER_LEAF_HEAD = _NODE_DESCRIPTOR_SIZE + 10
_HEADER_NODE_SIZE = _NODE_DESCRIPTOR_SIZE + 18
_KEY_PARENT_ID = _NODE_DESCRIPTOR_SIZE + 2
_KEY_UNICODE_LEN = _NODE_DESCRIPTOR_SIZE + 6
_KEY_UNICODE = _NODE_DESCRIPTOR_SIZE + 8

_NODE_LEAF = 0xFF
_ROOT_PARENT_CNID = 1

_U32 = 0xFFFFFFFF


def probe_hfs(pr: Probe, mag: IdMag) -> bool:
    """Recognise a classic HFS volume and read its Pascal-string label."""
    mdb = pr.get_sb(mag, _MDB_SIZE)
    if mdb[_MDB_EMBED_SIG] in _HFSPLUS_SIGNATURES:
        # Not HFS, but an HFS wrapper around an embedded HFS+ volume.
        return False
    label_len = mdb[_MDB_LABEL_LEN]
    pr.set_label(mdb[_MDB_LABEL:_MDB_LABEL + label_len])
    return True


def _volume_header(pr: Probe, mag: IdMag) -> tuple[int, bytes] | None:
    """Return the offset of the HFS+ volume and its header, or None."""
    mdb = pr.get_sb(mag, _MDB_SIZE)
    if mdb[:2] != b"BD":
        return 0, pr.get_sb(mag, _VOL_HEADER_SIZE)

    if mdb[_MDB_EMBED_SIG] not in _HFSPLUS_SIGNATURES:
        # A plain HFS volume.
        return None
    (alloc_block_size,) = struct.unpack_from(">I", mdb, _MDB_AL_BLK_SIZE)
    (alloc_first_block,) = struct.unpack_from(">H", mdb, _MDB_AL_BL_ST)
    (embed_first_block,) = struct.unpack_from(">H", mdb, _MDB_EMBED_STARTBLOCK)
    offset = (alloc_first_block * _SECTOR_SIZE
              + embed_first_block * alloc_block_size) & _U32
    header = pr.get_buffer(offset + mag.kboff * 1024, _VOL_HEADER_SIZE)
    return offset, header


def probe_hfsplus(pr: Probe, mag: IdMag) -> bool:
    """Recognise an HFS+ volume, plain or embedded, and read its label."""
    found = _volume_header(pr, mag)
    if found is None:
        return False
    offset, header = found

    if header[:2] not in _HFSPLUS_SIGNATURES:
        return False

    (blocksize,) = struct.unpack_from(">I", header, _VOL_BLOCKSIZE)
    if blocksize < _SECTOR_SIZE:
        return False

    extents = list(struct.iter_unpack(">II", header[_VOL_CAT_EXTENTS]))
    cat_block = extents[0][0]

    try:
        catalog = pr.get_buffer(offset + cat_block * blocksize,
                                _CATALOG_HEADER_SIZE)
    except ProbeError:
        return True

    leaf_count, leaf_head = struct.unpack_from(">II", catalog, _HEADER_LEAF_COUNT)
    (node_size,) = struct.unpack_from(">H", catalog, _HEADER_NODE_SIZE)
    if leaf_count == 0:
        return True

    leaf_block = ((leaf_head * node_size) & _U32) // blocksize

    # Map the logical leaf block onto the catalog file's extents.
    for start, count in extents:
        if count == 0:
            return True
        if leaf_block < count:
            break
        leaf_block -= count
    else:
        return True

    leaf_off = (start + leaf_block) * blocksize
    try:
        node = pr.get_buffer(offset + leaf_off, node_size)
    except ProbeError:
        return True
    if len(node) < _KEY_UNICODE:
        return True

    (record_count,) = struct.unpack_from(">H", node, _NODE_NUM_RECS)
    if record_count == 0:
        return True
    if node[_NODE_TYPE] != _NODE_LEAF:
        return True

    (parent_id,) = struct.unpack_from(">I", node, _KEY_PARENT_ID)
    if parent_id != _ROOT_PARENT_CNID:
        return True

    (unicode_len,) = struct.unpack_from(">H", node, _KEY_UNICODE_LEN)
    length = unicode_len * 2
    if length <= LABEL_MAX:
        name = node[_KEY_UNICODE:_KEY_UNICODE + length].ljust(length, b"\0")
        pr.set_utf8label(name, Encoding.UTF16BE)
    return True


HFS_IDINFO = IdInfo(
    name="hfs",
    usage=Usage.FILESYSTEM,
    probefunc=probe_hfs,
    flags=IdInfoFlag.TOLERANT,
    magics=(IdMag(b"BD", 1),),
)

HFSPLUS_IDINFO = IdInfo(
    name="hfsplus",
    usage=Usage.FILESYSTEM,
    probefunc=probe_hfsplus,
    magics=(IdMag(b"BD", 1), IdMag(b"H+", 1), IdMag(b"HX", 1)),
)