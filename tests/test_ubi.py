import struct

import pytest

from fsprobe.core import Probe, ProbeError
from fsprobe.ubi import (
    JFFS2_IDINFO,
    UBI_IDINFO,
    UBIFS_IDINFO,
    probe_jffs2,
    probe_ubi,
    probe_ubifs,
)

UUID_BYTES = bytes.fromhex("00112233445566778899aabbccddeeff")


def _ubi_image(version=1, image_seq=123456):
    hdr = bytearray(64)
    hdr[0:4] = b"UBI#"
    hdr[4] = version
    struct.pack_into(">I", hdr, 24, image_seq)
    return bytes(hdr)


def _ubifs_image(fmt=4, ro=0, uuid=UUID_BYTES):
    sb = bytearray(4096)
    sb[0:4] = b"\x31\x18\x10\x06"
    struct.pack_into("<I", sb, 80, fmt)
    sb[108:124] = uuid
    struct.pack_into("<I", sb, 124, ro)
    return bytes(sb)


def test_ubi_version_and_sequence():
    pr = Probe(_ubi_image(1, 123456))
    mag = UBI_IDINFO.match(pr)
    assert probe_ubi(pr, mag) is True
    assert pr.version == "1"
    assert pr.uuid == str(123456)


def test_ubi_other_magic_not_matched():
    assert UBI_IDINFO.match(Probe(bytes(64))) is None


def test_ubi_short_header_raises():
    pr = Probe(b"UBI#" + bytes(10))
    with pytest.raises(ProbeError):
        probe_ubi(pr, UBI_IDINFO.magics[0])


def test_ubifs_uuid_and_version():
    pr = Probe(_ubifs_image(4, 0))
    mag = UBIFS_IDINFO.match(pr)
    assert probe_ubifs(pr, mag) is True
    assert pr.version == "w4r0"
    assert pr.uuid.replace("-", "") == UUID_BYTES.hex()


def test_ubifs_zero_uuid_not_reported():
    pr = Probe(_ubifs_image(5, 1, uuid=bytes(16)))
    assert probe_ubifs(pr, UBIFS_IDINFO.magics[0]) is True
    assert pr.uuid == ""
    assert pr.version == "w5r1"


def test_ubifs_short_superblock_raises():
    pr = Probe(_ubifs_image()[:200])
    with pytest.raises(ProbeError):
        probe_ubifs(pr, UBIFS_IDINFO.magics[0])


@pytest.mark.parametrize("magic", [b"\x19\x85", b"\x85\x19"])
def test_jffs2_matches_both_byte_orders(magic):
    pr = Probe(magic + bytes(30))
    mag = JFFS2_IDINFO.match(pr)
    assert mag.magic == magic
    assert probe_jffs2(pr, mag) is True
    assert pr.label == ""