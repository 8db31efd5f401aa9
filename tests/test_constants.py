import pytest

from fsprobe.constants import (
    Encoding,
    IdInfoFlag,
    SuperblockFlag,
    Usage,
    swab16,
    swab32,
    swab64,
)


def test_swab16_jffs2_magics_are_mirror_images():
    be = int.from_bytes(b"\x19\x85", "big")
    le = int.from_bytes(b"\x19\x85", "little")
    assert swab16(be) == le
    assert swab16(le) == be


def test_swab32_ubifs_magic():
    raw = b"\x31\x18\x10\x06"
    assert swab32(int.from_bytes(raw, "little")) == int.from_bytes(raw, "big")


def test_swab64_bytes_reversed():
    raw = b"\x01\x02\x03\x04\x05\x06\x07\x08"
    assert swab64(int.from_bytes(raw, "big")) == int.from_bytes(raw, "little")


@pytest.mark.parametrize(
    "func,width",
    [(swab16, 2), (swab32, 4), (swab64, 8)],
)
@pytest.mark.parametrize("seed", [0, 1, 0x7F, 0xA5A5A5A5A5A5A5A5, 0xFFFFFFFFFFFFFFFF])
def test_swab_is_involution(func, width, seed):
    value = seed & ((1 << (8 * width)) - 1)
    assert func(func(value)) == value


@pytest.mark.parametrize("func,width", [(swab16, 2), (swab32, 4), (swab64, 8)])
def test_swab_ignores_bits_above_width(func, width):
    low = 0x0102030405060708 & ((1 << (8 * width)) - 1)
    assert func(low | (1 << (8 * width))) == func(low)


def test_swab_result_fits_width():
    assert swab16(0xFFFFFF) < (1 << 16)
    assert swab32(0xFFFFFFFFFF) < (1 << 32)


def test_encoding_codecs_decode_labels():
    assert b"\x00A\x00B".decode(Encoding.UTF16BE.codec) == "AB"
    assert b"A\x00B\x00".decode(Encoding.UTF16LE.codec) == "AB"
    assert Encoding(0) is Encoding.UTF16BE


def test_superblock_default_composition():
    default = SuperblockFlag(0x6A)
    assert default == SuperblockFlag.DEFAULT
    for flag in (SuperblockFlag.LABEL, SuperblockFlag.UUID,
                 SuperblockFlag.TYPE, SuperblockFlag.SECTYPE):
        assert flag in default
    assert SuperblockFlag.USAGE not in default
    assert SuperblockFlag.VERSION not in default


def test_usage_flags_are_distinct_bits():
    combined = Usage(0x1E)
    assert combined == Usage.FILESYSTEM | Usage.RAID | Usage.CRYPTO | Usage.OTHER
    assert bin(int(combined)).count("1") == 4
    assert Usage.RAID in combined
    assert IdInfoFlag(2) is IdInfoFlag.TOLERANT
    assert IdInfoFlag.TOLERANT not in IdInfoFlag.NONE