import io

import pytest

from fsprobe.constants import Encoding, Usage
from fsprobe.core import IdInfo, IdMag, Probe, ProbeError


def _image(size=4096):
    return bytes(i % 251 for i in range(size))


def test_get_buffer_reads_exact_slice():
    data = _image()
    pr = Probe(data)
    assert pr.get_buffer(100, 16) == data[100:116]


def test_get_buffer_short_read_raises():
    pr = Probe(b"abc")
    with pytest.raises(ProbeError):
        pr.get_buffer(1, 10)


def test_get_buffer_negative_offset_raises():
    pr = Probe(b"abcdef")
    with pytest.raises(ProbeError):
        pr.get_buffer(-1, 2)


def test_get_sb_uses_kilobyte_offset():
    data = _image(3000)
    pr = Probe(data)
    mag = IdMag(b"xx", kboff=2, sboff=7)
    assert pr.get_sb(mag, 32) == data[2048:2080]


def test_idmag_offset_and_length():
    mag = IdMag(b"SWAPSPACE2", kboff=0, sboff=0xFF6)
    assert mag.offset == 0xFF6
    assert mag.length == 10


def test_probe_from_path(tmp_path):
    path = tmp_path / "img.bin"
    data = _image(2048)
    path.write_bytes(data)
    with Probe(path) as pr:
        assert pr.get_buffer(1024, 8) == data[1024:1032]


def test_probe_missing_path_raises(tmp_path):
    with pytest.raises(ProbeError):
        Probe(tmp_path / "missing.bin")


def test_probe_from_file_object():
    data = _image(512)
    pr = Probe(io.BytesIO(data))
    assert pr.get_buffer(0, 4) == data[:4]


def test_set_label_cuts_at_nul():
    pr = Probe(b"")
    pr.set_label(b"rootfs\0garbage")
    assert pr.label == "rootfs"


def test_set_label_too_long_raises():
    pr = Probe(b"")
    with pytest.raises(ProbeError):
        pr.set_label(b"a" * 1025)
    assert pr.label == ""


def test_set_utf8label_big_endian_round_trip():
    pr = Probe(b"")
    text = "Macintosh HD"
    pr.set_utf8label(text.encode("utf-16-be"), Encoding.UTF16BE)
    assert pr.label == text


def test_set_utf8label_little_endian_stops_at_nul():
    pr = Probe(b"")
    raw = "DATA".encode("utf-16-le") + b"\0\0" + "junk".encode("utf-16-le")
    pr.set_utf8label(raw, Encoding.UTF16LE)
    assert pr.label == "DATA"


def test_set_utf8label_non_ascii():
    pr = Probe(b"")
    text = "Données"
    pr.set_utf8label(text.encode("utf-16-le"), Encoding.UTF16LE)
    assert pr.label == text


def test_set_utf8label_too_long_raises():
    pr = Probe(b"")
    with pytest.raises(ProbeError):
        pr.set_utf8label(b"a\0" * 513, Encoding.UTF16LE)


def test_set_uuid_formats_bytes():
    pr = Probe(b"")
    raw = bytes(range(16))
    pr.set_uuid(raw)
    assert pr.uuid == "00010203-0405-0607-0809-0a0b0c0d0e0f"
    assert pr.uuid.replace("-", "") == raw.hex()


def test_set_uuid_leading_zero_word_is_ignored():
    pr = Probe(b"")
    pr.set_uuid(b"\0\0" + bytes(range(1, 15)))
    assert pr.uuid == ""


def test_set_uuid_as_other_name_is_ignored():
    pr = Probe(b"")
    pr.set_uuid_as(bytes(range(1, 17)), "UUID_SUB")
    assert pr.uuid == ""
    pr.set_uuid_as(bytes(range(1, 17)), "UUID")
    assert pr.uuid.replace("-", "") == bytes(range(1, 17)).hex()


def test_set_uuid_short_input_raises():
    pr = Probe(b"")
    with pytest.raises(ProbeError):
        pr.set_uuid(b"\x01\x02")


def test_set_uuid_text_truncates():
    pr = Probe(b"")
    pr.set_uuid_text("x" * 100)
    assert len(pr.uuid) == 63


def test_set_version_and_limit():
    pr = Probe(b"")
    pr.set_version("4.0")
    assert pr.version == "4.0"
    with pytest.raises(ProbeError):
        pr.set_version("v" * 64)
    assert pr.version == "4.0"


def test_idinfo_match_finds_magic():
    data = bytearray(4096)
    data[0xFF6:0x1000] = b"SWAPSPACE2"
    info = IdInfo(
        name="swap",
        usage=Usage.OTHER,
        probefunc=lambda pr, mag: True,
        magics=(IdMag(b"SWAP-SPACE", sboff=0xFF6), IdMag(b"SWAPSPACE2", sboff=0xFF6)),
    )
    mag = info.match(Probe(bytes(data)))
    assert mag == IdMag(b"SWAPSPACE2", sboff=0xFF6)


def test_idinfo_match_none_on_short_image():
    info = IdInfo(
        name="ubi",
        usage=Usage.RAID,
        probefunc=lambda pr, mag: True,
        magics=(IdMag(b"UBI#", kboff=4),),
    )
    assert info.match(Probe(b"UBI#")) is None