"""Flag sets, enumerations and byte-order helpers shared by the probers."""

from enum import IntEnum, IntFlag

__all__ = [
    "Usage",
    "Encoding",
    "IdInfoFlag",
    "SuperblockFlag",
    "swab16",
    "swab32",
    "swab64",
    "DEFAULT_SECTOR_SIZE",
]

DEFAULT_SECTOR_SIZE = 512


class Usage(IntFlag):
    """What a detected signature is used for."""

    FILESYSTEM = 1 << 1
    RAID = 1 << 2
    CRYPTO = 1 << 3
    OTHER = 1 << 4


class Encoding(IntEnum):
    """Character encodings of on-disk labels."""

    UTF16BE = 0
    UTF16LE = 1

    @property
    def codec(self) -> str:
        """Name of the Python codec for this encoding."""
        return "utf-16-be" if self is Encoding.UTF16BE else "utf-16-le"


class IdInfoFlag(IntFlag):
    """Flags describing a filesystem prober."""

    NONE = 0
    # The filesystem may share a device with other signatures.
    TOLERANT = 1 << 1


class SuperblockFlag(IntFlag):
    """Which values superblock probing should report."""

    LABEL = 1 << 1
    LABELRAW = 1 << 2
    UUID = 1 << 3
    UUIDRAW = 1 << 4
    TYPE = 1 << 5
    SECTYPE = 1 << 6
    USAGE = 1 << 7
    VERSION = 1 << 8
    MAGIC = 1 << 9
    BADCSUM = 1 << 10
    DEFAULT = LABEL | UUID | TYPE | SECTYPE


def _swap(value: int, width: int) -> int:
    mask = (1 << (8 * width)) - 1
    return int.from_bytes((value & mask).to_bytes(width, "big"), "little")


def swab16(value: int) -> int:
    """Reverse the byte order of the low 16 bits of ``value``."""
    return _swap(value, 2)


def swab32(value: int) -> int:
    """Reverse the byte order of the low 32 bits of ``value``."""
    return _swap(value, 4)


def swab64(value: int) -> int:
    """Reverse the byte order of the low 64 bits of ``value``."""
    return _swap(value, 8)