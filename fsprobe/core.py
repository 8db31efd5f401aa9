"""Probe state, signature descriptions and superblock buffer access."""

from __future__ import annotations

import io
import os
import struct
import uuid as _uuid
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Optional, Union

from .constants import Encoding, IdInfoFlag, Usage

__all__ = [
    "ProbeError",
    "IdMag",
    "IdInfo",
    "Probe",
    "LABEL_MAX",
    "UUID_MAX",
    "VERSION_MAX",
]

# Capacities of the result fields, not counting a terminator.
LABEL_MAX = 1024
UUID_MAX = 63
VERSION_MAX = 63

Source = Union[bytes, bytearray, memoryview, str, os.PathLike, BinaryIO]


class ProbeError(Exception):
    """Raised when a device cannot be read or a result does not fit."""


@dataclass(frozen=True)
class IdMag:
    """A magic string and where on the device it is expected."""

    magic: bytes
    kboff: int = 0
    sboff: int = 0

    @property
    def length(self) -> int:
        return len(self.magic)

    @property
    def offset(self) -> int:
        """Absolute byte offset of the magic string."""
        return self.kboff * 1024 + self.sboff


@dataclass(frozen=True)
class IdInfo:
    """Description of one filesystem prober.

    ``probefunc`` is called with the probe and the matching magic and
    returns True when it recognises the filesystem.
    """

    name: str
    usage: Usage
    probefunc: Callable[["Probe", IdMag], bool]
    magics: tuple[IdMag, ...] = field(default_factory=tuple)
    flags: IdInfoFlag = IdInfoFlag.NONE
    minsz: int = 0

    def match(self, probe: "Probe") -> Optional[IdMag]:
        """Return the first magic found on the probed device, or None."""
        for mag in self.magics:
            data = probe._read(mag.offset, mag.length)
            data = data.ljust(mag.length, b"\0")
            if data == mag.magic:
                return mag
        return None


class Probe:
    """Reads a device image and collects what the probers find in it."""

    def __init__(self, source: Source) -> None:
        self._owned = False
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._file: BinaryIO = io.BytesIO(bytes(source))
            self._owned = True
        elif isinstance(source, (str, os.PathLike)):
            try:
                self._file = open(source, "rb")
            except OSError as exc:
                raise ProbeError(f"cannot open {source}: {exc}") from exc
            self._owned = True
        else:
            self._file = source
        self.id: Optional[IdInfo] = None
        self.err: bool = True
        self.dev: str = ""
        self.uuid: str = ""
        self.label: str = ""
        self.version: str = ""

    def close(self) -> None:
        """Close the underlying file if this probe opened it."""
        if self._owned:
            self._file.close()

    def __enter__(self) -> "Probe":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _read(self, offset: int, length: int) -> bytes:
        if offset < 0 or length < 0:
            raise ProbeError(f"invalid read at {offset} of {length} bytes")
        try:
            self._file.seek(offset)
            return self._file.read(length)
        except (OSError, ValueError, OverflowError) as exc:
            raise ProbeError(f"failed to read at {offset}: {exc}") from exc

    def get_buffer(self, offset: int, length: int) -> bytes:
        """Read exactly ``length`` bytes at ``offset``."""
        data = self._read(offset, length)
        if len(data) != length:
            raise ProbeError(
                f"short read at {offset}: wanted {length}, got {len(data)}"
            )
        return data

    def get_sb(self, mag: IdMag, size: int) -> bytes:
        """Read a superblock of ``size`` bytes at the magic's kilobyte offset."""
        return self.get_buffer(mag.kboff << 10, size)

    def set_label(self, label: bytes) -> None:
        """Store a raw label, cut at its first NUL byte."""
        if len(label) > LABEL_MAX:
            raise ProbeError(f"label buffer too small {len(label)} > {LABEL_MAX}")
        raw = bytes(label).split(b"\0", 1)[0]
        self.label = raw.decode("utf-8", errors="replace")

    def set_utf8label(self, label: bytes, encoding: Encoding) -> None:
        """Store a UTF-16 label, stopping at NUL and at the label capacity."""
        limit = len(label)
        if limit > LABEL_MAX:
            raise ProbeError(f"label buffer too small {limit} > {LABEL_MAX}")
        fmt = ">H" if Encoding(encoding) is Encoding.UTF16BE else "<H"
        even = bytes(label[: limit - limit % 2])
        chars = []
        used = 0
        for (unit,) in struct.iter_unpack(fmt, even):
            if unit == 0:
                break
            size = 1 if unit < 0x80 else 2 if unit < 0x800 else 3
            if used + size >= limit:
                break
            chars.append(chr(unit))
            used += size
        self.label = "".join(chars)

    def set_uuid_as(self, uuid: bytes, name: Optional[str]) -> None:
        """Format a 16-byte binary UUID unless it starts with a zero word."""
        if len(uuid) < 16:
            raise ProbeError(f"uuid needs 16 bytes, got {len(uuid)}")
        if uuid[0:2] == b"\0\0":
            return
        if name is None or name == "UUID":
            self.uuid = str(_uuid.UUID(bytes=bytes(uuid[:16])))

    def set_uuid(self, uuid: bytes) -> None:
        """Format a 16-byte binary UUID as the device UUID."""
        self.set_uuid_as(uuid, None)

    def set_uuid_text(self, text: str) -> None:
        """Store an already formatted UUID, truncated to the field capacity."""
        self.uuid = text[:UUID_MAX]

    def set_version(self, version: str) -> None:
        """Store the filesystem version string."""
        if len(version) > VERSION_MAX:
            raise ProbeError(f"version buffer too small {len(version)}")
        self.version = version