"""Creation of block device nodes from the kernel's sysfs device links."""

from __future__ import annotations

import errno
import os
import re
import stat

__all__ = ["mkblkdev"]

_DEV_NUMBERS = re.compile(r"\s*([+-]?\d+):\s*([+-]?\d+)")
_NODE_MODE = 0o600
_PATH_MAX = 4096


def _block_devices(sys_dir: str):
    """Yield (name, major, minor) for every device link in ``sys_dir``."""
    try:
        entries = list(os.scandir(sys_dir))
    except OSError:
        return
    for entry in entries:
        if not entry.is_symlink():
            continue
        match = _DEV_NUMBERS.match(entry.name)
        if match is None:
            continue
        try:
            target = os.readlink(entry.path)
        except OSError:
            continue
        if not target or len(target) > _PATH_MAX:
            continue
        if "/" not in target:
            continue
        name = target.rsplit("/", 1)[1]
        if name:
            yield name, int(match.group(1)), int(match.group(2))


def mkblkdev(dev_dir: str = "/dev", sys_dir: str = "/sys/dev/block") -> list[str]:
    """Create a node in ``dev_dir`` for every block device listed in sysfs.

    Nodes that cannot be created (for instance because they already exist)
    are skipped. Returns the paths of the nodes that were created.
    """
    if not os.path.isdir(dev_dir):
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), dev_dir)

    created = []
    for name, major, minor in _block_devices(sys_dir):
        path = os.path.join(dev_dir, name)
        try:
            os.mknod(path, _NODE_MODE | stat.S_IFBLK, os.makedev(major, minor))
        except (OSError, ValueError, OverflowError):
            continue
        created.append(path)
    return created