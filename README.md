# fsprobe

`fsprobe` recognises what is stored on a block device or in a disk image
by reading its on-disk superblock. It uses only the standard library.

Recognised formats:

- vfat (FAT12, FAT16, FAT32)
- swap (version 0 and 1) and software-suspend images
- squashfs (legacy big-endian, v4 little-endian, and the LZMA variants)
- UBI and UBIFS
- JFFS2
- NTFS
- HFS and HFS+

Where the format carries them, the label, UUID and version of the
filesystem are read as well.

## Installation

```
pip install fsprobe
```

Python 3.10 or later is required.

## Usage

Probe a device node or an image file:

```python
from fsprobe.detect import probe_block

result = probe_block("/dev/sda1")
if not result.err:
    print(result.id.name, result.label, result.uuid, result.version)
```

`probe_block` raises `fsprobe.core.ProbeError` when the path cannot be
examined.

Probe bytes or an already opened binary file:

```python
from fsprobe.detect import probe_file

with open("rootfs.img", "rb") as image:
    result = probe_file(image)
print(result.id.name if result.id else "unknown", result.err)
```

Detection tries each prober in `fsprobe.detect.IDINFOS` in order. A
prober is tried only when one of its magic signatures (an
`fsprobe.core.IdMag`) matches at the expected offset, and the first one
whose full check succeeds wins. On the returned `Probe`, `id` is the
`IdInfo` of the last prober whose magic matched, and `err` is `False`
only when that prober recognised the data.

### Working with a probe directly

`fsprobe.core.Probe` wraps the data being examined: bytes, a path or a
binary file object. It can be used as a context manager and closes files
it opened itself. The format-specific probe functions, such as
`fsprobe.vfat.probe_vfat` or `fsprobe.squashfs.probe_squashfs`, take a
`Probe` and the matching `IdMag`, return `True` when they recognise the
format, and record what they find through `Probe.set_label`,
`Probe.set_utf8label`, `Probe.set_uuid`, `Probe.set_uuid_text` and
`Probe.set_version`. `Probe.get_buffer` raises `ProbeError` on a read
beyond the end of the data.

### Device nodes

`fsprobe.mkdev.mkblkdev(dev_dir="/dev", sys_dir="/sys/dev/block")`
creates a block device node (mode 0600) in `dev_dir` for every
`major:minor` link in `sys_dir`, named after the link's target. Nodes
that cannot be created are skipped; the paths of the created nodes are
returned. It raises `FileNotFoundError` if `dev_dir` is not a directory.
Creating device nodes normally requires root privileges.

### Kernel version

`fsprobe.detect.get_linux_version()` returns the running kernel's
version packed by `fsprobe.detect.kernel_version(major, minor, patch)`,
or 0 when it cannot be determined.

## What it does not do

- There is no command-line tool; `fsprobe` is used as a library.
- ext2/ext3/ext4, exFAT, btrfs and f2fs are not recognised.
- HFS and HFS+ volumes get no UUID.
- Nothing is mounted, written or repaired; devices are only read.

## Running the tests

```
pip install "fsprobe[test]"
pytest
```