"""Identify filesystems and swap areas by their on-disk superblocks."""

__version__ = "0.1.0"