[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fsprobe"
version = "0.1.0"
description = "Identify filesystems and swap areas on block devices and image files by their superblocks"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "filesystem",
    "superblock",
    "probe",
    "squashfs",
    "ubi",
    "ubifs",
    "jffs2",
    "vfat",
    "ntfs",
    "hfs",
    "swap",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fsprobe"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
