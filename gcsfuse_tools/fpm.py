"""Create .deb and .rpm packages from a directory of release binaries."""

from __future__ import annotations

import logging

from gcsfuse_tools.build_tool import _MODULE_PATH
from gcsfuse_tools.builder import _run

_log = logging.getLogger(__name__)

_DESCRIPTION = "A user-space file system for interacting with Google Cloud Storage."
_MAINTAINER = "gcsfuse maintainers <maintainers@example.com>"
_PROJECT_URL = f"https://{_MODULE_PATH}"


def package_fpm(
    package_type: str,
    bin_dir: str,
    version: str,
    osys: str,
    arch: str,
    output_dir: str,
) -> None:
    """Run fpm to package bin_dir as package_type, writing into output_dir."""
    cmd = [
        "fpm",
        "-s", "dir",
        "-t", package_type,
        "-n", "gcsfuse",
        "-C", bin_dir,
        "-v", version,
        "-d", "fuse",
        "--vendor", "",
        "--maintainer", _MAINTAINER,
        "--url", _PROJECT_URL,
        "--description", _DESCRIPTION,
    ]
    _run(cmd, "fpm", cwd=output_dir)


def package_deb(bin_dir: str, version: str, osys: str, arch: str, output_dir: str) -> None:
    """Create a .deb file from a directory of release binaries."""
    _log.info("Building a .deb package.")
    package_fpm("deb", bin_dir, version, osys, arch, output_dir)


def package_rpm(bin_dir: str, version: str, osys: str, arch: str, output_dir: str) -> None:
    """Create a .rpm file from a directory of release binaries."""
    _log.info("Building a .rpm package.")
    package_fpm("rpm", bin_dir, version, osys, arch, output_dir)