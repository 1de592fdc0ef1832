"""Hermetic build of gcsfuse at a git tag, producing .deb and .rpm files.

Usage:

    package_gcsfuse dst_dir version [commit]

The repository is cloned to a temporary location and built at commit (a
commit, branch or tag, by default v<version>), embedding the version name.
On Linux, .deb and .rpm files are written to dst_dir.
"""

from __future__ import annotations

import logging
import platform
import shutil
import sys
from collections.abc import Sequence

from gcsfuse_tools.build_tool import BuildError
from gcsfuse_tools.fpm import package_deb, package_rpm
from gcsfuse_tools.prerequisites import _current_os, check_for_tools
from gcsfuse_tools.release_build import build

_log = logging.getLogger(__name__)

_ARCHES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}


def _current_arch() -> str:
    machine = platform.machine().lower()
    return _ARCHES.get(machine, machine)


def _program_name() -> str:
    return sys.argv[0] if sys.argv and sys.argv[0] else "package_gcsfuse"


def run(args: Sequence[str]) -> None:
    """Build and package from positional arguments: dst_dir version [commit]."""
    osys = _current_os()
    arch = _current_arch()

    if not 2 <= len(args) <= 3:
        raise BuildError(f"Usage: {_program_name()} dst_dir version [commit]")

    dst_dir, version = args[0], args[1]
    commit = args[2] if len(args) >= 3 else f"v{version}"

    _log.info("Using settings:")
    _log.info("  dstDir:  %s", dst_dir)
    _log.info("  commit:  %s", commit)
    _log.info("  version: %s", version)

    check_for_tools(osys)

    try:
        build_dir = build(commit, version, osys)
    except BuildError as err:
        raise BuildError(f"build: {err}") from err

    try:
        if osys == "linux":
            try:
                package_deb(build_dir, version, osys, arch, dst_dir)
            except BuildError as err:
                raise BuildError(f"packageDeb: {err}") from err
            try:
                package_rpm(build_dir, version, osys, arch, dst_dir)
            except BuildError as err:
                raise BuildError(f"packageDeb: {err}") from err
    finally:
        shutil.rmtree(build_dir, ignore_errors=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; argv excludes the program name."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s.%(msecs)03d %(message)s",
        datefmt="%H:%M:%S",
    )
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        run(args)
    except (BuildError, OSError, ValueError) as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())