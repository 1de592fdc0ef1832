"""Build gcsfuse release binaries into a destination directory.

Usage:

    build_gcsfuse src_dir dst_dir version [build args]

src_dir is the root of the gcsfuse repository. On Linux the result is:

    bin/gcsfuse
    sbin/mount.fuse.gcsfuse
    sbin/mount.gcsfuse

and elsewhere:

    bin/gcsfuse
    sbin/mount_gcsfuse
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
import tempfile
from collections.abc import Sequence

_log = logging.getLogger(__name__)

_MODULE_PATH = "github.com/googlecloudplatform/gcsfuse"


class BuildError(Exception):
    """Raised when building the gcsfuse binaries fails."""


def _is_linux() -> bool:
    return sys.platform.startswith("linux")


def _go_root() -> str:
    root = os.environ.get("GOROOT")
    if root:
        return root
    try:
        completed = subprocess.run(
            ["go", "env", "GOROOT"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError as err:
        raise BuildError(f"go env GOROOT: {err}") from err
    return completed.stdout.decode(errors="replace").strip()


def _run_build(cmd: list[str], env: dict[str, str]) -> None:
    try:
        completed = subprocess.run(
            cmd,
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
        )
    except OSError as err:
        raise BuildError(f"{' '.join(cmd)}: {err}") from err
    if completed.returncode != 0:
        output = (completed.stdout or b"").decode(errors="replace")
        raise BuildError(
            f"{' '.join(cmd)}: exit status {completed.returncode}\nOutput:\n{output}"
        )


def build_binaries(
    dst_dir: str, src_dir: str, version: str, build_args: Sequence[str] = ()
) -> None:
    """Build the binaries and lay them out under dst_dir.

    version is the release being built (e.g. "0.11.1") or a short commit name.
    """
    for name in ("bin", "sbin"):
        try:
            os.mkdir(os.path.join(dst_dir, name), 0o755)
        except OSError as err:
            raise BuildError(f"Mkdir: {err}") from err

    path_env = os.environ.get("PATH")
    if path_env is None:
        raise BuildError("$PATH not found in OS")

    goroot = _go_root()

    with tempfile.TemporaryDirectory(prefix="build_gcsfuse_gopath") as gopath, \
            tempfile.TemporaryDirectory(prefix="build_gcsfuse_gocache") as gocache:
        # Make the source appear at the expected position within $GOPATH.
        gcsfuse_dir = os.path.join(gopath, "src", _MODULE_PATH)
        try:
            os.makedirs(os.path.dirname(gcsfuse_dir), 0o700)
        except OSError as err:
            raise BuildError(f"MkdirAll: {err}") from err
        try:
            os.symlink(src_dir, gcsfuse_dir)
        except OSError as err:
            raise BuildError(f"Symlink: {err}") from err

        # mount(8) expects a different name format on Linux.
        helper_name = "mount.gcsfuse" if _is_linux() else "mount_gcsfuse"
        binaries = (
            (_MODULE_PATH, "bin/gcsfuse"),
            (f"{_MODULE_PATH}/tools/mount_gcsfuse", f"sbin/{helper_name}"),
        )

        env = {
            "GO15VENDOREXPERIMENT": "1",
            "GO111MODULE": "auto",
            "PATH": path_env,
            "GOROOT": goroot,
            "GOPATH": gopath,
            "GOCACHE": gocache,
        }

        for target, output_path in binaries:
            _log.info("Building %s to %s", target, output_path)
            cmd = ["go", "build", "-o", os.path.join(dst_dir, output_path)]
            if os.path.basename(output_path) == "gcsfuse":
                cmd += ["-ldflags", f"-X main.gcsfuseVersion={version}", *build_args]
            cmd.append(target)
            _run_build(cmd, env)

    # Support `mount -t fuse.gcsfuse` with an explicit helper, since
    # /sbin/mount.fuse would otherwise call gcsfuse with the wrong arguments.
    if _is_linux():
        try:
            os.symlink("mount.gcsfuse", os.path.join(dst_dir, "sbin", "mount.fuse.gcsfuse"))
        except OSError as err:
            raise BuildError(f"Symlink: {err}") from err


def copy_file(dst: str, src: str, perm: int) -> None:
    """Copy src to dst, creating or truncating dst with the given permissions."""
    with open(src, "rb") as source:
        fd = os.open(dst, os.O_RDWR | os.O_CREAT | os.O_TRUNC, perm)
        with os.fdopen(fd, "wb") as destination:
            try:
                shutil.copyfileobj(source, destination)
            except OSError as err:
                raise BuildError(f"Copy: {err}") from err


def _program_name() -> str:
    return sys.argv[0] if sys.argv and sys.argv[0] else "build_gcsfuse"


def run(args: Sequence[str]) -> None:
    """Build from positional arguments: src_dir dst_dir version [build args]."""
    if len(args) < 3:
        raise BuildError(f"Usage: {_program_name()} src_dir dst_dir version [build args]")

    src_dir, dst_dir, version, *build_args = args
    try:
        build_binaries(dst_dir, src_dir, version, build_args)
    except BuildError as err:
        raise BuildError(f"buildBinaries: {err}") from err


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
    except (BuildError, OSError) as err:
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())