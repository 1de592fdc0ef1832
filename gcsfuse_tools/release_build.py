"""Hermetic build of a gcsfuse release from a fresh clone of the repository."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile

from gcsfuse_tools.build_tool import _MODULE_PATH, BuildError, _go_root
from gcsfuse_tools.builder import _run

_log = logging.getLogger(__name__)

_CLONE_URL = f"https://{_MODULE_PATH}.git"


def build(commit: str, version: str, osys: str) -> str:
    """Build at commit (a branch, tag or commit), embedding version.

    Returns a new directory holding exactly the root-relative file system
    layout of the release. The caller owns the directory and must remove it.
    """
    _log.info("Building version %s from %s.", version, commit)
    goroot = _go_root()
    go = shutil.which("go") or "go"

    out_dir = tempfile.mkdtemp(prefix="package_gcsfuse_build")
    try:
        with tempfile.TemporaryDirectory(prefix="package_gcsfuse_gocache") as gocache, \
                tempfile.TemporaryDirectory(prefix="package_gcsfuse_git") as git_dir:
            _log.info("Cloning into %s", git_dir)
            _run(["git", "clone", "-b", commit, _CLONE_URL, git_dir], "Cloning")

            build_tool = os.path.join(git_dir, "build_gcsfuse")
            _log.info("Building build_gcsfuse...")
            _run(
                [go, "build", "-o", build_tool],
                "Building build_gcsfuse",
                cwd=os.path.join(git_dir, "tools", "build_gcsfuse"),
                env={
                    "GO15VENDOREXPERIMENT": "1",
                    "GOROOT": goroot,
                    "GOCACHE": gocache,
                    "GOPATH": "/does/not/exist",
                },
            )

            _log.info("Running build_gcsfuse...")
            _run([build_tool, git_dir, out_dir, version], "go run build_gcsfuse")

        # build_gcsfuse writes bin/ and sbin/; a Linux package wants the
        # binaries under /usr/bin.
        try:
            os.makedirs(os.path.join(out_dir, "usr"), 0o755, exist_ok=True)
        except OSError as err:
            raise BuildError(f"MkdirAll: {err}") from err
        try:
            os.rename(os.path.join(out_dir, "bin"), os.path.join(out_dir, "usr", "bin"))
        except OSError as err:
            raise BuildError(f"Rename: {err}") from err
    except BaseException:
        shutil.rmtree(out_dir, ignore_errors=True)
        raise

    return out_dir