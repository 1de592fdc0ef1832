"""Build gcsfuse from a source checkout using the build_gcsfuse tool."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile

from gcsfuse_tools.build_tool import BuildError, _go_root

_log = logging.getLogger(__name__)


def _run(cmd: list[str], what: str, **kwargs) -> None:
    try:
        completed = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            check=False,
            **kwargs,
        )
    except OSError as err:
        raise BuildError(f"{what}: {err}") from err
    if completed.returncode != 0:
        output = (completed.stdout or b"").decode(errors="replace")
        raise BuildError(f"{what}: exit status {completed.returncode}\nOutput:\n{output}")


def build_build_gcsfuse(dst: str, src_dir: str) -> None:
    """Compile the build_gcsfuse tool found in src_dir, writing it to dst."""
    go = shutil.which("go") or "go"
    with tempfile.TemporaryDirectory(prefix="build_gcsfuse_gopath") as gopath, \
            tempfile.TemporaryDirectory(prefix="build_gcsfuse_gocache") as gocache:
        # The tool needs nothing beyond the standard library, so GOPATH is empty.
        env = {"GOROOT": _go_root(), "GOPATH": gopath, "GOCACHE": gocache}
        _run([go, "build", "-o", dst], "go build build_gcsfuse", cwd=src_dir, env=env)


def build_gcsfuse(dst_dir: str, src_dir: str) -> None:
    """Build bin/gcsfuse, sbin/mount helpers, etc. from src_dir into dst_dir."""
    with tempfile.TemporaryDirectory(prefix="gcsfuse_integration_tests") as tool_dir:
        tool_path = os.path.join(tool_dir, "build_gcsfuse")
        _log.info("Building build_gcsfuse at %s", tool_path)
        try:
            build_build_gcsfuse(tool_path, os.path.join(src_dir, "tools", "build_gcsfuse"))
        except BuildError as err:
            raise BuildError(f"buildBuildGcsfuse: {err}") from err

        _log.info("Building gcsfuse into %s", dst_dir)
        _run([tool_path, src_dir, dst_dir, "fake_version"], "build_gcsfuse")