"""Unmount a FUSE file system, retrying while the mount is busy."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
import time

_log = logging.getLogger(__name__)

_INITIAL_DELAY = 0.01
_BACKOFF = 1.3


def _fuse_unmount(directory: str) -> None:
    if sys.platform.startswith("linux"):
        fusermount = shutil.which("fusermount")
        if fusermount is None:
            raise OSError("fusermount: executable file not found in $PATH")
        cmd = [fusermount, "-u", directory]
    else:
        cmd = ["umount", directory]

    completed = subprocess.run(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        check=False,
    )
    if completed.returncode != 0:
        output = (completed.stdout or b"").decode(errors="replace").strip()
        raise OSError(f"{' '.join(cmd)}: exit status {completed.returncode}: {output}")


def unmount(directory: str) -> None:
    """Unmount the file system at directory.

    "resource busy" failures, which happen from time to time on OS X, are
    retried with a growing delay; other failures raise OSError.
    """
    delay = _INITIAL_DELAY
    while True:
        try:
            _fuse_unmount(directory)
            return
        except OSError as err:
            if "resource busy" in str(err):
                _log.warning("Resource busy error while unmounting: %s; trying again", err)
                time.sleep(delay)
                delay *= _BACKOFF
                continue
            raise OSError(f"Unmount: {err}") from err