"""Locate the executables the mount helper depends on.

The mount command usually invokes its helpers without a usable $PATH, so
each program is looked for in a fixed set of directories seen on common
distributions.
"""

from __future__ import annotations

import os
import shutil
import sys

_NIX_PROFILE_BIN = "/run/current-system/sw/bin"

_FUSERMOUNT_DIRS = ("/bin", "/usr/bin", _NIX_PROFILE_BIN)
_GCSFUSE_DIRS = ("/usr/bin", "/usr/local/bin", _NIX_PROFILE_BIN)


def _locate(program: str, directories: tuple[str, ...], *, try_path: bool) -> str:
    """Return the first usable candidate for ``program``.

    With ``try_path`` set, the bare program name (resolved through $PATH) is
    tried before the fixed directories.
    """
    candidates = [os.path.join(d, program) for d in directories]
    if try_path:
        candidates.insert(0, program)
    usable = (c for c in candidates if shutil.which(c) is not None)
    found = next(usable, None)
    if found is None:
        raise FileNotFoundError("Can't find a usable executable.")
    return found


def find_fusermount() -> str | None:
    """Return the path to fusermount, or None when not running on Linux."""
    if not sys.platform.startswith("linux"):
        return None
    return _locate("fusermount", _FUSERMOUNT_DIRS, try_path=False)


def find_gcsfuse() -> str:
    """Return the path to the gcsfuse program."""
    return _locate("gcsfuse", _GCSFUSE_DIRS, try_path=True)