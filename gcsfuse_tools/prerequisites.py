"""Check that the tools needed to package a release are installed."""

from __future__ import annotations

import shutil
import sys

from gcsfuse_tools.build_tool import BuildError

_GO_INSTRUCTIONS = "install Go from source or from a binary release"

_TOOLS: dict[str, tuple[tuple[str, str], ...]] = {
    "linux": (
        ("git", "sudo apt-get install git"),
        ("fpm", "sudo apt-get install ruby-dev build-essential && sudo gem install fpm -V"),
        ("go", _GO_INSTRUCTIONS),
    ),
    "darwin": (
        ("git", "brew install git"),
        ("fpm", "brew install gnu-tar && sudo gem install fpm -V"),
        ("go", _GO_INSTRUCTIONS),
    ),
}


def _current_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    return sys.platform


def check_for_tools(osys: str | None = None) -> None:
    """Raise BuildError naming the first required tool that is missing."""
    system = osys or _current_os()
    try:
        tools = _TOOLS[system]
    except KeyError:
        raise ValueError(f"Unsupported operating system: {system}") from None

    for name, instructions in tools:
        if shutil.which(name) is None:
            raise BuildError(f"{name} not found. Install it: {instructions}")