"""A helper that allows using gcsfuse with mount(8).

It accepts a command line of the form mount(8) gives its helpers, converts the
known options into gcsfuse flags, and runs gcsfuse, waiting for it to finish.
"""

from __future__ import annotations

import json
import os
import subprocess
import sys
from collections.abc import Mapping, Sequence

from gcsfuse_tools.finder import find_fusermount, find_gcsfuse

# Relevant to mount(8) but not to gcsfuse; fusermount rejects them on Linux.
_IGNORED_OPTIONS = frozenset({"user", "nouser", "auto", "noauto", "_netdev", "no_netdev"})

_BOOL_FLAGS = frozenset({"implicit_dirs", "disable_http2"})

_STRING_FLAGS = frozenset(
    {
        "dir_mode",
        "file_mode",
        "uid",
        "gid",
        "app_name",
        "only_dir",
        "billing_project",
        "key_file",
        "token_url",
        "limit_bytes_per_sec",
        "limit_ops_per_sec",
        "rename_dir_limit",
        "max_retry_sleep",
        "stat_cache_capacity",
        "stat_cache_ttl",
        "type_cache_ttl",
        "local_file_cache",
        "temp_dir",
        "max_conns_per_host",
        "stackdriver_export_interval",
        "log_format",
        "log_file",
    }
)

_DEBUG_FLAGS = frozenset(
    {
        "debug_fuse",
        "debug_fs",
        "debug_gcs",
        "debug_http",
        "debug_invariants",
        "debug_mutex",
    }
)


def parse_options(text: str) -> dict[str, str]:
    """Parse a comma-separated mount option string into a name/value mapping."""
    opts: dict[str, str] = {}
    for part in text.split(","):
        if not part:
            continue
        name, _, value = part.partition("=")
        opts[name] = value
    return opts


def _flag(name: str) -> str:
    return "--" + name.replace("_", "-")


def make_gcsfuse_args(device: str, mount_point: str, opts: Mapping[str, str]) -> list[str]:
    """Turn mount-style options into gcsfuse arguments, dropping mount detritus."""
    args: list[str] = []
    for name, value in opts.items():
        if name in _IGNORED_OPTIONS:
            continue
        if name in _BOOL_FLAGS:
            args.append(_flag(name))
        elif name in _STRING_FLAGS:
            args.extend((_flag(name), value))
        elif name in _DEBUG_FLAGS:
            args.append("--" + name)
        else:
            args.extend(("-o", f"{name}={value}" if value else name))
    args.extend((device, mount_point))
    return args


def parse_args(args: Sequence[str]) -> tuple[str, str, dict[str, str]]:
    """Parse a mount(8) helper command line, program name included.

    Returns the device, the mount point and the collected options.
    """
    opts: dict[str, str] = {}
    positionals: list[str] = []
    last = len(args) - 1

    for i, arg in enumerate(args):
        if i == 0:
            continue
        if arg == "-o":
            # Its argument is handled on the next iteration.
            if i == last:
                raise ValueError("Unexpected -o at end of args.")
        elif arg == "-n":
            # systemd passes --no-mtab; there is no mtab to skip writing.
            continue
        elif args[i - 1] == "-o":
            opts.update(parse_options(arg))
        elif len(positionals) < 2:
            positionals.append(arg)
        else:
            raise ValueError(f"Unexpected arg {i}: {json.dumps(arg)}")

    if len(positionals) != 2:
        raise ValueError(f"Expected two positional arguments; got {len(positionals)}.")

    device, mount_point = positionals
    return device, mount_point, opts


def _child_environment(fusermount_path: str | None) -> dict[str, str]:
    env = {"PATH": os.path.dirname(fusermount_path) if fusermount_path else "."}
    # Pass a proxy through in case the host needs one to reach the endpoint;
    # https_proxy wins when both are set.
    for proxy_var in ("https_proxy", "http_proxy"):
        proxy = os.environ.get(proxy_var)
        if proxy is not None:
            env[proxy_var] = proxy
            break
    return env


def run(args: Sequence[str]) -> None:
    """Mount via gcsfuse using a mount(8) style command line (program name first)."""
    if len(args) == 2 and args[1] == "--help":
        print(f"Usage: {args[0]} [-o options] bucket_name mount_point", file=sys.stderr)
        return

    try:
        gcsfuse_path = find_gcsfuse()
    except FileNotFoundError as err:
        raise FileNotFoundError(f"findGcsfuse: {err}") from err

    try:
        fusermount_path = find_fusermount()
    except FileNotFoundError as err:
        raise FileNotFoundError(f"findFusermount: {err}") from err

    try:
        device, mount_point, opts = parse_args(args)
    except ValueError as err:
        raise ValueError(f"parseArgs: {err}") from err

    gcsfuse_args = make_gcsfuse_args(device, mount_point, opts)
    print(f"Calling gcsfuse with arguments: {' '.join(gcsfuse_args)}", file=sys.stderr)

    try:
        completed = subprocess.run(
            [gcsfuse_path, *gcsfuse_args],
            env=_child_environment(fusermount_path),
            check=False,
        )
    except OSError as err:
        raise RuntimeError(f"running gcsfuse: {err}") from err

    if completed.returncode != 0:
        raise RuntimeError(f"running gcsfuse: exit status {completed.returncode}")


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry point; argv excludes the program name."""
    if argv is None:
        full = list(sys.argv)
    else:
        program = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "mount.gcsfuse"
        full = [program, *argv]
    try:
        run(full)
    except Exception as err:  # noqa: BLE001 - report any failure and exit non-zero
        print(err, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())