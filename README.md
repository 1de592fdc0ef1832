# gcsfuse-tools

Helper commands around the `gcsfuse` file system: a `mount(8)` helper, a
tool that assembles release binaries into a directory tree, and a tool that
turns a tagged release into `.deb` and `.rpm` packages.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Commands

### mount-gcsfuse

A helper in the form `mount(8)` expects. It accepts the device (bucket name),
the mount point and any number of `-o` option strings. The options may come
before the positional arguments (the OS X order) or after them (the Linux
order):

```
mount-gcsfuse [-o options] bucket_name mount_point
```

Options are turned into `gcsfuse` flags:

- `user`, `nouser`, `auto`, `noauto`, `_netdev` and `no_netdev` are dropped.
- `implicit_dirs` and `disable_http2` become `--implicit-dirs` and
  `--disable-http2`.
- Valued options such as `dir_mode`, `file_mode`, `uid`, `gid`, `app_name`,
  `only_dir`, `billing_project`, `key_file`, `token_url`,
  `limit_bytes_per_sec`, `limit_ops_per_sec`, `rename_dir_limit`,
  `max_retry_sleep`, `stat_cache_capacity`, `stat_cache_ttl`,
  `type_cache_ttl`, `local_file_cache`, `temp_dir`, `max_conns_per_host`,
  `stackdriver_export_interval`, `log_format` and `log_file` become a flag
  with dashes for underscores followed by the value, e.g. `dir_mode=754`
  becomes `--dir-mode 754`.
- `debug_fuse`, `debug_fs`, `debug_gcs`, `debug_http`, `debug_invariants` and
  `debug_mutex` are passed unchanged as `--debug_*` flags.
- Everything else is passed through as `-o name` or `-o name=value`.

A `-n` argument (as sent by systemd) is ignored. A trailing `-o`, a missing
positional argument or an extra one is an error, and the command exits with
status 1.

`gcsfuse` is looked up on `$PATH` and then in `/usr/bin`, `/usr/local/bin`
and `/run/current-system/sw/bin`; on Linux, `fusermount` is looked up in
`/bin`, `/usr/bin` and `/run/current-system/sw/bin`, because `mount(8)` calls
its helpers without `$PATH`. `gcsfuse` is run with `PATH` set to the
directory holding `fusermount`, and with `https_proxy` (or, failing that,
`http_proxy`) passed on. The arguments used are printed to standard error.

`mount-gcsfuse --help` prints a usage line to standard error and exits
successfully.

### build-gcsfuse

```
build-gcsfuse src_dir dst_dir version [build args]
```

Runs `go build` on the source tree in `src_dir` and writes the binaries under
`dst_dir`, which must not already contain `bin` or `sbin`:

- Linux: `bin/gcsfuse`, `sbin/mount.gcsfuse` and a `sbin/mount.fuse.gcsfuse`
  symbolic link, so that `mount -t fuse.gcsfuse` works too.
- Elsewhere: `bin/gcsfuse` and `sbin/mount_gcsfuse`.

The version string is embedded into `gcsfuse`; extra build arguments are
passed on for that binary only. `GOROOT` is taken from the environment or
from `go env GOROOT`.

### package-gcsfuse

```
package-gcsfuse dst_dir version [commit]
```

Checks that `git`, `fpm` and `go` are installed (naming how to install the
first one that is missing), clones the repository at `commit` (default
`v<version>`), builds the `build_gcsfuse` tool from that clone, runs it,
and moves `bin` to `usr/bin`. On Linux it then calls `fpm` to write a `.deb`
and an `.rpm` into `dst_dir`; on OS X the build is done but no package is
written. The temporary build directory is removed afterwards.

## Library use

The pieces are usable from Python as well:

```python
from gcsfuse_tools.mount_helper import parse_args, make_gcsfuse_args

device, mount_point, opts = parse_args(
    ["mount-gcsfuse", "-o", "ro,implicit_dirs", "bucket", "/mnt/bucket"]
)
args = make_gcsfuse_args(device, mount_point, opts)
# ['-o', 'ro', '--implicit-dirs', 'bucket', '/mnt/bucket']
```

- `gcsfuse_tools.mount_helper.parse_options` parses a comma-separated option
  string into a dictionary.
- `gcsfuse_tools.finder.find_gcsfuse` and `find_fusermount` return the
  executables' paths (`find_fusermount` returns `None` off Linux) and raise
  `FileNotFoundError` when none is usable.
- `gcsfuse_tools.build_tool.build_binaries` and `copy_file`, and
  `gcsfuse_tools.builder.build_gcsfuse` and `build_build_gcsfuse`, perform
  the builds; failures raise `gcsfuse_tools.build_tool.BuildError` with the
  tool's output.
- `gcsfuse_tools.release_build.build`, `gcsfuse_tools.fpm.package_deb`,
  `package_rpm` and `package_fpm`, and
  `gcsfuse_tools.prerequisites.check_for_tools` are the steps of
  `package-gcsfuse`.
- `gcsfuse_tools.unmount.unmount` runs `fusermount -u` on Linux and `umount`
  elsewhere, retrying with a growing delay while the file system reports
  "resource busy".
- `gcsfuse_tools.flaky.new_flaky_transport(rate)` returns a `FlakyAdapter`,
  a `requests` transport adapter that fails the given fraction of requests
  with `ServiceUnavailableError` (HTTP 503), for exercising retry logic in
  tests. Mount it on a session with `session.mount("https://", adapter)`.
- `gcsfuse_tools.version.get_version` formats a version string, using
  "unknown" when none is given.

## What this package does not do

It does not contain the `gcsfuse` file system itself. `mount-gcsfuse` needs
a `gcsfuse` executable installed, and the build and packaging commands need
a Go toolchain, `git` and `fpm` on the machine; they only drive those
programs.