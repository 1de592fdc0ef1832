import os
import shutil
import subprocess
import sys

import pytest

from gcsfuse_tools.build_tool import BuildError
from gcsfuse_tools.release import main, run


class _FakeRunner:
    def __init__(self):
        self.fail = None
        self.calls = []

    @staticmethod
    def _kind(cmd):
        name = os.path.basename(cmd[0])
        if name == "git":
            return "clone"
        if name == "fpm":
            return "fpm"
        if name == "go" and cmd[1] == "build":
            return "go"
        return "tool"

    def __call__(self, cmd, **kwargs):
        cmd = list(cmd)
        self.calls.append((cmd, kwargs))
        kind = self._kind(cmd)
        if kind == self.fail:
            return subprocess.CompletedProcess(cmd, 1, stdout=b"failure output")
        if kind == "tool":
            bin_dir = os.path.join(cmd[2], "bin")
            os.makedirs(bin_dir)
            with open(os.path.join(bin_dir, "gcsfuse"), "w") as f:
                f.write("binary")
        return subprocess.CompletedProcess(cmd, 0, stdout=b"")

    def of_kind(self, kind):
        return [c for c in self.calls if self._kind(c[0]) == kind]


@pytest.fixture
def runner(monkeypatch):
    fake = _FakeRunner()
    monkeypatch.setenv("GOROOT", "/fake/goroot")
    monkeypatch.setattr(subprocess, "run", fake)
    monkeypatch.setattr(shutil, "which", lambda name, *a, **k: f"/usr/bin/{name}")
    return fake


@pytest.mark.parametrize("args", [[], ["out"], ["out", "1.0.0", "main", "extra"]])
def test_usage_error(args):
    with pytest.raises(BuildError, match="Usage: .* dst_dir version \\[commit\\]"):
        run(args)


def test_linux_builds_deb_and_rpm(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    assert run([str(tmp_path), "1.2.3"]) is None
    fpm_calls = runner.of_kind("fpm")
    types = [cmd[cmd.index("-t") + 1] for cmd, _ in fpm_calls]
    assert types == ["deb", "rpm"]
    assert all(kwargs["cwd"] == str(tmp_path) for _, kwargs in fpm_calls)


def test_default_commit_is_version_tag(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    assert run([str(tmp_path), "1.2.3"]) is None
    clone_cmd, _ = runner.of_kind("clone")[0]
    assert clone_cmd[2:4] == ["-b", "v1.2.3"]


def test_explicit_commit(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    assert run([str(tmp_path), "1.2.3", "main"]) is None
    clone_cmd, _ = runner.of_kind("clone")[0]
    assert clone_cmd[2:4] == ["-b", "main"]


def test_build_directory_is_removed(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    assert run([str(tmp_path), "1.2.3"]) is None
    fpm_cmd, _ = runner.of_kind("fpm")[0]
    build_dir = fpm_cmd[fpm_cmd.index("-C") + 1]
    assert not os.path.exists(build_dir)


def test_darwin_skips_packaging(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "darwin")
    assert run([str(tmp_path), "1.2.3"]) is None
    assert runner.of_kind("fpm") == []
    build_dir = runner.of_kind("tool")[0][0][2]
    assert not os.path.exists(build_dir)


def test_packaging_failure(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    runner.fail = "fpm"
    with pytest.raises(BuildError, match="^packageDeb: fpm: ") as info:
        run([str(tmp_path), "1.2.3"])
    assert "failure output" in str(info.value)
    build_dir = runner.of_kind("tool")[0][0][2]
    assert not os.path.exists(build_dir)


def test_build_failure_is_wrapped(runner, monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "linux")
    runner.fail = "clone"
    with pytest.raises(BuildError, match="^build: Cloning"):
        run([str(tmp_path), "1.2.3"])
    assert runner.of_kind("fpm") == []


def test_missing_tool_stops_before_building(monkeypatch, tmp_path):
    fake = _FakeRunner()
    monkeypatch.setattr(subprocess, "run", fake)
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(
        shutil, "which", lambda name, *a, **k: None if name == "fpm" else f"/usr/bin/{name}"
    )
    with pytest.raises(BuildError, match="^fpm not found"):
        run([str(tmp_path), "1.2.3"])
    assert fake.calls == []


def test_main_reports_usage(capsys):
    assert main([]) == 1
    assert "Usage:" in capsys.readouterr().err