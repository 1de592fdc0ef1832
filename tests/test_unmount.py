import shutil
import subprocess
import sys
import time

import pytest

from gcsfuse_tools.unmount import unmount


class _Sequence:
    def __init__(self, results):
        self.results = list(results)
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(list(cmd))
        code, output = self.results.pop(0)
        return subprocess.CompletedProcess(cmd, code, stdout=output)


@pytest.fixture
def sleeps(monkeypatch):
    recorded = []
    monkeypatch.setattr(time, "sleep", recorded.append)
    return recorded


@pytest.fixture
def linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(shutil, "which", lambda name: "/bin/" + name)


def test_success_first_try(linux, sleeps, monkeypatch):
    seq = _Sequence([(0, b"")])
    monkeypatch.setattr(subprocess, "run", seq)
    assert unmount("/mnt/x") is None
    assert seq.calls == [["/bin/fusermount", "-u", "/mnt/x"]]
    assert sleeps == []


def test_retries_on_resource_busy(linux, sleeps, monkeypatch):
    busy = (1, b"failed to unmount: Device or resource busy")
    seq = _Sequence([busy, busy, (0, b"")])
    monkeypatch.setattr(subprocess, "run", seq)

    assert unmount("/mnt/x") is None

    assert len(seq.calls) == 3
    assert len(sleeps) == 2
    assert sleeps[0] == pytest.approx(0.01)
    assert sleeps[1] / sleeps[0] == pytest.approx(1.3)


def test_other_errors_raise(linux, sleeps, monkeypatch):
    monkeypatch.setattr(subprocess, "run", _Sequence([(1, b"not mounted")]))
    with pytest.raises(OSError, match="^Unmount: .*not mounted"):
        unmount("/mnt/x")
    assert sleeps == []


def test_missing_fusermount(monkeypatch, sleeps):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.setattr(shutil, "which", lambda name: None)
    with pytest.raises(OSError, match="^Unmount: fusermount"):
        unmount("/mnt/x")


def test_darwin_uses_umount(monkeypatch, sleeps):
    monkeypatch.setattr(sys, "platform", "darwin")
    seq = _Sequence([(0, b"")])
    monkeypatch.setattr(subprocess, "run", seq)
    assert unmount("/mnt/y") is None
    assert seq.calls == [["umount", "/mnt/y"]]