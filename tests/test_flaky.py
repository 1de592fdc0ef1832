import random

import pytest
import requests
from requests.adapters import HTTPAdapter

from gcsfuse_tools.flaky import FlakyAdapter, ServiceUnavailableError, new_flaky_transport


def _prepared():
    return requests.Request("GET", "http://example.com/").prepare()


def test_always_hiccups(capsys):
    adapter = FlakyAdapter(1.0)
    with pytest.raises(ServiceUnavailableError) as info:
        adapter.send(_prepared())
    assert info.value.code == 503
    assert info.value.body == "Service Unavailable"
    assert "Hiccup injected" in capsys.readouterr().out


def test_error_is_request_exception():
    adapter = FlakyAdapter(1.0)
    with pytest.raises(requests.exceptions.RequestException):
        adapter.send(_prepared())


def test_session_uses_adapter():
    session = requests.Session()
    session.mount("http://", FlakyAdapter(1.0))
    with pytest.raises(ServiceUnavailableError):
        session.get("http://example.com/")


def test_never_hiccups_delegates(monkeypatch):
    sentinel = object()
    seen = []

    def fake_send(self, request, **kwargs):
        seen.append(request)
        return sentinel

    monkeypatch.setattr(HTTPAdapter, "send", fake_send)
    adapter = FlakyAdapter(0.0)
    request = _prepared()
    assert adapter.send(request) is sentinel
    assert seen == [request]


def test_rate_is_roughly_respected(monkeypatch, capsys):
    monkeypatch.setattr(HTTPAdapter, "send", lambda self, request, **kwargs: "ok")
    adapter = FlakyAdapter(0.5, rng=random.Random(1))
    failures = 0
    for _ in range(1000):
        try:
            adapter.send(_prepared())
        except ServiceUnavailableError:
            failures += 1
    assert 350 < failures < 650
    assert capsys.readouterr().out.count("Hiccup injected") == failures


def test_new_flaky_transport():
    adapter = new_flaky_transport(0.25)
    assert isinstance(adapter, FlakyAdapter)
    assert adapter.hiccup_rate == 0.25
    with pytest.raises(ServiceUnavailableError):
        new_flaky_transport(1.0).send(_prepared())