"""A requests transport adapter that injects "service unavailable" failures.

For tests only.
"""

from __future__ import annotations

import random
import time
from http import HTTPStatus

import requests
from requests.adapters import HTTPAdapter


class ServiceUnavailableError(requests.exceptions.HTTPError):
    """An injected HTTP 503 failure."""

    def __init__(self, body: str = "Service Unavailable", **kwargs) -> None:
        self.code = int(HTTPStatus.SERVICE_UNAVAILABLE)
        self.body = body
        super().__init__(f"googleapi: Error {self.code}: {body}", **kwargs)


class FlakyAdapter(HTTPAdapter):
    """Adapter that fails a share of requests, hiccup_rate in [0, 1]."""

    def __init__(self, hiccup_rate: float, rng: random.Random | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.hiccup_rate = hiccup_rate
        self._rng = rng if rng is not None else random.Random()

    def _unavailable(self) -> bool:
        return self._rng.random() < self.hiccup_rate

    def send(self, request, **kwargs):
        """Send the request, or raise ServiceUnavailableError on a hiccup."""
        if self._unavailable():
            print("Hiccup injected")
            raise ServiceUnavailableError(request=request)
        return super().send(request, **kwargs)


def new_flaky_transport(hiccup_rate: float) -> FlakyAdapter:
    """Return a FlakyAdapter seeded from the current time."""
    rng = random.Random(time.time_ns() % 1_000_000_000)
    return FlakyAdapter(hiccup_rate, rng=rng)