from __future__ import annotations

from typing import Callable

import httpx
import pytest

from iptuapi import ClientConfig, IPTUClient, RetryPolicy

BASE_URL = "https://api.example.com"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture()
def make_client():
    clients: list[IPTUClient] = []

    def factory(handler: Handler, **overrides) -> IPTUClient:
        values = {"api_key": "test_api_key", "base_url": BASE_URL, "retry": RetryPolicy(max_retries=0)}
        values.update(overrides)
        cfg = ClientConfig(**values)
        client = IPTUClient(cfg, transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield factory
    for client in clients:
        client.close()


def fast_retry(max_retries: int, **overrides) -> RetryPolicy:
    values = dict(max_retries=max_retries, initial_delay=0.001, max_delay=0.01, backoff_factor=1.5)
    values.update(overrides)
    return RetryPolicy(**values)
