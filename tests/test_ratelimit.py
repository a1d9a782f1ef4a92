from __future__ import annotations

import threading
from datetime import datetime, timezone

import httpx
import pytest

from iptuapi import RateLimitError
from iptuapi.ratelimit import RateLimitSnapshot, RateLimitState, extract_rate_limit, parse_header_int

FULL = {"X-RateLimit-Limit": "1000", "X-RateLimit-Remaining": "999", "X-RateLimit-Reset": "1704067200"}


def test_extract_full_triple() -> None:
    snapshot = extract_rate_limit(httpx.Headers(FULL))
    assert snapshot == RateLimitSnapshot(limit=1000, remaining=999, reset=1704067200)
    assert snapshot.reset_time == datetime(2024, 1, 1, tzinfo=timezone.utc)


def test_extract_requires_all_headers() -> None:
    partial = {k: v for k, v in FULL.items() if k != "X-RateLimit-Reset"}
    assert extract_rate_limit(httpx.Headers(partial)) is None
    assert extract_rate_limit(httpx.Headers({**FULL, "X-RateLimit-Remaining": "lots"})) is None
    assert extract_rate_limit(httpx.Headers({})) is None


@pytest.mark.parametrize("value,expected", [("42", 42), (" 7 ", 7), ("-3", -3), ("+5", 5), ("0", 0)])
def test_parse_header_int_accepts_plain_integers(value: str, expected: int) -> None:
    assert parse_header_int(value) == expected


@pytest.mark.parametrize("value", [None, "", " ", "+", "-", "abc", "1_000", "1.5", "1e3", "１２", "٣"])
def test_parse_header_int_rejects_anything_else(value) -> None:
    assert parse_header_int(value) is None


def test_extract_rejects_underscored_values() -> None:
    assert extract_rate_limit({**FULL, "X-RateLimit-Limit": "1_000"}) is None
    assert extract_rate_limit({**FULL, "X-RateLimit-Reset": "１７０４０６７２００"}) is None


def test_missing_reset_keeps_previous_snapshot() -> None:
    state = RateLimitState()
    state.record(httpx.Headers(FULL))
    first = state.snapshot

    state.record(httpx.Headers({"X-RateLimit-Limit": "1000", "X-RateLimit-Remaining": "10"}))

    assert state.snapshot is first
    assert state.snapshot.remaining == 999


def test_request_id_stored_without_rate_limit_headers() -> None:
    state = RateLimitState()
    state.record(httpx.Headers({"X-Request-ID": "req_only"}))
    assert state.snapshot is None
    assert state.last_request_id == "req_only"

    state.record(httpx.Headers(FULL))
    assert state.last_request_id == "req_only"


def test_snapshot_replaced_wholesale() -> None:
    state = RateLimitState()
    state.record(httpx.Headers(FULL))
    state.record(httpx.Headers({"X-RateLimit-Limit": "500", "X-RateLimit-Remaining": "1", "X-RateLimit-Reset": "1"}))
    assert state.snapshot == RateLimitSnapshot(limit=500, remaining=1, reset=1)


def test_concurrent_records_never_tear() -> None:
    state = RateLimitState()
    errors: list[str] = []

    def writer(n: int) -> None:
        for _ in range(200):
            state.record(
                httpx.Headers(
                    {"X-RateLimit-Limit": str(n), "X-RateLimit-Remaining": str(n), "X-RateLimit-Reset": str(n)}
                )
            )
            snapshot = state.snapshot
            if not (snapshot.limit == snapshot.remaining == snapshot.reset):
                errors.append(repr(snapshot))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []


def test_error_responses_update_rate_limit(make_client) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            headers={**FULL, "X-RateLimit-Remaining": "0", "X-Request-ID": "req_429", "Retry-After": "1"},
        )

    client = make_client(handler)
    with pytest.raises(RateLimitError):
        client.iptu_tools_cidades()

    assert client.rate_limit.remaining == 0
    assert client.last_request_id == "req_429"
