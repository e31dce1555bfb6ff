"""
Pytest configuration and shared fixtures.
"""

import asyncio
from typing import List

import pytest

from searchagg.logger import StructuredLogger
from searchagg.result import ScoredResult


def make_results(*pairs) -> List[ScoredResult]:
    """Build results from (id, score) pairs; the object is a label for the pair."""
    return [ScoredResult(id=i, object=f"obj-{i}-{s}", score=s) for i, s in pairs]


class StaticProvider:
    """Provider returning a fixed list, recording every call it receives."""

    def __init__(self, results, name="static", delay=0.0):
        self.results = results
        self.name = name
        self.delay = delay
        self.calls = []

    async def query(self, term, max_results, timeout_ms):
        self.calls.append((term, max_results, timeout_ms))
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.results


class FailingProvider:
    def __init__(self, exc=None, name="failing"):
        self.exc = exc or RuntimeError("provider exploded")
        self.name = name
        self.calls = 0

    async def query(self, term, max_results, timeout_ms):
        self.calls += 1
        raise self.exc


class HangingProvider:
    """Provider that never answers within any reasonable deadline."""

    def __init__(self, name="hanging"):
        self.name = name
        self.cancelled = False

    async def query(self, term, max_results, timeout_ms):
        try:
            await asyncio.sleep(60)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return []


@pytest.fixture
def quiet_logger() -> StructuredLogger:
    """Logger with no console output, so metrics can be inspected per test."""
    return StructuredLogger(name="searchagg-test", level="DEBUG", enable_console=False)


@pytest.fixture
def provider_a() -> StaticProvider:
    return StaticProvider(make_results((1, 5), (2, 9)), name="a")


@pytest.fixture
def provider_b() -> StaticProvider:
    return StaticProvider(make_results((1, 7), (3, 2)), name="b")


@pytest.fixture
def elastic_payload() -> dict:
    """Trimmed Elasticsearch _search response."""
    return {
        "took": 3,
        "timed_out": False,
        "hits": {
            "total": 2,
            "max_score": 1.7,
            "hits": [
                {"_id": "mine", "_score": 1.7, "_source": {"name": "Mine telemetry"}},
                {"_id": "sat", "_score": 0.4, "_source": {"name": "Satellite"}},
            ],
        },
    }
