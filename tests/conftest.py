"""
Pytest configuration and fixtures for kvcheck tests.
Provides configurations, opened store pairs and run contexts.
"""

import os
import random

import pytest
from prometheus_client import CollectorRegistry

from kvcheck.compare import Comparator
from kvcheck.config import RunConfig, SchemaVariant
from kvcheck.context import RunContext
from kvcheck.generate import KeyValueGenerator
from kvcheck.stores import MemoryStore, SqliteStore
from kvutils.metrics import HarnessMetrics


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(autouse=True)
def clear_kvcheck_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep KVCHECK_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("KVCHECK_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> HarnessMetrics:
    return HarnessMetrics(registry=registry)


def make_context(config: RunConfig, seed: int = 1, metrics: HarnessMetrics | None = None) -> RunContext:
    """Open a SQLite SUT and memory oracle for ``config`` and wrap them in a context."""
    sut = SqliteStore(config.variant, config.collation, config.bitcnt).open()
    oracle = MemoryStore(config.variant, config.collation, config.bitcnt).open()
    return RunContext(
        config=config,
        generator=KeyValueGenerator.from_config(config),
        sut=sut,
        oracle=oracle,
        rng=random.Random(seed),
        metrics=metrics,
        row_count=config.rows,
    )


@pytest.fixture(params=[SchemaVariant.ROW, SchemaVariant.VAR, SchemaVariant.FIX], ids=lambda v: v.value)
def variant(request: pytest.FixtureRequest) -> SchemaVariant:
    return request.param


@pytest.fixture
def context_factory():
    """Build run contexts and close their stores after the test."""
    contexts = []

    def factory(config: RunConfig, seed: int = 1, metrics: HarnessMetrics | None = None) -> RunContext:
        ctx = make_context(config, seed, metrics)
        contexts.append(ctx)
        return ctx

    yield factory

    for ctx in contexts:
        ctx.sut.close()
        ctx.oracle.close()


@pytest.fixture
def comparator_factory(context_factory):
    def factory(config: RunConfig, seed: int = 1, metrics: HarnessMetrics | None = None) -> Comparator:
        return Comparator(context_factory(config, seed, metrics))

    return factory
