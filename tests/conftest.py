"""Pytest configuration - minimal for unittest-based tests."""

import logging
import os

import pytest

# splunk_token_operator.main reads settings at import time.
os.environ.setdefault("SPLUNK_INSTANCE", "mock_splunk")
os.environ.setdefault("SPLUNK_JWT", "foo")


def pytest_configure(config):
    """Configure pytest for async tests and quiet the kubernetes client."""
    config.addinivalue_line(
        "markers",
        "asyncio: mark test as async"
    )
    logging.getLogger("kubernetes").setLevel(logging.WARNING)


@pytest.fixture(scope="session")
def event_loop_policy():
    """Use default event loop policy."""
    import asyncio
    return asyncio.DefaultEventLoopPolicy()
