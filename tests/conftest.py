"""Pytest configuration for flatcache tests."""

import pytest


@pytest.fixture(autouse=True)
def reset_decorator_config():
    """Reset decorator configuration before each test."""
    import flatcache.decorators

    # Store original values
    original_service = flatcache.decorators._cache_service

    yield

    # Restore original values after test
    flatcache.decorators._cache_service = original_service
