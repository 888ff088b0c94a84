# tests/conftest.py
import pytest


@pytest.fixture
def anyio_backend():
    # QueryClient cancellation is built on asyncio primitives
    return "asyncio"
