"""
Test configuration and fixtures for the visitor beacon.
This centralizes all test setup, making individual tests clean.
"""

import os

# Never reach for a real Redis from the test suite
os.environ.setdefault("STORE_BACKEND", "memory")

import pytest
from fastapi.testclient import TestClient

from main import app
from beacon_app.dependencies import get_key_space, get_store
from beacon_app.store.factory import CounterStoreFactory
from beacon_app.store.keys import KeySpace
from beacon_app.store.strategies import InMemoryCounterStore


@pytest.fixture(scope="function")
def keys():
    return KeySpace("test")


@pytest.fixture(scope="function")
def store():
    """
    Fresh in-memory store for each test.
    This ensures tests are isolated and don't affect each other.
    """
    return InMemoryCounterStore()


@pytest.fixture(scope="function")
def make_client(keys):
    """
    Build a test client bound to the given store.
    Overrides are cleared when the test ends.
    """
    clients = []

    def _make(store):
        app.dependency_overrides[get_store] = lambda: store
        app.dependency_overrides[get_key_space] = lambda: keys
        test_client = TestClient(app)
        clients.append(test_client)
        return test_client

    yield _make

    for test_client in clients:
        test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(make_client, store):
    """
    Test client with the in-memory store injected.
    This is the main fixture that tests will use.
    """
    return make_client(store)


@pytest.fixture(autouse=True)
def reset_store_factory():
    CounterStoreFactory.clear_instance()
    yield
    CounterStoreFactory.clear_instance()
