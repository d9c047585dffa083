"""Test fixtures for unihook tests."""

import types

import pytest

from unihook import Environment, HookConfig, UniversalHook


class Counter:
    """Sample class for constructor and method hooks."""

    kind = "counter"

    def __init__(self, start=0):
        self.value = start

    def increment(self, step=1):
        self.value += step
        return self.value

    @staticmethod
    def describe(prefix):
        return f"{prefix}:counter"

    @classmethod
    def create(cls, start):
        return cls(start)


def add(x, y):
    """Add two numbers."""
    return x + y


@pytest.fixture
def namespace():
    """A synthetic namespace tree standing in for the global one."""
    return types.SimpleNamespace(
        add=add,
        Counter=Counter,
        api=types.SimpleNamespace(
            client=types.SimpleNamespace(fetch=lambda url: f"GET {url}"),
        ),
        settings={"timeout": 30},
    )


@pytest.fixture
def environment(namespace):
    return Environment(namespace)


@pytest.fixture
def config():
    """Quiet configuration for testing."""
    return HookConfig(debug=False, poll_interval_ms=10)


@pytest.fixture
def hooks(environment, config):
    manager = UniversalHook(environment=environment, config=config)
    yield manager
    manager.restore_all()
