"""Shared fixtures for the nestval test-suite."""

import pytest

from nestval.messages import MessageCompiler, StaticMessages
from nestval.predicates import PredicateRegistry


@pytest.fixture
def registry():
    """Fresh registry holding the built-in predicates."""
    return PredicateRegistry()


@pytest.fixture
def messages():
    """Static backend over the bundled English catalog."""
    return StaticMessages.load()


@pytest.fixture
def compiler(messages):
    return MessageCompiler(messages)


@pytest.fixture
def templates(tmp_path):
    """Write a YAML template file and return its path."""
    def write(content: str, name: str = "errors.yml"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return write
