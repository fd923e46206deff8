"""Shared test fixtures for all test modules."""

from collections.abc import Callable

import pytest

from influx2hny.adapters.emitters.in_memory import InMemoryEmitter
from influx2hny.core.models import Sample
from tests.helpers import make_sample


@pytest.fixture
def sample_factory() -> Callable[..., Sample]:
    """Factory fixture for Sample objects."""
    return make_sample


@pytest.fixture
def emitter() -> InMemoryEmitter:
    """Fixture providing an empty in-memory emitter."""
    return InMemoryEmitter()


@pytest.fixture
def errors() -> list[Exception]:
    """List collecting errors passed to an observer."""
    return []


@pytest.fixture
def observer(errors: list[Exception]) -> Callable[[Exception], None]:
    """Error observer appending to the ``errors`` fixture."""
    return errors.append
