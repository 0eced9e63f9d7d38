"""Pytest configuration and shared fixtures for lazyexpr tests."""

import pytest

from lazyexpr import configure_tracer


class RecordingTracer:
    """Tracer that remembers every (node type, value) it is told about."""

    def __init__(self):
        self.events: list[tuple[str, object]] = []

    def node_evaluated(self, node, value):
        self.events.append((type(node).__name__, value))


@pytest.fixture(autouse=True)
def clear_tracer():
    """Clear the global tracer before and after each test."""
    configure_tracer(None)
    yield
    configure_tracer(None)


@pytest.fixture
def tracer():
    """Provide a RecordingTracer installed as the global tracer."""
    recorder = RecordingTracer()
    configure_tracer(recorder)
    return recorder
