"""Pytest fixtures for bezierchain tests."""

import tempfile

import pytest

from bezierchain.models import Continuity, Curve, Point, Segment, make_segment


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def arch_segment():
    """Symmetric arch: rises to y=75 at t=0.5."""
    return make_segment((0, 0), (50, 100), (150, 100), (200, 0))


@pytest.fixture
def make_chain():
    """
    Factory for a curve of n joined segments along the x axis.

    Segment i spans x in [100 i, 100 (i + 1)] with handles raised to y=50.
    """
    def _make(num_segments, mode=Continuity.C1):
        segments = [
            Segment(
                p0=Point(x=i * 100, y=0),
                p1=Point(x=i * 100 + 25, y=50),
                p2=Point(x=i * 100 + 75, y=50),
                p3=Point(x=(i + 1) * 100, y=0),
            )
            for i in range(num_segments)
        ]
        return Curve(segments=segments, continuity=[mode] * max(0, num_segments - 1))
    return _make


@pytest.fixture
def default_config():
    """Create default configuration."""
    from bezierchain.config import AppConfig
    return AppConfig()
