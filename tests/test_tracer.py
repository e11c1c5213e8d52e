"""Tests for runtime tracing."""

import numpy as np
import pytest

from bezierchain.models import Curve, CurveCollection, Point, make_segment
from bezierchain.tracer import configure_tracer, get_tracer, summarize, trace


@pytest.fixture
def tracer_enabled():
    configure_tracer(enabled=True, level="DEBUG")
    yield get_tracer()
    configure_tracer(enabled=False)


class TestSummarize:
    """Tests for summarize."""

    def test_models(self):
        curve = Curve(segments=[make_segment((0, 0), (1, 1), (2, 2), (3, 3))])

        assert summarize(Point(x=1.5, y=-2)) == "(1.5,-2)"
        assert summarize(curve) == "Curve(segments=1)"
        assert summarize(CurveCollection(curves=[curve], active_curve_index=0)) == \
            "CurveCollection(curves=1,active=0)"

    def test_long_strings_hashed(self):
        assert summarize("a" * 80).startswith("str(len=80,h=")
        assert summarize("short") == "'short'"

    def test_arrays_and_containers(self):
        assert summarize(np.zeros((3, 2))) == "ndarray(float64,3x2)"
        assert summarize([]) == "list(len=0)"
        assert summarize({"a": 1}) == "dict(len=1,keys=[a])"

    def test_max_len(self):
        assert len(summarize(list(range(10)), max_len=10)) == 10


class TestTracer:
    """Tests for spans and the trace decorator."""

    def test_disabled_by_default_is_silent(self, capsys):
        configure_tracer(enabled=False)

        get_tracer().event("hidden")

        assert capsys.readouterr().err == ""

    def test_span_logs_start_and_end(self, tracer_enabled, capsys):
        with tracer_enabled.span("outer", module="tests"):
            tracer_enabled.event("inside", level="DEBUG")

        err = capsys.readouterr().err
        assert "tests:outer  start" in err
        assert "inside" in err
        assert "end ok" in err

    def test_span_logs_failure(self, tracer_enabled, capsys):
        with pytest.raises(RuntimeError):
            with tracer_enabled.span("boom", module="tests"):
                raise RuntimeError("bad")

        assert "failed" in capsys.readouterr().err

    def test_trace_decorator(self, tracer_enabled, capsys):
        @trace(label="doubled", arg_names=["value"])
        def double(value):
            return value * 2

        assert double(value=4) == 8
        assert "doubled  start value=4" in capsys.readouterr().err

    def test_span_unwinds_on_interrupt(self, tracer_enabled, capsys):
        """Test that a BaseException still pops the span and restores depth."""
        with pytest.raises(KeyboardInterrupt):
            with tracer_enabled.span("outer", module="tests"):
                with tracer_enabled.span("inner", module="tests"):
                    raise KeyboardInterrupt

        assert tracer_enabled._depth == 0
        assert tracer_enabled._span_stack == []
        assert "error=KeyboardInterrupt" in capsys.readouterr().err

    def test_span_unwinds_on_error(self, tracer_enabled):
        with pytest.raises(ValueError):
            with tracer_enabled.span("boom", module="tests"):
                raise ValueError("bad")

        assert tracer_enabled._depth == 0
        assert tracer_enabled._span_stack == []
