"""
Continuity enforcement between adjacent Bezier segments.

The previous segment is always authoritative: enforcement rewrites the next
segment's leading points and never touches earlier segments. Every function
returns a new Segment or Curve and leaves its arguments unchanged. Inputs are
not validated; callers pass genuinely adjacent segments.
"""

from bezierchain.models import Continuity, Curve, Point, continuity_at


def calculate_c1_handle(prev_p2, prev_p3):
    """Reflection of prev_p2 through prev_p3: 2 * P3 - P2."""
    return Point(
        x=2 * prev_p3.x - prev_p2.x,
        y=2 * prev_p3.y - prev_p2.y,
    )


def calculate_c2_handle(prev_p1, prev_p2, prev_p3):
    """
    Next segment's p2 that matches the second derivative at the junction.

    4 * P3 - 4 * P2 + P1, assuming both segments span unit parameter
    intervals. This is not a speed-aware curvature match.
    """
    return Point(
        x=4 * prev_p3.x - 4 * prev_p2.x + prev_p1.x,
        y=4 * prev_p3.y - 4 * prev_p2.y + prev_p1.y,
    )


def enforce_c0(prev_segment, next_segment):
    """Positional continuity: next.p0 = prev.p3."""
    return next_segment.model_copy(
        update={"p0": prev_segment.p3.model_copy()},
        deep=True,
    )


def enforce_c1(prev_segment, next_segment):
    """Tangent continuity: C0 plus next.p1 reflected from prev.p2."""
    return next_segment.model_copy(
        update={
            "p0": prev_segment.p3.model_copy(),
            "p1": calculate_c1_handle(prev_segment.p2, prev_segment.p3),
        },
        deep=True,
    )


def enforce_c2(prev_segment, next_segment):
    """Curvature continuity: C1 plus next.p2 from the second derivative."""
    return next_segment.model_copy(
        update={
            "p0": prev_segment.p3.model_copy(),
            "p1": calculate_c1_handle(prev_segment.p2, prev_segment.p3),
            "p2": calculate_c2_handle(prev_segment.p1, prev_segment.p2, prev_segment.p3),
        },
        deep=True,
    )


def apply_continuity(prev_segment, next_segment, mode):
    """
    Return next_segment adjusted to satisfy mode at its junction with prev_segment.

    INDEPENDENT still keeps the shared anchor (C0). Raises ValueError for a
    mode that is not a Continuity value.
    """
    mode = Continuity(mode)
    if mode == Continuity.C2:
        return enforce_c2(prev_segment, next_segment)
    if mode == Continuity.C1:
        return enforce_c1(prev_segment, next_segment)
    return enforce_c0(prev_segment, next_segment)


def _enforce_from(segments, curve, start):
    """Re-apply junction modes from junction `start` to the end, in order."""
    for j in range(start, curve.junction_count):
        segments[j + 1] = apply_continuity(segments[j], segments[j + 1], continuity_at(curve, j))
    return segments


def enforce_curve(curve):
    """
    Apply every junction's mode from first to last.

    Each junction sees the already-adjusted previous segment, so changes
    cascade forward through the chain.
    """
    segments = [s.model_copy(deep=True) for s in curve.segments]
    _enforce_from(segments, curve, 0)
    return Curve(segments=segments, continuity=list(curve.continuity))


def set_continuity(curve, junction_index, mode):
    """
    Return a copy of curve with the junction's mode changed and enforced.

    Later junctions are re-enforced because their previous segment may have
    moved. An out-of-range junction index returns an unchanged copy.
    """
    if junction_index < 0 or junction_index >= curve.junction_count:
        return curve.model_copy(deep=True)

    mode = Continuity(mode)
    continuity = [continuity_at(curve, j) for j in range(curve.junction_count)]
    continuity[junction_index] = mode

    updated = Curve(
        segments=[s.model_copy(deep=True) for s in curve.segments],
        continuity=continuity,
    )
    _enforce_from(updated.segments, updated, junction_index)
    return updated
