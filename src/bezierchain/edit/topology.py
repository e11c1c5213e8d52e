"""
Structural edits over curve collections.

Anchor deletion merges or drops segments while keeping one continuity entry
per junction. Anchor insertion splits a segment in place. Inputs are never
mutated: every result is built from deep copies, so callers can keep the
previous state for undo.
"""

from bezierchain.geometry.bezier import split_curve
from bezierchain.models import (
    ANCHOR_ROLES, Continuity, Curve, CurveCollection, PointRole, Segment,
    clamp_active_index,
)
from bezierchain.tracer import get_tracer, trace


def _copy_curves(curves):
    return [c.model_copy(deep=True) for c in curves]


@trace(label="delete_node")
def delete_node(curves, active_curve_index, curve_index, segment_index, role):
    """
    Delete the anchor at (curve_index, segment_index, role).

    Args:
        curves: list of Curve objects
        active_curve_index: index of the active curve, or -1
        curve_index: curve holding the anchor
        segment_index: segment holding the anchor
        role: 'p0' or 'p3'; handles cannot be deleted

    Returns:
        tuple of (new_curves, new_active_curve_index)

    Invalid roles and out-of-range indices return an unchanged copy. Deleting
    an anchor of a single-segment curve removes the whole curve.
    """
    tracer = get_tracer()
    new_curves = _copy_curves(curves)

    if role not in ANCHOR_ROLES:
        tracer.event(f"Ignoring delete of non-anchor point {role!r}", level="DEBUG")
        return new_curves, active_curve_index

    if curve_index < 0 or curve_index >= len(new_curves):
        tracer.event(f"Ignoring delete on missing curve {curve_index}", level="DEBUG")
        return new_curves, active_curve_index

    curve = new_curves[curve_index]
    num_segments = len(curve.segments)

    if num_segments == 0:
        return new_curves, active_curve_index

    if segment_index < 0 or segment_index >= num_segments:
        tracer.event(f"Ignoring delete on missing segment {segment_index}", level="DEBUG")
        return new_curves, active_curve_index

    if num_segments == 1:
        del new_curves[curve_index]
        new_active = clamp_active_index(active_curve_index, len(new_curves))
        tracer.event(f"Removed curve {curve_index}, {len(new_curves)} curves left")
        return new_curves, new_active

    if role == PointRole.P0 and segment_index == 0:
        del curve.segments[0]
        if curve.continuity:
            del curve.continuity[0]
        return new_curves, active_curve_index

    if role == PointRole.P3 and segment_index == num_segments - 1:
        del curve.segments[-1]
        if curve.continuity:
            del curve.continuity[-1]
        return new_curves, active_curve_index

    # Interior anchor: segment k's p0 is the same node as segment k-1's p3
    junction = segment_index if role == PointRole.P3 else segment_index - 1
    first = curve.segments[junction]
    second = curve.segments[junction + 1]

    merged = Segment(p0=first.p0, p1=first.p1, p2=second.p2, p3=second.p3)
    curve.segments[junction:junction + 2] = [merged]
    if junction < len(curve.continuity):
        del curve.continuity[junction]

    tracer.event(f"Merged segments {junction} and {junction + 1} of curve {curve_index}")
    return new_curves, active_curve_index


def delete_node_in_collection(collection, node):
    """Apply delete_node to a CurveCollection using a NodeRef address."""
    curves, active = delete_node(
        collection.curves,
        collection.active_curve_index,
        node.curve_index,
        node.segment_index,
        node.role,
    )
    return CurveCollection(curves=curves, active_curve_index=active)


@trace(label="insert_node")
def insert_node(curve, segment_index, t):
    """
    Split one segment at parameter t, adding an anchor.

    The shape is unchanged. The new junction is INDEPENDENT; existing
    junctions keep their modes. Invalid segment indices and t outside (0, 1)
    return an unchanged copy.
    """
    updated = curve.model_copy(deep=True)

    if segment_index < 0 or segment_index >= len(updated.segments) or not 0 < t < 1:
        get_tracer().event(f"Ignoring insert at segment {segment_index}, t={t}", level="DEBUG")
        return updated

    seg = updated.segments[segment_index]
    first, second = split_curve(seg.p0, seg.p1, seg.p2, seg.p3, t)
    updated.segments[segment_index:segment_index + 1] = [first, second]
    updated.continuity.insert(segment_index, Continuity.INDEPENDENT)
    return updated


def replace_curve(collection, curve_index, curve):
    """Return a copy of collection with one curve swapped out."""
    curves = _copy_curves(collection.curves)
    if 0 <= curve_index < len(curves):
        curves[curve_index] = curve if isinstance(curve, Curve) else Curve.model_validate(curve)
    return CurveCollection(curves=curves, active_curve_index=collection.active_curve_index)
