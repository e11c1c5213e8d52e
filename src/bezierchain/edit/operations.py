"""
Batch edit operations for bezierchain.

Applies a JSON-friendly list of edits to a CurveCollection so drawings can be
modified from scripts and the command line without a UI.
"""

from bezierchain.edit.topology import delete_node, insert_node, replace_curve
from bezierchain.geometry.continuity import set_continuity
from bezierchain.models import CurveCollection
from bezierchain.tracer import get_tracer, trace


def _curve_or_none(collection, curve_index):
    if 0 <= curve_index < len(collection.curves):
        return collection.curves[curve_index]
    return None


@trace(label="apply_operations")
def apply_operations(collection, operations):
    """
    Apply a list of operations to a collection.

    Operations format:
    [
        {"op": "delete_node", "curve_index": 0, "segment_index": 1, "role": "p3"},
        {"op": "insert_node", "curve_index": 0, "segment_index": 0, "t": 0.5},
        {"op": "set_continuity", "curve_index": 0, "junction_index": 0, "mode": "c1"},
        {"op": "set_active", "curve_index": 1},
    ]

    Returns a new CurveCollection; the input is left untouched. Unknown
    operations are logged and skipped. An invalid continuity mode raises
    ValueError.
    """
    tracer = get_tracer()
    collection = collection.model_copy(deep=True)

    for i, op in enumerate(operations):
        op_type = op.get("op")
        curve_index = op.get("curve_index", -1)

        with tracer.span(f"operation_{i}", module="operations", op_type=op_type):
            if op_type == "delete_node":
                curves, active = delete_node(
                    collection.curves,
                    collection.active_curve_index,
                    curve_index,
                    op.get("segment_index", -1),
                    op.get("role"),
                )
                collection = CurveCollection(curves=curves, active_curve_index=active)

            elif op_type == "insert_node":
                curve = _curve_or_none(collection, curve_index)
                if curve is not None:
                    updated = insert_node(curve, op.get("segment_index", -1), op.get("t", 0.5))
                    collection = replace_curve(collection, curve_index, updated)

            elif op_type == "set_continuity":
                curve = _curve_or_none(collection, curve_index)
                if curve is not None:
                    updated = set_continuity(curve, op.get("junction_index", -1), op.get("mode"))
                    collection = replace_curve(collection, curve_index, updated)

            elif op_type == "set_active":
                if _curve_or_none(collection, curve_index) is not None or curve_index == -1:
                    collection = collection.model_copy(
                        update={"active_curve_index": curve_index}, deep=True,
                    )

            else:
                tracer.event(f"Unknown operation: {op_type}", level="WARN")

    return collection
