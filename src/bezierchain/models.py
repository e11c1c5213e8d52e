"""
Pydantic data models for bezierchain curve collections.

A collection holds curves, a curve holds cubic Bezier segments joined at
shared anchors, and each junction carries a continuity mode. Core operations
never mutate these models in place; they return deep copies.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Continuity(str, Enum):
    """Smoothness constraint enforced at a junction between two segments."""
    INDEPENDENT = "independent"
    C1 = "c1"  # tangent-continuous
    C2 = "c2"  # curvature-continuous


class PointRole(str, Enum):
    """Position of a point inside a segment's control polygon."""
    P0 = "p0"
    P1 = "p1"
    P2 = "p2"
    P3 = "p3"


ANCHOR_ROLES = (PointRole.P0, PointRole.P3)


class Point(BaseModel):
    """A 2D point or vector."""
    x: float
    y: float

    model_config = ConfigDict(extra="forbid")


class Segment(BaseModel):
    """A single cubic Bezier segment."""
    p0: Point  # start anchor
    p1: Point  # outgoing handle
    p2: Point  # incoming handle
    p3: Point  # end anchor

    model_config = ConfigDict(extra="forbid")

    def points(self):
        """Control points in p0..p3 order."""
        return [self.p0, self.p1, self.p2, self.p3]


class Curve(BaseModel):
    """
    A chain of segments with one continuity entry per junction.

    continuity[i] applies between segments[i] and segments[i + 1]. Callers keep
    segments[i].p3 equal to segments[i + 1].p0; the model does not check it.
    """
    segments: List[Segment] = Field(default_factory=list)
    continuity: List[Continuity] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def junction_count(self):
        return max(0, len(self.segments) - 1)


class CurveCollection(BaseModel):
    """All curves in a drawing plus the index of the curve being edited."""
    curves: List[Curve] = Field(default_factory=list)
    active_curve_index: int = -1

    model_config = ConfigDict(extra="forbid")


class BoundingBox(BaseModel):
    """Axis-aligned bounding box."""
    min: Point
    max: Point

    model_config = ConfigDict(extra="forbid")

    @property
    def width(self):
        return self.max.x - self.min.x

    @property
    def height(self):
        return self.max.y - self.min.y

    def as_list(self):
        """Return [min_x, min_y, max_x, max_y]."""
        return [self.min.x, self.min.y, self.max.x, self.max.y]


class NearestPoint(BaseModel):
    """Closest sampled point on a segment and its parameter value."""
    point: Point
    t: float

    model_config = ConfigDict(extra="forbid")


class NodeRef(BaseModel):
    """Address of a control point inside a collection."""
    curve_index: int
    segment_index: int
    role: str

    model_config = ConfigDict(extra="forbid")


class CurveHit(BaseModel):
    """Result of hit-testing a point against every curve in a collection."""
    curve_index: int
    segment_index: int
    t: float
    point: Point
    distance: float

    model_config = ConfigDict(extra="forbid")


def make_segment(p0, p1, p2, p3):
    """
    Build a Segment from four (x, y) pairs.

    Convenient for tests and for callers holding plain coordinate tuples.
    """
    coords = [p0, p1, p2, p3]
    pts = [Point(x=c[0], y=c[1]) for c in coords]
    return Segment(p0=pts[0], p1=pts[1], p2=pts[2], p3=pts[3])


def make_curve(segments, continuity=None):
    """
    Build a Curve, filling missing continuity entries with INDEPENDENT.
    """
    segments = list(segments)
    modes = list(continuity or [])
    needed = max(0, len(segments) - 1)
    modes = modes[:needed] + [Continuity.INDEPENDENT] * (needed - len(modes))
    return Curve(segments=segments, continuity=modes)


def clamp_active_index(active_index: int, curve_count: int) -> int:
    """Clamp an active index so it points at an existing curve, or -1."""
    if active_index >= curve_count:
        return curve_count - 1
    return active_index


def continuity_at(curve: Curve, junction_index: int) -> Optional[Continuity]:
    """Mode at a junction, defaulting to INDEPENDENT when the entry is missing."""
    if junction_index < 0 or junction_index >= curve.junction_count:
        return None
    if junction_index < len(curve.continuity):
        return curve.continuity[junction_index]
    return Continuity.INDEPENDENT
