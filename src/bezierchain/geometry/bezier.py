"""
Cubic Bezier geometry for bezierchain.

Point arithmetic, Bernstein evaluation, derivatives, sampling, De Casteljau
subdivision, bounding boxes and sampling-based nearest-point queries.

Every function is pure. Parameter values outside [0, 1] are not an error:
the polynomial is simply extrapolated.
"""

import math

import numpy as np

from bezierchain.models import (
    BoundingBox, CurveHit, NearestPoint, NodeRef, Point, PointRole, Segment,
)

DEFAULT_LENGTH_SAMPLES = 100
DEFAULT_NEAREST_SAMPLES = 100
DEFAULT_RENDER_SAMPLES = 50

# Below this the derivative quadratic is treated as linear
ROOT_EPSILON = 1e-10


# Point operations

def create_point(x, y):
    return Point(x=x, y=y)


def add_points(p1, p2):
    return Point(x=p1.x + p2.x, y=p1.y + p2.y)


def subtract_points(p1, p2):
    return Point(x=p1.x - p2.x, y=p1.y - p2.y)


def scale_point(p, scalar):
    return Point(x=p.x * scalar, y=p.y * scalar)


def distance(p1, p2):
    """Euclidean distance between two points."""
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def lerp(p1, p2, t):
    """
    Linear interpolation p1 + t * (p2 - p1).

    Evaluated in the (1 - t) * p1 + t * p2 form so both endpoints are hit
    exactly at t = 0 and t = 1.
    """
    s = 1 - t
    return Point(x=s * p1.x + t * p2.x, y=s * p1.y + t * p2.y)


# Cubic Bezier evaluation

def _bernstein(i, t):
    """Compute Bernstein basis polynomial value B_i,3(t)."""
    if i == 0:
        return (1 - t) ** 3
    elif i == 1:
        return 3 * (1 - t) ** 2 * t
    elif i == 2:
        return 3 * (1 - t) * t ** 2
    else:
        return t ** 3


def _control_array(p0, p1, p2, p3):
    return np.array([[p.x, p.y] for p in (p0, p1, p2, p3)], dtype=float)


def _parameters(segments):
    """Uniform parameter values i / segments for i in 0..segments."""
    if segments < 1:
        raise ValueError(f"segments must be at least 1, got {segments}")
    return np.arange(segments + 1, dtype=float) / segments


def _sample_array(p0, p1, p2, p3, segments):
    """Evaluate the curve at uniform t values; returns an (n + 1, 2) array."""
    t = _parameters(segments)[:, np.newaxis]
    s = 1 - t
    weights = np.hstack([s ** 3, 3 * s ** 2 * t, 3 * s * t ** 2, t ** 3])
    return weights @ _control_array(p0, p1, p2, p3)


def cubic_bezier(p0, p1, p2, p3, t):
    """
    Evaluate a cubic Bezier at parameter t.

    B(t) = (1-t)^3 P0 + 3(1-t)^2 t P1 + 3(1-t) t^2 P2 + t^3 P3
    """
    b0, b1, b2, b3 = (_bernstein(i, t) for i in range(4))
    return Point(
        x=b0 * p0.x + b1 * p1.x + b2 * p2.x + b3 * p3.x,
        y=b0 * p0.y + b1 * p1.y + b2 * p2.y + b3 * p3.y,
    )


def cubic_bezier_derivative(p0, p1, p2, p3, t):
    """
    Tangent vector B'(t) = 3(1-t)^2 (P1-P0) + 6(1-t)t (P2-P1) + 3t^2 (P3-P2).

    Not normalized; its length is the parametric speed.
    """
    s = 1 - t
    a, b, c = 3 * s * s, 6 * s * t, 3 * t * t
    return Point(
        x=a * (p1.x - p0.x) + b * (p2.x - p1.x) + c * (p3.x - p2.x),
        y=a * (p1.y - p0.y) + b * (p2.y - p1.y) + c * (p3.y - p2.y),
    )


def cubic_bezier_second_derivative(p0, p1, p2, p3, t):
    """B''(t) = 6(1-t)(P2 - 2P1 + P0) + 6t(P3 - 2P2 + P1)."""
    s = 1 - t
    return Point(
        x=6 * s * (p2.x - 2 * p1.x + p0.x) + 6 * t * (p3.x - 2 * p2.x + p1.x),
        y=6 * s * (p2.y - 2 * p1.y + p0.y) + 6 * t * (p3.y - 2 * p2.y + p1.y),
    )


def sample_curve(p0, p1, p2, p3, segments):
    """
    Sample the curve into segments + 1 points at uniform t steps.

    The first point equals p0 and the last equals p3 exactly.
    """
    return [Point(x=float(x), y=float(y)) for x, y in _sample_array(p0, p1, p2, p3, segments)]


def curve_length(p0, p1, p2, p3, segments=DEFAULT_LENGTH_SAMPLES):
    """
    Approximate arc length as the length of the sampled polyline.

    Converges to the true arc length from below as segments grows.
    """
    pts = _sample_array(p0, p1, p2, p3, segments)
    deltas = np.diff(pts, axis=0)
    return float(np.hypot(deltas[:, 0], deltas[:, 1]).sum())


def split_curve(p0, p1, p2, p3, t):
    """
    Split the curve at t using De Casteljau's algorithm.

    Returns (first, second) covering [0, t] and [t, 1] of the original.
    """
    p01 = lerp(p0, p1, t)
    p12 = lerp(p1, p2, t)
    p23 = lerp(p2, p3, t)

    p012 = lerp(p01, p12, t)
    p123 = lerp(p12, p23, t)

    p0123 = lerp(p012, p123, t)

    first = Segment(p0=p0.model_copy(), p1=p01, p2=p012, p3=p0123)
    second = Segment(p0=p0123.model_copy(), p1=p123, p2=p23, p3=p3.model_copy())
    return first, second


def _derivative_roots(v0, v1, v2, v3):
    """
    Parameter values in (0, 1) where one coordinate's derivative vanishes.

    The derivative is 3(a t^2 + b t + c) with the coefficients below.
    """
    a = -v0 + 3 * v1 - 3 * v2 + v3
    b = 2 * v0 - 4 * v1 + 2 * v2
    c = -v0 + v1

    if abs(a) < ROOT_EPSILON:
        if abs(b) > ROOT_EPSILON:
            candidates = [-c / b]
        else:
            candidates = []
    else:
        discriminant = b * b - 4 * a * c
        if discriminant < 0:
            candidates = []
        else:
            sqrt_d = math.sqrt(discriminant)
            candidates = [(-b + sqrt_d) / (2 * a), (-b - sqrt_d) / (2 * a)]

    return [t for t in candidates if 0 < t < 1]


def bounding_box(p0, p1, p2, p3):
    """
    Exact axis-aligned bounding box of the curve over t in [0, 1].

    Starts from the endpoints and folds in every interior extremum.
    """
    min_x, max_x = min(p0.x, p3.x), max(p0.x, p3.x)
    min_y, max_y = min(p0.y, p3.y), max(p0.y, p3.y)

    for t in _derivative_roots(p0.x, p1.x, p2.x, p3.x):
        x = cubic_bezier(p0, p1, p2, p3, t).x
        min_x, max_x = min(min_x, x), max(max_x, x)

    for t in _derivative_roots(p0.y, p1.y, p2.y, p3.y):
        y = cubic_bezier(p0, p1, p2, p3, t).y
        min_y, max_y = min(min_y, y), max(max_y, y)

    return BoundingBox(min=Point(x=min_x, y=min_y), max=Point(x=max_x, y=max_y))


def nearest_point_on_curve(p0, p1, p2, p3, point, segments=DEFAULT_NEAREST_SAMPLES):
    """
    Approximate the closest point on the curve by uniform sampling.

    Ties resolve to the smallest t. Accuracy is bounded by the sample spacing;
    no root-finding is attempted.
    """
    pts = _sample_array(p0, p1, p2, p3, segments)
    dists = np.hypot(pts[:, 0] - point.x, pts[:, 1] - point.y)
    idx = int(np.argmin(dists))
    return NearestPoint(
        point=Point(x=float(pts[idx, 0]), y=float(pts[idx, 1])),
        t=idx / segments,
    )


def point_on_curve(p0, p1, p2, p3, point, tolerance, segments=DEFAULT_NEAREST_SAMPLES):
    """True if point lies within tolerance of the sampled curve."""
    nearest = nearest_point_on_curve(p0, p1, p2, p3, point, segments)
    return distance(point, nearest.point) <= tolerance


# Rendering helpers for the rotated-box renderer

def segment_angle(p1, p2):
    """Angle of the line p1 -> p2 in degrees, from atan2."""
    return math.degrees(math.atan2(p2.y - p1.y, p2.x - p1.x))


def segment_length(p1, p2):
    return distance(p1, p2)


# Segment and curve level conveniences

def evaluate_segment(segment, t):
    return cubic_bezier(segment.p0, segment.p1, segment.p2, segment.p3, t)


def sample_segment(segment, segments):
    return sample_curve(segment.p0, segment.p1, segment.p2, segment.p3, segments)


def segment_bounding_box(segment):
    return bounding_box(segment.p0, segment.p1, segment.p2, segment.p3)


def segment_curve_length(segment, segments=DEFAULT_LENGTH_SAMPLES):
    return curve_length(segment.p0, segment.p1, segment.p2, segment.p3, segments)


def curve_bounding_box(curve):
    """Union of segment bounding boxes, or None for an empty curve."""
    if not curve.segments:
        return None

    boxes = [segment_bounding_box(s) for s in curve.segments]
    return BoundingBox(
        min=Point(x=min(b.min.x for b in boxes), y=min(b.min.y for b in boxes)),
        max=Point(x=max(b.max.x for b in boxes), y=max(b.max.y for b in boxes)),
    )


def curve_total_length(curve, segments=DEFAULT_LENGTH_SAMPLES):
    """Sum of approximate segment lengths."""
    return sum(segment_curve_length(s, segments) for s in curve.segments)


def sample_curve_polyline(curve, segments=DEFAULT_RENDER_SAMPLES):
    """
    Polyline through a whole curve for an external renderer.

    Each segment contributes `segments` steps; shared anchors appear once.
    """
    polyline = []
    for i, seg in enumerate(curve.segments):
        samples = sample_segment(seg, segments)
        polyline.extend(samples if i == 0 else samples[1:])
    return polyline


def hit_test_collection(curves, point, tolerance, segments=DEFAULT_NEAREST_SAMPLES):
    """
    Find the curve segment nearest to point within tolerance.

    Returns a CurveHit, or None when nothing is close enough. Earlier curves
    and segments win ties.
    """
    best = None
    for curve_index, curve in enumerate(curves):
        for segment_index, seg in enumerate(curve.segments):
            nearest = nearest_point_on_curve(seg.p0, seg.p1, seg.p2, seg.p3, point, segments)
            d = distance(point, nearest.point)
            if d > tolerance:
                continue
            if best is None or d < best.distance:
                best = CurveHit(
                    curve_index=curve_index,
                    segment_index=segment_index,
                    t=nearest.t,
                    point=nearest.point,
                    distance=d,
                )
    return best


def find_anchor(curves, point, radius):
    """
    Find the anchor (p0 or p3) closest to point within radius.

    A shared interior anchor is reported as the p3 of the earlier segment.
    """
    best = None
    best_dist = None
    for curve_index, curve in enumerate(curves):
        for segment_index, seg in enumerate(curve.segments):
            for role, anchor in ((PointRole.P0, seg.p0), (PointRole.P3, seg.p3)):
                d = distance(point, anchor)
                if d > radius:
                    continue
                if best_dist is None or d < best_dist:
                    best_dist = d
                    best = NodeRef(
                        curve_index=curve_index,
                        segment_index=segment_index,
                        role=role.value,
                    )
    return best
