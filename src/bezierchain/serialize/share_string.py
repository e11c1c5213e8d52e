"""
Share-string serialization for curve collections.

The share string is the URL-fragment form of a drawing and must stay
bit-compatible with links already in circulation:

    collection := curve ('!' curve)*
    curve      := segment ('-' letter segment)*
    segment    := point '_' point '_' point '_' point
    point      := coord '~' coord
    coord      := ['n'] digits ['.' digits]
    letter     := 'i' | 't' | 'c'

Coordinates are rounded half-up to one decimal. Negatives use an 'n' prefix
because '-' separates segments. Decoding is done by a small recursive-descent
parser that reports the offending offset instead of producing NaN values.
"""

import math
from urllib.parse import unquote

from bezierchain.models import Continuity, Curve, CurveCollection, Point, Segment
from bezierchain.tracer import get_tracer, trace

CURVE_SEPARATOR = "!"
JUNCTION_SEPARATOR = "-"
POINT_SEPARATOR = "_"
COORD_SEPARATOR = "~"
NEGATIVE_PREFIX = "n"

LETTER_TO_CONTINUITY = {
    "i": Continuity.INDEPENDENT,
    "t": Continuity.C1,
    "c": Continuity.C2,
}


class ShareStringError(ValueError):
    """Raised when a share string does not follow the grammar."""

    def __init__(self, message, text="", position=0):
        self.text = text
        self.position = position
        super().__init__(f"{message} at offset {position}")


# Encoding

def _round_half_up(value):
    """Round to the nearest integer, halves toward +infinity."""
    floor = math.floor(value)
    return floor + 1 if value - floor >= 0.5 else floor


def serialize_coord(value):
    """
    Serialize one coordinate: one decimal, 'n' for negatives.

    Integral values carry no fractional part and negative zero renders as '0'.
    Raises ValueError for values that are not finite once scaled.
    """
    if not math.isfinite(value * 10):
        raise ValueError(f"Cannot serialize coordinate: {value}")

    rounded = _round_half_up(value * 10) / 10
    if rounded == 0:
        return "0"

    magnitude = abs(rounded)
    text = str(int(magnitude)) if magnitude.is_integer() else repr(magnitude)
    return NEGATIVE_PREFIX + text if rounded < 0 else text


def serialize_point(point):
    return serialize_coord(point.x) + COORD_SEPARATOR + serialize_coord(point.y)


def serialize_segment(segment):
    return POINT_SEPARATOR.join(serialize_point(p) for p in segment.points())


def continuity_to_letter(mode):
    """Map a continuity mode to its wire letter; anything unknown maps to 'i'."""
    if mode == Continuity.C1:
        return "t"
    if mode == Continuity.C2:
        return "c"
    return "i"


def letter_to_continuity(letter):
    """Map a wire letter to a continuity mode; unknown letters are independent."""
    return LETTER_TO_CONTINUITY.get(letter, Continuity.INDEPENDENT)


def serialize_curve(curve):
    """Serialize a curve; junctions without a continuity entry encode as 'i'."""
    parts = []
    for i, segment in enumerate(curve.segments):
        if i > 0:
            mode = curve.continuity[i - 1] if i - 1 < len(curve.continuity) else None
            parts.append(JUNCTION_SEPARATOR + continuity_to_letter(mode))
        parts.append(serialize_segment(segment))
    return "".join(parts)


@trace(label="serialize_curves")
def serialize_curves(curves):
    """Serialize a list of curves; an empty list becomes the empty string."""
    return CURVE_SEPARATOR.join(serialize_curve(c) for c in curves)


def serialize_collection(collection):
    """Serialize a CurveCollection. The active index is not part of the format."""
    return serialize_curves(collection.curves)


# Decoding

class _Parser:
    """Recursive-descent parser over a share string."""

    def __init__(self, text):
        self.text = text
        self.pos = 0

    def peek(self):
        if self.pos < len(self.text):
            return self.text[self.pos]
        return ""

    def at_end(self):
        return self.pos >= len(self.text)

    def error(self, message):
        found = repr(self.peek()) if not self.at_end() else "end of input"
        return ShareStringError(f"{message}, found {found}", self.text, self.pos)

    def expect(self, char):
        if self.peek() != char:
            raise self.error(f"Expected {char!r}")
        self.pos += 1

    def expect_end(self):
        if not self.at_end():
            raise self.error("Unexpected trailing input")

    def digits(self):
        start = self.pos
        while self.peek().isdigit() and self.peek().isascii():
            self.pos += 1
        if self.pos == start:
            raise self.error("Expected digit")
        return self.text[start:self.pos]

    def coord(self):
        start = self.pos
        negative = False
        if self.peek() == NEGATIVE_PREFIX:
            negative = True
            self.pos += 1

        literal = self.digits()
        if self.peek() == ".":
            self.pos += 1
            literal += "." + self.digits()

        value = float(literal)
        if not math.isfinite(value):
            self.pos = start
            raise self.error("Coordinate out of range")
        return -value if negative else value

    def point(self):
        x = self.coord()
        self.expect(COORD_SEPARATOR)
        y = self.coord()
        return Point(x=x, y=y)

    def segment(self):
        points = [self.point()]
        for _ in range(3):
            self.expect(POINT_SEPARATOR)
            points.append(self.point())
        return Segment(p0=points[0], p1=points[1], p2=points[2], p3=points[3])

    def continuity_token(self):
        """
        Read the optional letter after a junction separator.

        A missing letter (the next character starts a coordinate) and any
        unrecognized lowercase letter both read as INDEPENDENT.
        """
        char = self.peek()
        if char in LETTER_TO_CONTINUITY:
            self.pos += 1
            return LETTER_TO_CONTINUITY[char]

        if char.isascii() and char.islower() and char != NEGATIVE_PREFIX:
            get_tracer().event(
                f"Unrecognized continuity letter {char!r} at offset {self.pos}, using independent",
                level="WARN",
            )
            self.pos += 1

        return Continuity.INDEPENDENT

    def curve(self):
        segments = [self.segment()]
        continuity = []
        while self.peek() == JUNCTION_SEPARATOR:
            self.pos += 1
            continuity.append(self.continuity_token())
            segments.append(self.segment())
        return Curve(segments=segments, continuity=continuity)

    def curves(self):
        result = []
        while not self.at_end():
            # Empty chunks between separators are skipped
            if self.peek() == CURVE_SEPARATOR:
                self.pos += 1
                continue
            result.append(self.curve())
            if not self.at_end():
                self.expect(CURVE_SEPARATOR)
        return result


def _parse_whole(text, rule):
    parser = _Parser(text)
    value = rule(parser)
    parser.expect_end()
    return value


def parse_coord(text):
    return _parse_whole(text, _Parser.coord)


def parse_point(text):
    return _parse_whole(text, _Parser.point)


def parse_segment(text):
    return _parse_whole(text, _Parser.segment)


def parse_curve(text):
    return _parse_whole(text, _Parser.curve)


@trace(label="parse_curves")
def parse_curves(text):
    """
    Parse a share string into a list of curves.

    The empty string parses to an empty list. Raises ShareStringError on any
    deviation from the grammar.
    """
    if not text:
        return []

    curves = _parse_whole(text, _Parser.curves)
    get_tracer().event(f"Parsed {len(curves)} curves from {len(text)} chars")
    return curves


def parse_collection(text):
    """
    Parse a share string into a CurveCollection.

    The format carries no active index, so the last curve becomes active
    (or -1 when there are no curves).
    """
    curves = parse_curves(text)
    return CurveCollection(curves=curves, active_curve_index=len(curves) - 1)


def parse_url_fragment(url):
    """
    Parse the share string out of a full URL, a '#fragment' or a bare string.
    """
    _, sep, fragment = url.partition("#")
    return parse_collection(unquote(fragment if sep else url))
