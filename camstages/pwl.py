"""Piecewise linear functions."""

from __future__ import annotations

import enum
import math
import sys
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from typing import TextIO

DEFAULT_EPS = 1e-6


@dataclass
class Interval:
    """A closed interval [start, end]."""

    start: float
    end: float

    def contains(self, value: float) -> bool:
        return self.start <= value <= self.end

    def clip(self, value: float) -> float:
        if value < self.start:
            return self.start
        if value > self.end:
            return self.end
        return value

    def length(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class Point:
    """A 2D point or vector."""

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Point) -> Point:
        return Point(self.x - other.x, self.y - other.y)

    def __mul__(self, factor: float) -> Point:
        return Point(self.x * factor, self.y * factor)

    def __truediv__(self, factor: float) -> Point:
        return Point(self.x / factor, self.y / factor)

    def dot(self, other: Point) -> float:
        return self.x * other.x + self.y * other.y

    def len2(self) -> float:
        return self.x * self.x + self.y * self.y

    def length(self) -> float:
        return math.sqrt(self.len2())


class PerpType(enum.Enum):
    """Kind of closest point found by Pwl.invert."""

    NOT_FOUND = enum.auto()
    START = enum.auto()
    END = enum.auto()
    VERTEX = enum.auto()
    PERPENDICULAR = enum.auto()


def _as_point(value: Point | Sequence[float]) -> Point:
    if isinstance(value, Point):
        return value
    x, y = value
    return Point(float(x), float(y))


@dataclass
class Pwl:
    """A piecewise linear function given by its control points."""

    points: list[Point] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.points = [_as_point(p) for p in self.points]

    @classmethod
    def from_params(cls, params: Iterable[float]) -> Pwl:
        """Build from a flat sequence x0, y0, x1, y1, ... with increasing x."""
        values = [float(v) for v in params]
        if len(values) % 2:
            raise ValueError("Pwl parameters must come in x, y pairs")
        pwl = cls()
        for x, y in zip(values[::2], values[1::2]):
            if pwl.points and not x > pwl.points[-1].x:
                raise ValueError("Pwl x values must be strictly increasing")
            pwl.points.append(Point(x, y))
        if len(pwl.points) < 2:
            raise ValueError("Pwl needs at least two points")
        return pwl

    def __iter__(self) -> Iterator[Point]:
        return iter(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def append(self, x: float, y: float, eps: float = DEFAULT_EPS) -> None:
        """Add a point at the end unless it is not beyond the last x by eps."""
        if not self.points or self.points[-1].x + eps < x:
            self.points.append(Point(x, y))

    def prepend(self, x: float, y: float, eps: float = DEFAULT_EPS) -> None:
        """Add a point at the start unless it is not before the first x by eps."""
        if not self.points or self.points[0].x - eps > x:
            self.points.insert(0, Point(x, y))

    def domain(self) -> Interval:
        if not self.points:
            raise ValueError("empty Pwl has no domain")
        return Interval(self.points[0].x, self.points[-1].x)

    def range(self) -> Interval:
        if not self.points:
            raise ValueError("empty Pwl has no range")
        ys = [p.y for p in self.points]
        return Interval(min(ys), max(ys))

    def is_empty(self) -> bool:
        return not self.points

    def _find_span(self, x: float, span: int) -> int:
        pts = self.points
        last_span = len(pts) - 2
        span = max(0, min(last_span, span))
        while span < last_span and x >= pts[span + 1].x:
            span += 1
        while span and x < pts[span].x:
            span -= 1
        return span

    def evaluate_span(self, x: float, span: int | None = None) -> tuple[float, int]:
        """Evaluate at x, returning the value and the span used.

        span is an optional initial guess; None or -1 means no guess.
        """
        if len(self.points) < 2:
            raise ValueError("Pwl needs at least two points to evaluate")
        guess = span if span is not None and span != -1 else len(self.points) // 2 - 1
        span = self._find_span(x, guess)
        p0, p1 = self.points[span], self.points[span + 1]
        return p0.y + (x - p0.x) * (p1.y - p0.y) / (p1.x - p0.x), span

    def evaluate(self, x: float, span: int | None = None) -> float:
        return self.evaluate_span(x, span)[0]

    def invert(
        self, xy: Point, span: int = -1, eps: float = DEFAULT_EPS
    ) -> tuple[PerpType, Point | None, int]:
        """Find the closest perpendicular to xy searching from span + 1.

        Returns the kind of point found, the point (None if not found) and the
        span reached, which can be passed back in to continue the search.
        """
        if span < -1:
            raise ValueError("span must be at least -1")
        pts = self.points
        prev_off_end = False
        span += 1
        while span < len(pts) - 1:
            span_vec = pts[span + 1] - pts[span]
            t = (xy - pts[span]).dot(span_vec) / span_vec.len2()
            if t < -eps:
                if span == 0:
                    return PerpType.START, pts[span], span
                if prev_off_end:
                    return PerpType.VERTEX, pts[span], span
            elif t > 1 + eps:
                if span == len(pts) - 2:
                    return PerpType.END, pts[span + 1], span
                prev_off_end = True
            else:
                return PerpType.PERPENDICULAR, pts[span] + span_vec * t, span
            span += 1
        return PerpType.NOT_FOUND, None, span

    def compose(self, other: Pwl, eps: float = DEFAULT_EPS) -> Pwl:
        """Return the function applying self first and other after."""
        pts, opts = self.points, other.points
        this_x, this_y = pts[0].x, pts[0].y
        this_span = 0
        other_span = other._find_span(this_y, 0)
        result = Pwl([Point(this_x, other.evaluate(this_y, other_span))])
        while this_span != len(pts) - 1:
            dx = pts[this_span + 1].x - pts[this_span].x
            dy = pts[this_span + 1].y - pts[this_span].y
            if (
                abs(dy) > eps
                and other_span + 1 < len(opts)
                and pts[this_span + 1].y >= opts[other_span + 1].x + eps
            ):
                this_x = pts[this_span].x + (opts[other_span + 1].x - pts[this_span].y) * dx / dy
                other_span += 1
                this_y = opts[other_span].x
            elif (
                abs(dy) > eps
                and other_span > 0
                and pts[this_span + 1].y <= opts[other_span - 1].x - eps
            ):
                this_x = pts[this_span].x + (opts[other_span + 1].x - pts[this_span].y) * dx / dy
                other_span -= 1
                this_y = opts[other_span].x
            else:
                this_span += 1
                this_x, this_y = pts[this_span].x, pts[this_span].y
            result.append(this_x, other.evaluate(this_y, other_span), eps)
        return result

    @staticmethod
    def map2(pwl0: Pwl, pwl1: Pwl) -> Iterator[tuple[float, float, float]]:
        """Yield (x, y0, y1) wherever either function has a control point."""
        p0, p1 = pwl0.points, pwl1.points
        span0 = span1 = 0
        x = min(p0[0].x, p1[0].x)
        yield x, pwl0.evaluate(x, span0), pwl1.evaluate(x, span1)
        while span0 < len(p0) - 1 or span1 < len(p1) - 1:
            if span0 == len(p0) - 1:
                span1 += 1
                x = p1[span1].x
            elif span1 == len(p1) - 1:
                span0 += 1
                x = p0[span0].x
            elif p0[span0 + 1].x > p1[span1 + 1].x:
                span1 += 1
                x = p1[span1].x
            else:
                span0 += 1
                x = p0[span0].x
            yield x, pwl0.evaluate(x, span0), pwl1.evaluate(x, span1)

    @staticmethod
    def combine(
        pwl0: Pwl,
        pwl1: Pwl,
        f: Callable[[float, float, float], float],
        eps: float = DEFAULT_EPS,
    ) -> Pwl:
        """Build a Pwl whose values are f(x, y0, y1) at every knot of either input."""
        result = Pwl()
        for x, y0, y1 in Pwl.map2(pwl0, pwl1):
            result.append(x, f(x, y0, y1), eps)
        return result

    def match_domain(self, domain: Interval, clip: bool = True, eps: float = DEFAULT_EPS) -> None:
        """Extend to cover domain, either flat (clip) or by linear extrapolation."""
        start_x = self.points[0].x if clip else domain.start
        self.prepend(domain.start, self.evaluate(start_x, 0), eps)
        end_x = self.points[-1].x if clip else domain.end
        self.append(domain.end, self.evaluate(end_x, len(self.points) - 2), eps)

    def generate_lut(self) -> list[float]:
        """Values at integer x from 0 up to the end of the domain."""
        end = int(self.domain().end + 1)
        lut = []
        span: int | None = 0
        for x in range(end):
            value, span = self.evaluate_span(x, span)
            lut.append(value)
        return lut

    def __imul__(self, factor: float) -> Pwl:
        self.points = [Point(p.x, p.y * factor) for p in self.points]
        return self

    def __mul__(self, factor: float) -> Pwl:
        return Pwl([Point(p.x, p.y * factor) for p in self.points])

    def debug(self, file: TextIO | None = None) -> None:
        out = file if file is not None else sys.stderr
        out.write("Pwl {\n")
        for p in self.points:
            out.write(f"\t({p.x:g}, {p.y:g})\n")
        out.write("}\n")