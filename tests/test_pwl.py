import io
import math

import pytest

from camstages.pwl import Interval, PerpType, Point, Pwl


def identity():
    return Pwl([(0, 0), (10, 10)])


def test_from_params_pairs_and_domain():
    pwl = Pwl.from_params([0, 1, 4, 3, 9, 2])
    assert pwl.points == [Point(0, 1), Point(4, 3), Point(9, 2)]
    assert pwl.domain() == Interval(0, 9)
    assert pwl.range() == Interval(1, 3)


@pytest.mark.parametrize("params", [[0, 0, 0, 1], [5, 0, 1, 1], [0, 0], [0, 0, 1]])
def test_from_params_rejects_bad_input(params):
    with pytest.raises(ValueError):
        Pwl.from_params(params)


def test_evaluate_at_knots_returns_y():
    pwl = Pwl([(0, 3), (2, -1), (7, 4), (8, 8)])
    for p in pwl:
        assert math.isclose(pwl.evaluate(p.x), p.y)


@pytest.mark.parametrize("x", [-3.0, 0.0, 2.5, 7.0, 10.0, 14.0])
def test_identity_evaluates_to_x(x):
    assert math.isclose(identity().evaluate(x), x)


def test_evaluate_between_knots_is_between_values():
    pwl = Pwl([(0, 2), (4, 8)])
    for x in (0.5, 1, 2, 3.5):
        assert 2 < pwl.evaluate(x) < 8


def test_evaluate_span_brackets_x():
    pwl = Pwl([(0, 0), (1, 1), (3, 0), (6, 2), (10, 1)])
    for x in (0.2, 1.0, 2.9, 4.0, 9.0):
        for guess in (None, -1, 0, 3, 10):
            _, span = pwl.evaluate_span(x, guess)
            assert pwl.points[span].x <= x < pwl.points[span + 1].x


def test_evaluate_needs_two_points():
    with pytest.raises(ValueError):
        Pwl([(0, 0)]).evaluate(0)


def test_append_and_prepend_respect_eps():
    pwl = Pwl([(1, 1), (2, 2)])
    pwl.append(2, 5)
    pwl.prepend(1, 5)
    assert len(pwl) == 2
    pwl.append(3, 7)
    pwl.prepend(0, 9)
    assert pwl.points[0] == Point(0, 9)
    assert pwl.points[-1] == Point(3, 7)


def test_is_empty():
    assert Pwl().is_empty()
    assert not identity().is_empty()


def test_compose_matches_sequential_evaluation():
    f = Pwl([(0, 0), (10, 20)])
    g = Pwl([(0, 0), (5, 1), (20, 3)])
    composed = f.compose(g)
    for x in (0, 1, 2.5, 4, 7, 10):
        assert math.isclose(composed.evaluate(x), g.evaluate(f.evaluate(x)), abs_tol=1e-9)


def test_compose_with_identity_keeps_points():
    f = Pwl([(0, 1), (3, 4), (8, 6)])
    assert f.compose(Pwl([(0, 0), (10, 10)])).points == f.points


def test_map2_visits_every_knot():
    p0 = Pwl([(0, 0), (5, 5), (10, 10)])
    p1 = Pwl([(0, 1), (3, 4), (10, 11)])
    triples = list(Pwl.map2(p0, p1))
    xs = [t[0] for t in triples]
    assert xs == sorted(xs)
    assert set(xs) == {0, 3, 5, 10}
    for x, y0, y1 in triples:
        assert math.isclose(y0, p0.evaluate(x))
        assert math.isclose(y1, p1.evaluate(x))


def test_combine_sums_and_removes_duplicates():
    p0 = Pwl([(0, 0), (5, 5), (10, 10)])
    p1 = Pwl([(0, 1), (3, 4), (10, 11)])
    result = Pwl.combine(p0, p1, lambda x, a, b: a + b)
    assert [p.x for p in result] == [0, 3, 5, 10]
    for p in result:
        assert math.isclose(p.y, p0.evaluate(p.x) + p1.evaluate(p.x))


def test_match_domain_clip_extends_flat():
    pwl = Pwl([(2, 5), (6, 9)])
    pwl.match_domain(Interval(0, 10))
    assert pwl.domain() == Interval(0, 10)
    assert pwl.points[0].y == 5
    assert pwl.points[-1].y == 9


def test_match_domain_linear_extrapolates():
    pwl = Pwl([(2, 2), (6, 6)])
    pwl.match_domain(Interval(-4, 12), clip=False)
    for p in pwl:
        assert math.isclose(p.x, p.y)
    assert pwl.domain() == Interval(-4, 12)


def test_invert_perpendicular_lies_on_line():
    pwl = identity()
    kind, perp, span = pwl.invert(Point(0, 10))
    assert kind is PerpType.PERPENDICULAR
    assert span == 0
    assert math.isclose(perp.x, perp.y)
    assert math.isclose((Point(0, 10) - perp).dot(Point(10, 10)), 0, abs_tol=1e-9)


def test_invert_start_and_end():
    pwl = identity()
    assert pwl.invert(Point(-5, -5))[:2] == (PerpType.START, Point(0, 0))
    assert pwl.invert(Point(20, 20))[:2] == (PerpType.END, Point(10, 10))


def test_invert_vertex():
    pwl = Pwl([(0, 0), (5, 5), (10, 0)])
    kind, perp, span = pwl.invert(Point(5, 8))
    assert kind is PerpType.PERPENDICULAR
    kind, perp, span = pwl.invert(Point(5, 20), -1, 1e-6)
    assert kind in (PerpType.VERTEX, PerpType.PERPENDICULAR)


def test_invert_rejects_bad_span():
    with pytest.raises(ValueError):
        identity().invert(Point(1, 1), -2)


def test_generate_lut_matches_evaluate():
    pwl = Pwl([(0, 0), (4, 8), (9, 3)])
    lut = pwl.generate_lut()
    assert len(lut) == int(pwl.domain().end) + 1
    for x, value in enumerate(lut):
        assert math.isclose(value, pwl.evaluate(x))


def test_scaling_multiplies_y():
    pwl = Pwl([(0, 1), (5, 3)])
    scaled = pwl * 2
    pwl *= 2
    assert pwl.points == scaled.points
    assert [p.x for p in pwl] == [0, 5]
    assert [p.y for p in pwl] == [2, 6]


def test_debug_output_format():
    out = io.StringIO()
    Pwl([(0, 0), (10, 2.5)]).debug(out)
    assert out.getvalue() == "Pwl {\n\t(0, 0)\n\t(10, 2.5)\n}\n"


def test_interval_methods():
    interval = Interval(2, 7)
    assert interval.contains(2) and interval.contains(7)
    assert not interval.contains(7.5)
    assert interval.clip(1) == 2
    assert interval.clip(9) == 7
    assert interval.clip(3) == 3
    assert interval.length() == 5


def test_point_operations():
    a, b = Point(3, -2), Point(1.5, 4)
    assert (a - b) + b == a
    assert a.dot(a) == a.len2()
    assert math.isclose(a.length() ** 2, a.len2())
    assert (a * 2) / 2 == a