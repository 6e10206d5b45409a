import math
from fractions import Fraction

import pytest
import hypothesis.strategies as st
from hypothesis import given, settings
from mpmath import mp

from qd_fx import Double, Quad
from tests.helpers import QUAD_TOL, assert_close, assert_nonoverlapping, to_mp

mp.dps = 200

magnitude = st.floats(min_value=1e-40, max_value=1e40)
signed = st.tuples(magnitude, st.booleans()).map(lambda t: -t[0] if t[1] else t[0])


def _random_quad(a, b):
    """Четырёхкомпонентное число со всеми ненулевыми компонентами."""
    return Quad.from_mpmath(mp.mpf(a) / mp.mpf(b))


def test_constructor():
    assert Quad().components == (0.0, 0.0, 0.0, 0.0)
    assert Quad(1.5).components == (1.5, 0.0, 0.0, 0.0)
    assert Quad(1.0, 2.0 ** -60).components == (1.0, 2.0 ** -60, 0.0, 0.0)
    assert Quad(2 ** 200 + 2 ** 100 + 1).as_fraction() == 2 ** 200 + 2 ** 100 + 1
    assert len(Quad.ONE) == 4 and Quad.precision_k == 4
    with pytest.raises(TypeError):
        Quad(1.0, 2.0, 3.0, 4.0, 5.0)


def test_constructor_from_str():
    assert_close(Quad("0.1"), mp.mpf(1) / 10, QUAD_TOL)
    assert_close(
        Quad("3.141592653589793238462643383279502884197169399375105820974944592"),
        mp.pi,
        QUAD_TOL,
    )


def test_named_constructors():
    assert Quad.from_mul(0.1, 0.3).as_fraction() == Fraction(0.1) * Fraction(0.3)
    assert Quad.from_add(1.0, 1e-40).as_fraction() == Fraction(1.0) + Fraction(1e-40)
    assert Quad.from_sub(1.0, 1e-40).as_fraction() == Fraction(1.0) - Fraction(1e-40)
    assert_close(Quad.from_div(1.0, 3.0), mp.mpf(1) / 3, QUAD_TOL)
    assert Quad.from_div(-1.0, 0.0) == Quad.NEG_INFINITY


@pytest.mark.parametrize("name, expected", [("PI", mp.pi), ("E", mp.e), ("LN_2", mp.ln2), ("SQRT_2", mp.sqrt(2))])
def test_constants(name, expected):
    value = getattr(Quad, name)
    assert_nonoverlapping(value)
    assert_close(value, expected, mp.mpf(2) ** -210)


def test_limits():
    assert Quad.EPSILON == 2.0 ** -209
    assert Quad.DIGITS == 62
    assert Quad.MAX.is_finite()
    assert_nonoverlapping(Quad.MAX)
    assert Quad.MAX[3] > 0
    assert Quad.MIN_POSITIVE[0] == 2.0 ** -863


def test_is_infinite_checks_every_limb():
    assert Quad(1.0, 0.0, 0.0, math.inf).is_infinite()
    assert not Quad(1.0, 0.0, 0.0, math.inf).is_finite()
    assert Quad(1.0, 0.0, math.nan, 0.0).is_nan()


def test_comparison_uses_all_limbs():
    x = Quad(1.0, 0.0, 0.0, 2.0 ** -200)
    assert x > 1
    assert x > Double.ONE
    assert x != Quad.ONE
    assert -x < -1


def test_floor_ceil():
    x = Quad(5.0, 0.0, 2.0 ** -110, 0.0)
    assert x.floor() == 5
    assert x.ceil() == 6
    assert Quad(-2.5).floor() == -3
    assert Quad(2.0 ** 100, 0.5).floor() == Quad(2.0 ** 100)


def test_add_merges_all_limbs():
    x = Quad(1.0, 2.0 ** -60, 2.0 ** -120, 2.0 ** -180)
    y = Quad(2.0 ** -30, 2.0 ** -90, 2.0 ** -150, 2.0 ** -210)
    s = x + y
    assert_nonoverlapping(s)
    assert_close(s, to_mp(x) + to_mp(y), QUAD_TOL)


def test_cancellation():
    x = Quad.PI - Quad(Quad.PI[0])
    assert x.components == (Quad.PI[1], Quad.PI[2], Quad.PI[3], 0.0)


def test_special_values():
    assert (Quad.INFINITY - Quad.INFINITY).is_nan()
    assert (Quad.ONE / Quad.ZERO) == Quad.INFINITY
    assert (Quad.ZERO / Quad.ZERO).is_nan()
    assert (Quad.INFINITY * Quad.ZERO).is_nan()
    assert (Quad.NEG_ZERO * Quad.ONE).is_sign_negative()
    assert (Quad.MAX * Quad.MAX).is_infinite()
    assert Quad.NAN.sqr().is_nan()
    assert Quad.NEG_INFINITY.sqr() == Quad.INFINITY


def test_third_over_three():
    third = Quad.ONE / 3
    assert_close(third, mp.mpf(1) / 3, QUAD_TOL)
    assert_close(third * 3, 1, QUAD_TOL)


@given(a=signed, b=signed, c=signed, d=signed)
@settings(max_examples=150, deadline=None)
def test_arithmetic_accuracy(a, b, c, d):
    x = _random_quad(a, b)
    y = _random_quad(c, d)
    mx, my = to_mp(x), to_mp(y)

    s = x + y
    assert_nonoverlapping(s)
    assert abs(to_mp(s) - (mx + my)) <= QUAD_TOL * (abs(mx) + abs(my))
    assert abs(to_mp(x - y) - (mx - my)) <= QUAD_TOL * (abs(mx) + abs(my))

    p = x * y
    assert_nonoverlapping(p)
    assert_close(p, mx * my, QUAD_TOL)
    assert_close(x / y, mx / my, QUAD_TOL)
    sq = x.sqr()
    assert_nonoverlapping(sq)
    assert_close(sq, mx * mx, QUAD_TOL)


@given(a=signed, b=signed)
@settings(max_examples=100, deadline=None)
def test_mixed_with_double_promotes(a, b):
    x = _random_quad(a, b)
    y = Double.from_mpmath(mp.mpf(b) / mp.mpf(a))
    r = x * y
    assert isinstance(r, Quad)
    assert_close(r, to_mp(x) * to_mp(y), QUAD_TOL)
