from fractions import Fraction

from mpmath import mp

from qd_fx import Double, Quad

mp.dps = 200  # Повысим точность для надежности


def to_mp(x) -> mp.mpf:
    """Точное значение Double/Quad как mpmath-число."""
    return mp.fsum(mp.mpf(c) for c in x.components)


def rel_err(actual, expected) -> mp.mpf:
    """Относительная ошибка actual (Double/Quad) против mpmath-эталона."""
    expected = mp.mpf(expected)
    diff = abs(to_mp(actual) - expected)
    if expected == 0:
        return diff
    return diff / abs(expected)


def assert_close(actual, expected, tol) -> None:
    err = rel_err(actual, expected)
    assert err <= tol, f"rel err {mp.nstr(err, 5)} > {tol} for {actual!r} vs {mp.nstr(mp.mpf(expected), 40)}"


def assert_nonoverlapping(x) -> None:
    """Каждая следующая компонента не больше половины ulp предыдущей."""
    comps = x.components
    for hi, lo in zip(comps, comps[1:]):
        if hi == 0.0:
            assert lo == 0.0
            continue
        assert abs(Fraction(lo)) <= abs(Fraction(hi)) * Fraction(1, 2**52), comps


DOUBLE_TOL = mp.mpf(2) ** -100
QUAD_TOL = mp.mpf(2) ** -200
