"""qd_fx._transcendental
=========================
Трансцендентные функции обоих типов: exp, ln, log10/log2/log, sin_cos, atan2.

Общая схема — сначала таблица особых значений (`_pre_*`), затем
редукция аргумента с точностью типа и ряд Тейлора или итерации Ньютона
с затравкой из обычного float.

Один и тот же код обслуживает `Double` и `Quad`: от типа зависят только
константы класса (`PI`, `LN_2`, `EPSILON`, ...) и таблицы из `_tables`.
"""

from __future__ import annotations

import logging
import math

from ._double import Double
from ._errors import ConvergenceError
from ._expansion import implements
from ._quad import Quad
from ._tables import (
    DOUBLE_COSINES,
    DOUBLE_INV_FACTS,
    DOUBLE_SINES,
    QUAD_COSINES,
    QUAD_INV_FACTS,
    QUAD_SINES,
)

logger = logging.getLogger(__name__)

# exp: аргумент после вычитания m·ln2 дополнительно делится на k = 512
EXP_REDUCTION_K = 512
_INV_K = 1.0 / EXP_REDUCTION_K
_EXP_SQUARINGS = 9  # log2(EXP_REDUCTION_K)

# ln: предел итераций Ньютона; обычно хватает 2–3
LN_MAX_ITERATIONS = 20
# ln: аргумент приводится степенью двойки к [1/sqrt(2), sqrt(2))
_SQRT_HALF = math.sqrt(0.5)

# atan2: фиксированное число итераций Ньютона от затравки float
ATAN2_ITERATIONS = 3

_INV_FACTS = {
    Double: tuple(Double(*limbs) for limbs in DOUBLE_INV_FACTS),
    Quad: tuple(Quad(*limbs) for limbs in QUAD_INV_FACTS),
}
# Наибольший индекс обратного факториала в ряде exp
_EXP_MAX_TERM = {Double: 5, Quad: len(QUAD_INV_FACTS) - 1}
# Запас (в степенях двойки) к EPSILON в критерии остановки ln
_LN_EPS_SHIFT = {Double: 2, Quad: 10}

_SINES = {
    Double: tuple(Double(*limbs) for limbs in DOUBLE_SINES),
    Quad: tuple(Quad(*limbs) for limbs in QUAD_SINES),
}
_COSINES = {
    Double: tuple(Double(*limbs) for limbs in DOUBLE_COSINES),
    Quad: tuple(Quad(*limbs) for limbs in QUAD_COSINES),
}


# --- exp -----------------------------------------------------------------


def _pre_exp(a):
    cls = type(a)
    if a[0] <= -600.0:
        return cls.ZERO
    if a[0] > 708.0:
        return cls.INFINITY
    if a.is_nan():
        return cls.NAN
    if a.is_zero():
        return cls.ONE
    if a == cls.ONE:
        return cls.E
    return None


@implements(Double, "exp")
@implements(Quad, "exp")
def exp(a):
    """
    exp(a) = 2^m · (1 + r)^512, где m — ближайшее целое к a/ln2, а
    r = exp((a - m·ln2)/512) - 1 считается рядом Тейлора.
    Возведение в 512-ю степень — 9 шагов r ↦ 2r + r².
    """
    special = _pre_exp(a)
    if special is not None:
        return special

    cls = type(a)
    inv_facts = _INV_FACTS[cls]
    max_term = _EXP_MAX_TERM[cls]
    eps = _INV_K * cls.EPSILON

    m = math.floor(a[0] / cls.LN_2[0] + 0.5)
    x = (a - cls.LN_2 * m) * _INV_K

    # x + x²/2! + x³/3!
    p = x.sqr()
    r = x + p.mul_pwr2(0.5)
    p = p * x
    t = p * inv_facts[0]
    i = 0
    while True:
        r = r + t
        p = p * x
        i += 1
        t = p * inv_facts[i]
        if i >= max_term or abs(t[0]) <= eps:
            break
    r = r + t

    for _ in range(_EXP_SQUARINGS):
        r = r.mul_pwr2(2.0) + r.sqr()
    r = r + cls.ONE
    return r.ldexp(m)


# --- ln ------------------------------------------------------------------


def _pre_ln(a):
    cls = type(a)
    if a.is_nan():
        return cls.NAN
    if a.is_sign_negative():
        return cls.NAN
    if a.is_zero():
        return cls.NEG_INFINITY
    if a.is_infinite():
        return cls.INFINITY
    if a == cls.ONE:
        return cls.ZERO
    return None


@implements(Double, "ln")
@implements(Quad, "ln")
def ln(a):
    """
    Натуральный логарифм итерацией Ньютона для f(x) = exp(x) - a:
    x' = x + a·exp(-x) - 1. Затравка — math.log старшей компоненты.

    Итерация видит только a из [1/sqrt(2), sqrt(2)): остальное
    сводится к ним как ln(a) = k·ln2 + ln(a·2^-k).
    """
    special = _pre_ln(a)
    if special is not None:
        return special

    cls = type(a)
    m, k = math.frexp(a[0])
    if m < _SQRT_HALF:
        k -= 1
    if k != 0:
        return cls.LN_2 * k + ln(a.ldexp(-k))

    x = cls(math.log(a[0]))

    k = math.floor(math.log2(abs(x[0]))) if x[0] != 0.0 else 0
    eps = math.ldexp(cls.EPSILON, max(k, 0) + _LN_EPS_SHIFT[cls])

    for iteration in range(1, LN_MAX_ITERATIONS + 1):
        r = x + a * (-x).exp() - cls.ONE
        if abs((x - r)[0]) < eps:
            logger.debug("ln(%r): converged in %d iterations", a, iteration)
            return r
        x = r

    logger.debug("ln(%r): no convergence after %d iterations, last=%r", a, LN_MAX_ITERATIONS, x)
    raise ConvergenceError(f"ln did not converge for {a!r}")


@implements(Double, "log10")
@implements(Quad, "log10")
def log10(a):
    return a.ln() / type(a).LN_10


@implements(Double, "log2")
@implements(Quad, "log2")
def log2(a):
    return a.ln() / type(a).LN_2


@implements(Double, "log")
@implements(Quad, "log")
def log(a, base):
    return a.ln() / base.ln()


# --- sin / cos -----------------------------------------------------------


def _sin_taylor(a):
    """sin(a) рядом Тейлора для |a| ≤ π/32."""
    cls = type(a)
    if a.is_zero():
        return cls.ZERO
    inv_facts = _INV_FACTS[cls]
    thresh = 0.5 * abs(a[0]) * cls.EPSILON
    x = -a.sqr()
    s = a
    p = a
    i = 0
    while True:
        p = p * x
        t = p * inv_facts[i]
        s = s + t
        i += 2
        if i >= len(inv_facts) or abs(t[0]) <= thresh:
            break
    return s


@implements(Double, "sin_cos")
@implements(Quad, "sin_cos")
def sin_cos(a):
    """
    Синус и косинус одновременно.

    Аргумент приводится к t = a - 2π·z - (π/2)·j - (π/16)·k, где |t| ≤ π/32;
    sin t считается рядом, cos t = sqrt(1 - sin²t), затем результат
    поворачивается табличными sin(kπ/16), cos(kπ/16) и квадрантом j.
    """
    cls = type(a)
    if not a.is_finite():
        return cls.NAN, cls.NAN
    if a.is_zero():
        return a, cls.ONE

    z = (a / cls.TAU + 0.5).floor()
    r = a - cls.TAU * z

    q = math.floor(r[0] / cls.FRAC_PI_2[0] + 0.5)
    t = r - cls.FRAC_PI_2 * q
    j = int(q)
    q = math.floor(t[0] / cls.FRAC_PI_16[0] + 0.5)
    t = t - cls.FRAC_PI_16 * q
    k = int(q)

    abs_k = abs(k)
    if abs(j) > 2 or abs_k > 4:
        logger.debug("sin_cos(%r): argument reduction failed (j=%d, k=%d)", a, j, k)
        return cls.NAN, cls.NAN

    sin_t = _sin_taylor(t)
    cos_t = (cls.ONE - sin_t.sqr()).sqrt()

    if k == 0:
        s, c = sin_t, cos_t
    else:
        u = _COSINES[cls][abs_k - 1]
        v = _SINES[cls][abs_k - 1]
        if k > 0:
            s = u * sin_t + v * cos_t
            c = u * cos_t - v * sin_t
        else:
            s = u * sin_t - v * cos_t
            c = u * cos_t + v * sin_t

    if j == 0:
        return s, c
    if j == 1:
        return c, -s
    if j == -1:
        return -c, s
    return -s, -c


# --- atan2 ---------------------------------------------------------------


def _pre_atan2(y, x):
    cls = type(y)
    if y.is_nan() or x.is_nan():
        return cls.NAN
    if x.is_zero():
        if y.is_zero():
            return cls.NAN
        return cls.FRAC_PI_2 if y.is_sign_positive() else -cls.FRAC_PI_2
    if y.is_zero():
        return cls.ZERO if x.is_sign_positive() else cls.PI
    if y.is_infinite():
        if x.is_infinite():
            return cls.NAN
        return cls.FRAC_PI_2 if y.is_sign_positive() else -cls.FRAC_PI_2
    if x.is_infinite():
        if x.is_sign_positive():
            return cls.ZERO
        return cls.PI if y.is_sign_positive() else -cls.PI
    if y == x:
        return cls.FRAC_PI_4 if y.is_sign_positive() else -cls.FRAC_3_PI_4
    if y == -x:
        return cls.FRAC_3_PI_4 if y.is_sign_positive() else -cls.FRAC_PI_4
    return None


@implements(Double, "atan2")
@implements(Quad, "atan2")
def atan2(y, x):
    """
    Угол точки (x, y) в (-π, π].

    Точка проецируется на единичную окружность, затем решается
    sin z = y/r (если |x| > |y|) или cos z = x/r итерациями Ньютона
    от затравки math.atan2.
    """
    special = _pre_atan2(y, x)
    if special is not None:
        return special

    cls = type(y)
    # Степень двойки не меняет угол, но спасает x² + y² от переполнения
    _, e = math.frexp(max(abs(x[0]), abs(y[0])))
    if abs(e) > 500:
        x = x.ldexp(-e)
        y = y.ldexp(-e)

    r = (y.sqr() + x.sqr()).sqrt()
    xr = x / r
    yr = y / r

    z = cls(math.atan2(y[0], x[0]))
    if abs(xr[0]) > abs(yr[0]):
        for _ in range(ATAN2_ITERATIONS):
            sin_z, cos_z = z.sin_cos()
            z = z + (yr - sin_z) / cos_z
    else:
        for _ in range(ATAN2_ITERATIONS):
            sin_z, cos_z = z.sin_cos()
            z = z - (xr - cos_z) / sin_z
    return z
