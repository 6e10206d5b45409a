"""qd_fx._double_ops
=====================
Базовая арифметика `Double`: +, -, *, /, квадрат и целая степень.

Алгоритмы — классические double-double (Dekker / Bailey, библиотека QD);
каждая операция сначала проверяет таблицу специальных значений
(`pre_add` / `pre_mul` / `pre_div`), затем работает только с конечными
числами.
"""

from __future__ import annotations

import math

from ._core import quick_two_sum, two_prod, two_sqr, two_sum
from ._double import Double
from ._expansion import implements, pre_add, pre_div, pre_mul


@implements(Double, "add")
def dd_add(a: Double, b: Double) -> Double:
    """Точное (IEEE-style) сложение: ошибка не больше 2 ulp результата."""
    special = pre_add(a, b)
    if special is not None:
        return special
    s1, s2 = two_sum(a[0], b[0])
    t1, t2 = two_sum(a[1], b[1])
    s2 += t1
    s1, s2 = quick_two_sum(s1, s2)
    s2 += t2
    return Double(*quick_two_sum(s1, s2))


@implements(Double, "sub")
def dd_sub(a: Double, b: Double) -> Double:
    return dd_add(a, -b)


@implements(Double, "mul")
def dd_mul(a: Double, b: Double) -> Double:
    special = pre_mul(a, b)
    if special is not None:
        return special
    p, e = two_prod(a[0], b[0])
    if not math.isfinite(p):
        # Переполнение старшего произведения
        return Double(p)
    e += a[0] * b[1] + a[1] * b[0]
    return Double(*quick_two_sum(p, e))


@implements(Double, "div")
def dd_div(a: Double, b: Double) -> Double:
    """Деление длинным делением: частное по старшей компоненте + поправка по остатку."""
    special = pre_div(a, b)
    if special is not None:
        return special
    q1 = a[0] / b[0]
    if not math.isfinite(q1):
        return Double(q1)
    r = a - b * q1
    q2 = r[0] / b[0]
    return Double(*quick_two_sum(q1, q2))


@implements(Double, "sqr")
def dd_sqr(a: Double) -> Double:
    if not a.is_finite():
        return a * a
    p, e = two_sqr(a[0])
    if not math.isfinite(p):
        return Double(p)
    e += 2.0 * a[0] * a[1] + a[1] * a[1]
    return Double(*quick_two_sum(p, e))


@implements(Double, "powi")
def dd_powi(a: Double, n: int) -> Double:
    """Бинарное возведение в целую степень; отрицательная степень — через обратное."""
    if n == 0:
        return Double.ONE
    result = Double.ONE
    base = a
    m = abs(n)
    if m > 1:
        while m > 0:
            if m & 1:
                result = result * base
            m >>= 1
            if m > 0:
                base = base.sqr()
    else:
        result = a
    if n < 0:
        return result.recip()
    return result
