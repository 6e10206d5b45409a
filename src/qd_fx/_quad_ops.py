"""qd_fx._quad_ops
===================
Базовая арифметика `Quad`.

* сложение — слияние компонент обоих операндов по убыванию модуля с
  двухкомпонентным аккумулятором (`accumulate`), затем renorm4
* умножение — все произведения до O(eps^4) через two_prod,
  суммирование three_sum / two_sum и renorm5
* деление — пять шагов длинного деления
"""

from __future__ import annotations

import math

from ._core import quick_two_sum, two_prod, two_sqr, two_sum
from ._expansion import implements, pre_add, pre_div, pre_mul
from ._quad import Quad
from ._renorm import accumulate, renorm4, renorm5, three_sum


@implements(Quad, "add")
def qd_add(a: Quad, b: Quad) -> Quad:
    special = pre_add(a, b)
    if special is not None:
        return special

    i = j = k = 0
    x = [0.0, 0.0, 0.0, 0.0]

    def take():
        nonlocal i, j
        if i >= 4:
            j += 1
            return b[j - 1]
        if j >= 4 or abs(a[i]) > abs(b[j]):
            i += 1
            return a[i - 1]
        j += 1
        return b[j - 1]

    u = take()
    v = take()
    u, v = quick_two_sum(u, v)

    while k < 4:
        if i >= 4 and j >= 4:
            x[k] = u
            if k < 3:
                k += 1
                x[k] = v
            break
        s, u, v = accumulate(u, v, take())
        if s != 0.0:
            x[k] = s
            k += 1

    # Хвосты, не вошедшие в аккумулятор
    for idx in range(i, 4):
        x[3] += a[idx]
    for idx in range(j, 4):
        x[3] += b[idx]

    return Quad(*renorm4(*x))


@implements(Quad, "sub")
def qd_sub(a: Quad, b: Quad) -> Quad:
    return qd_add(a, -b)


@implements(Quad, "mul")
def qd_mul(a: Quad, b: Quad) -> Quad:
    special = pre_mul(a, b)
    if special is not None:
        return special

    p0, q0 = two_prod(a[0], b[0])
    if not math.isfinite(p0):
        # Переполнение старшего произведения
        return Quad(p0)

    p1, q1 = two_prod(a[0], b[1])
    p2, q2 = two_prod(a[1], b[0])

    p3, q3 = two_prod(a[0], b[2])
    p4, q4 = two_prod(a[1], b[1])
    p5, q5 = two_prod(a[2], b[0])

    # O(eps)
    p1, p2, q0 = three_sum(p1, p2, q0)

    # O(eps^2): шесть слагаемых p2, q1, q2, p3, p4, p5 -> три
    p2, q1, q2 = three_sum(p2, q1, q2)
    p3, p4, p5 = three_sum(p3, p4, p5)
    s0, t0 = two_sum(p2, p3)
    s1, t1 = two_sum(q1, p4)
    s2 = q2 + p5
    s1, t0 = two_sum(s1, t0)
    s2 += t0 + t1

    # O(eps^3)
    p6, q6 = two_prod(a[0], b[3])
    p7, q7 = two_prod(a[1], b[2])
    p8, q8 = two_prod(a[2], b[1])
    p9, q9 = two_prod(a[3], b[0])

    q0, q3 = two_sum(q0, q3)
    q4, q5 = two_sum(q4, q5)
    p6, p7 = two_sum(p6, p7)
    p8, p9 = two_sum(p8, p9)
    t0, t1 = two_sum(q0, q4)
    t1 += q3 + q5
    r0, r1 = two_sum(p6, p8)
    r1 += p7 + p9
    q3, q4 = two_sum(t0, r0)
    q4 += t1 + r1
    t0, t1 = two_sum(q3, s1)
    t1 += q4

    # O(eps^4)
    t1 += a[1] * b[3] + a[2] * b[2] + a[3] * b[1] + q6 + q7 + q8 + q9 + s2

    return Quad(*renorm5(p0, p1, s0, t0, t1))


@implements(Quad, "div")
def qd_div(a: Quad, b: Quad) -> Quad:
    special = pre_div(a, b)
    if special is not None:
        return special

    q0 = a[0] / b[0]
    if not math.isfinite(q0):
        return Quad(q0)
    r = a - b * q0
    q1 = r[0] / b[0]
    r = r - b * q1
    q2 = r[0] / b[0]
    r = r - b * q2
    q3 = r[0] / b[0]
    r = r - b * q3
    q4 = r[0] / b[0]
    return Quad(*renorm5(q0, q1, q2, q3, q4))


@implements(Quad, "sqr")
def qd_sqr(a: Quad) -> Quad:
    """Квадрат: пропускает повторные перекрёстные произведения умножения."""
    if not a.is_finite():
        return a * a

    h0, l0 = two_sqr(a[0])
    if not math.isfinite(h0):
        return Quad(h0)
    h1, l1 = two_prod(2.0 * a[0], a[1])
    h2, l2 = two_prod(2.0 * a[0], a[2])
    h3, l3 = two_sqr(a[1])
    h4 = 2.0 * a[0] * a[3]
    h5 = 2.0 * a[1] * a[2]

    r0 = h0
    r1, a1 = two_sum(h1, l0)

    b0, b1 = two_sum(a1, l1)
    c0, c1 = two_sum(h2, h3)
    d0, d1 = two_sum(b0, c0)
    e0, e1 = two_sum(b1, c1)
    f0, f1 = two_sum(d1, e0)
    i0, i1 = quick_two_sum(f0, e1 + f1)
    r2, j1 = quick_two_sum(d0, i0)

    k0, k1 = quick_two_sum(i1, j1)
    m0, m1 = two_sum(h4, h5)
    n0, n1 = two_sum(l2, l3)
    o0, o1 = two_sum(m0, n0)
    r3, q1 = two_sum(k0, o0)

    r4 = m1 + n1 + o1 + k1 + q1

    return Quad(*renorm5(r0, r1, r2, r3, r4))


@implements(Quad, "powi")
def qd_powi(a: Quad, n: int) -> Quad:
    if n == 0:
        return Quad.ONE
    result = Quad.ONE
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
