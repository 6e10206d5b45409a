"""qd_fx._core
===============
Числовые примитивы «error-free transformation» (EFT),
на которых построена вся арифметика qd-fx.

* two_sum / quick_two_sum — точное представление суммы
* two_diff — точное представление разности
* two_prod / two_sqr — точное представление произведения и квадрата

Все функции принимают обычные `float` и возвращают пару
(value, error), где value — округлённый результат, а error — точная
ошибка округления.
"""

from __future__ import annotations

import math
from typing import Tuple

__all__ = ["two_sum", "quick_two_sum", "two_diff", "two_prod", "two_sqr", "split", "ieee_div"]

# 2^27 + 1 — множитель разбиения Деккера для 53-битной мантиссы
_SPLITTER = 134217729.0
# Выше этого порога split * a переполняется, поэтому масштабируем на 2^-28
_SPLIT_THRESH = 6.69692879491417e299
_SPLIT_DOWN = 2.0 ** -28
_SPLIT_UP = 2.0 ** 28


def two_sum(a: float, b: float) -> Tuple[float, float]:
    """Двойная сумма (Knuth).

    Возвращает `(s, e)` такие, что `a + b == s + e` *точно* в
    вещественной арифметике, где `s` — округлённая сумма, `e` — ошибка
    округления. Порядок аргументов не важен.
    """
    s = a + b
    # Если есть инф/нан, точная ошибка не имеет смысла
    if not math.isfinite(s):
        if math.isnan(a) or math.isnan(b):
            return s, math.nan
        return s, 0.0

    bb = s - a
    e = (a - (s - bb)) + (b - bb)
    return s, e


def quick_two_sum(a: float, b: float) -> Tuple[float, float]:
    """Быстрая двойная сумма (Dekker).

    Тот же контракт, что у `two_sum`, но требует `|a| >= |b|`. При
    нарушении условия результат неверен (но конечен) — проверку
    обязан делать вызывающий код.
    """
    s = a + b
    if not math.isfinite(s):
        return s, 0.0
    e = b - (s - a)
    return s, e


def two_diff(a: float, b: float) -> Tuple[float, float]:
    """Точная разность: `a - b == s + e`."""
    return two_sum(a, -b)


def split(a: float) -> Tuple[float, float]:
    """Разбиение Деккера числа на две 26-битные половины `hi + lo == a`."""
    if a > _SPLIT_THRESH or a < -_SPLIT_THRESH:
        a *= _SPLIT_DOWN
        t = _SPLITTER * a
        hi = t - (t - a)
        lo = a - hi
        return hi * _SPLIT_UP, lo * _SPLIT_UP
    t = _SPLITTER * a
    hi = t - (t - a)
    lo = a - hi
    return hi, lo


def _two_prod_fma(a: float, b: float) -> Tuple[float, float]:
    """Произведение с использованием FMA (Python 3.13+)."""
    p = a * b
    e = math.fma(a, b, -p)  # точный остаток
    return p, e


def _two_prod_dekker(a: float, b: float) -> Tuple[float, float]:
    """Dekker split-algorithm без FMA (Hida, Li, Bailey 2001)."""
    p = a * b
    a_high, a_low = split(a)
    b_high, b_low = split(b)
    e = ((a_high * b_high - p) + a_high * b_low + a_low * b_high) + a_low * b_low
    return p, e


_HAS_FMA = hasattr(math, "fma")


def two_prod(a: float, b: float) -> Tuple[float, float]:
    """Двойное произведение (TwoProd).

    Возвращает `(p, e)` такие, что `a * b == p + e` *точно*.
    Использует FMA, если интерпретатор его предоставляет, иначе
    переключается на вариант Деккера.
    """
    p = a * b
    # Явное распространение NaN (включая inf*0)
    if math.isnan(p):
        return p, math.nan
    # Произведение Inf, но не NaN — ошибка 0
    if math.isinf(p):
        return p, 0.0

    if _HAS_FMA:
        return _two_prod_fma(a, b)
    return _two_prod_dekker(a, b)


def two_sqr(a: float) -> Tuple[float, float]:
    """Точный квадрат `a * a == p + e`; пропускает повторные перекрёстные члены."""
    p = a * a
    if not math.isfinite(p):
        return p, (math.nan if math.isnan(p) else 0.0)

    if _HAS_FMA:
        return p, math.fma(a, a, -p)
    hi, lo = split(a)
    e = ((hi * hi - p) + 2.0 * hi * lo) + lo * lo
    return p, e


def ieee_div(a: float, b: float) -> float:
    """Деление float по IEEE 754: x/0 даёт ±inf, 0/0 — NaN, без ZeroDivisionError."""
    if b == 0.0:
        if a == 0.0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b
