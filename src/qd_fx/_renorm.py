"""qd_fx._renorm
=================
Реализация алгоритмов ренормализации на базе EFT.

* renormalize — сворачивает произвольную последовательность компонент
  (перекрывающихся, неупорядоченных, длиннее нужного) в каноническое
  k-компонентное представление: убывание по модулю, без перекрытий.
* renorm2 / renorm4 / renorm5 — частные случаи для Double и Quad.
* three_sum / accumulate — «скользящие» сумматоры, используемые
  в слиянии компонент при сложении Quad.

Все функции работают с обычными `float` и детерминированы: одинаковый
вход всегда даёт побитово одинаковый выход.
"""

from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from ._core import quick_two_sum, two_sum

__all__ = [
    "renormalize",
    "renorm2",
    "renorm4",
    "renorm5",
    "three_sum",
    "accumulate",
]

# Предел повторов прохода снизу вверх в renormalize
_MAX_DISTILL_PASSES = 64


def _non_finite(limbs: Sequence[float], k: int) -> Tuple[float, ...]:
    """Сводит последовательность с NaN/Inf к одному специальному значению."""
    pos = any(x == math.inf for x in limbs)
    neg = any(x == -math.inf for x in limbs)
    if any(math.isnan(x) for x in limbs) or (pos and neg):
        head = math.nan
    else:
        head = math.inf if pos else -math.inf
    return (head,) + (0.0,) * (k - 1)


def _vec_sum(c: List[float]) -> None:
    """Проход снизу вверх: каскад two_sum, ошибки остаются на местах (in place)."""
    s = c[-1]
    for i in range(len(c) - 2, -1, -1):
        s, c[i + 1] = two_sum(c[i], s)
    c[0] = s


def _is_canonical(c: Sequence[float]) -> bool:
    nonzero = [x for x in c if x != 0.0]
    return all(abs(lo) <= math.ulp(hi) / 2 for hi, lo in zip(nonzero, nonzero[1:]))


def _emit(c: Sequence[float], k: int) -> Tuple[float, ...]:
    """
    Проход сверху вниз: выпускает очередную компоненту, как только
    ошибка quick_two_sum ненулевая; нули пропускаются. Всё, что не
    помещается в k компонент, складывается в последнюю — это и есть
    граница точности типа.
    """
    out = [0.0] * k
    out[0] = c[0]
    j = 0
    for i in range(1, len(c)):
        if j == k - 1:
            out[j] += c[i]
            continue
        out[j], t = quick_two_sum(out[j], c[i])
        if t != 0.0:
            j += 1
            out[j] = t
    return tuple(out)


def _renorm_fast(limbs: Sequence[float], k: int) -> Tuple[float, ...]:
    """Ренормализация почти упорядоченного выхода арифметики: один проход в каждую сторону."""
    c = list(limbs)
    if not all(math.isfinite(x) for x in c):
        return _non_finite(c, k)
    _vec_sum(c)
    return _emit(c, k)


def renormalize(limbs: Sequence[float], k: int) -> Tuple[float, ...]:
    """
    Ренормализует «грязную» последовательность компонент в ровно k чистых.

    Вход может быть произвольным: перекрывающиеся компоненты, любой
    порядок, любая длина. Проход снизу вверх повторяется, пока ненулевые
    компоненты не перестанут перекрываться (при сильных сокращениях
    одного прохода мало), затем компоненты выпускаются сверху вниз.

    Каноничной считается последовательность с |c[i+1]| <= ulp(c[i])/2,
    включая равенство: такой вход (не длиннее k после отбрасывания нулей)
    возвращается без изменений, поэтому renormalize идемпотентна.
    """
    if k < 1:
        raise ValueError(f"renormalize expects k >= 1, got {k}")

    c = [float(x) for x in limbs]
    if not c:
        return (0.0,) * k
    if not all(math.isfinite(x) for x in c):
        return _non_finite(c, k)

    nonzero = [x for x in c if x != 0.0]
    if nonzero and len(nonzero) <= k and _is_canonical(nonzero):
        return tuple(nonzero) + (0.0,) * (k - len(nonzero))

    for _ in range(_MAX_DISTILL_PASSES):
        _vec_sum(c)
        if _is_canonical(c):
            break
    return _emit(c, k)


def renorm2(a: float, b: float) -> Tuple[float, float]:
    """Нормализация пары: требует `|a| >= |b|`."""
    return quick_two_sum(a, b)


def renorm4(c0: float, c1: float, c2: float, c3: float) -> Tuple[float, float, float, float]:
    return _renorm_fast((c0, c1, c2, c3), 4)  # type: ignore[return-value]


def renorm5(
    c0: float, c1: float, c2: float, c3: float, c4: float
) -> Tuple[float, float, float, float]:
    """Пять компонент (промежуточный результат Quad) → четыре."""
    return _renorm_fast((c0, c1, c2, c3, c4), 4)  # type: ignore[return-value]


def three_sum(a: float, b: float, c: float) -> Tuple[float, float, float]:
    """Точная сумма трёх чисел как три неперекрывающихся компоненты."""
    t1, t2 = two_sum(a, b)
    a, t3 = two_sum(c, t1)
    b, c = two_sum(t2, t3)
    return a, b, c


def accumulate(a: float, b: float, c: float) -> Tuple[float, float, float]:
    """
    Добавляет `c` к двухкомпонентному аккумулятору `(a, b)`.

    Возвращает `(s, a, b)`: если аккумулятор переполнился (обе его
    компоненты ненулевые), `s` — готовая старшая компонента результата,
    иначе `s == 0.0` и аккумулятор просто поджат.
    """
    s, b = two_sum(b, c)
    s, a = two_sum(a, s)

    za = a != 0.0
    zb = b != 0.0
    if za and zb:
        return s, a, b

    if not zb:
        b = a
        a = s
    else:
        a = s
    return 0.0, a, b
