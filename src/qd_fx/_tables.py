"""qd_fx._tables
=================
Предвычисленные константы и таблицы.

Все значения строятся один раз при импорте модуля через mpmath с
запасом точности и раскладываются на float64-компоненты тем же
способом, что и `from_mpmath` у значений: старшая компонента —
ближайший float, остаток вычитается точно и раскладывается дальше.
После импорта таблицы только читаются.
"""

from __future__ import annotations

from typing import Dict, Tuple

from mpmath import mp

Limbs = Tuple[float, ...]

# Число членов таблиц обратных факториалов (1/3!, 1/4!, ...)
_DOUBLE_INV_FACTS = 15
_QUAD_INV_FACTS = 38

# Запас точности mpmath при построении таблиц
_WORK_DPS = 120
_WORK_PREC = 400


def split_mpf(value, k: int) -> Limbs:
    """Раскладывает mpmath-число на k неперекрывающихся float64-компонент."""
    comps = []
    with mp.workprec(max(mp.prec, _WORK_PREC)):
        residue = mp.mpf(value)
        for _ in range(k):
            if residue == 0:
                comps.append(0.0)
                continue
            c_float = float(residue)
            comps.append(c_float)
            residue -= mp.mpf(c_float)
    return tuple(comps)


def _constants(k: int) -> Dict[str, Limbs]:
    with mp.workdps(_WORK_DPS):
        pi = mp.pi
        values = {
            "PI": pi,
            "TAU": 2 * pi,
            "FRAC_PI_2": pi / 2,
            "FRAC_PI_4": pi / 4,
            "FRAC_3_PI_4": 3 * pi / 4,
            "FRAC_PI_16": pi / 16,
            "E": mp.e,
            "LN_2": mp.ln2,
            "LN_10": mp.ln(10),
            "LOG2_E": 1 / mp.ln2,
            "LOG10_E": 1 / mp.ln(10),
            "SQRT_2": mp.sqrt(2),
            "FRAC_1_SQRT_2": 1 / mp.sqrt(2),
        }
        return {name: split_mpf(v, k) for name, v in values.items()}


def _inv_facts(k: int, n: int) -> Tuple[Limbs, ...]:
    """1/3!, 1/4!, ..., 1/(n+2)! — элемент i равен 1/(i+3)!."""
    with mp.workdps(_WORK_DPS):
        return tuple(split_mpf(1 / mp.factorial(i + 3), k) for i in range(n))


def _sin_cos_table(k: int) -> Tuple[Tuple[Limbs, ...], Tuple[Limbs, ...]]:
    """sin(jπ/16) и cos(jπ/16) для j = 1..4."""
    with mp.workdps(_WORK_DPS):
        angles = [j * mp.pi / 16 for j in range(1, 5)]
        sines = tuple(split_mpf(mp.sin(a), k) for a in angles)
        cosines = tuple(split_mpf(mp.cos(a), k) for a in angles)
    return sines, cosines


DOUBLE_CONSTANTS = _constants(2)
QUAD_CONSTANTS = _constants(4)

DOUBLE_INV_FACTS = _inv_facts(2, _DOUBLE_INV_FACTS)
QUAD_INV_FACTS = _inv_facts(4, _QUAD_INV_FACTS)

DOUBLE_SINES, DOUBLE_COSINES = _sin_cos_table(2)
QUAD_SINES, QUAD_COSINES = _sin_cos_table(4)
