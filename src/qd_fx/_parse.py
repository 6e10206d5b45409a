"""qd_fx._parse
================
Разбор десятичных строк в `Double` / `Quad`.

Грамматика: необязательный знак, цифры с разделителями `_`, не более
одной точки, необязательная экспонента `e`/`E` с целым со знаком;
`nan`, `inf`, `-inf` (`+inf`, `infinity`) в любом регистре. Цифры
накапливаются арифметикой целевого типа: result = result·10 + d.
"""

from __future__ import annotations

import re

from ._double import Double
from ._errors import ErrorKind, ParseError
from ._quad import Quad

__all__ = ["parse", "parse_double", "parse_quad"]

_EXPONENT = re.compile(r"[+-]?[0-9]+")

_SPECIALS = {
    "nan": "NAN",
    "+nan": "NAN",
    "-nan": "NAN",
    "inf": "INFINITY",
    "+inf": "INFINITY",
    "infinity": "INFINITY",
    "+infinity": "INFINITY",
    "-inf": "NEG_INFINITY",
    "-infinity": "NEG_INFINITY",
}

# 10^e при e < -307 уходит в субнормальные числа; делим в два шага
_MIN_EXP_STEP = -307


def parse(cls, text: str):
    """Разбирает `text` в число типа `cls`; при ошибке поднимает ParseError."""
    s = text.strip()
    if not s:
        raise ParseError(ErrorKind.EMPTY, text)

    special = _SPECIALS.get(s.lower())
    if special is not None:
        return getattr(cls, special)

    ten = cls(10.0)
    result = cls.ZERO
    digits = 0
    point = -1
    negative = False
    signed = False
    exponent = 0

    for index, ch in enumerate(s):
        if "0" <= ch <= "9":
            result = result * ten + int(ch)
            digits += 1
        elif ch == ".":
            if point >= 0:
                raise ParseError(ErrorKind.INVALID, text)
            point = digits
        elif ch in "+-":
            if signed or digits > 0 or point >= 0:
                raise ParseError(ErrorKind.INVALID, text)
            signed = True
            negative = ch == "-"
        elif ch in "eE":
            tail = s[index + 1 :]
            if _EXPONENT.fullmatch(tail) is None:
                raise ParseError(ErrorKind.INVALID, text)
            exponent = int(tail)
            break
        elif ch == "_":
            continue
        else:
            raise ParseError(ErrorKind.INVALID, text)

    if digits == 0:
        raise ParseError(ErrorKind.INVALID, text)

    if point >= 0:
        exponent -= digits - point

    if exponent != 0 and not result.is_zero():
        if exponent > 0:
            result = result * ten.powi(exponent)
        else:
            if exponent < _MIN_EXP_STEP:
                step = exponent - _MIN_EXP_STEP
                result = result / ten.powi(-step)
                exponent -= step
            result = result / ten.powi(-exponent)

    return -result if negative else result


def parse_double(text: str) -> Double:
    return parse(Double, text)


def parse_quad(text: str) -> Quad:
    return parse(Quad, text)
