"""qd_fx._display
==================
Десятичное представление чисел: извлечение цифр, `str()` и `format()`.

`to_digits(value, n)` возвращает n значащих цифр модуля числа и
десятичный порядок: value ≈ d0.d1d2… × 10^exponent. Цифры извлекаются
арифметикой самого типа (масштабирование в [1, 10), затем n + 1 раз
«взять целую часть, вычесть, умножить на 10»), поэтому промежуточные
цифры могут выходить за 0..9 — младшие компоненты бывают отрицательными.
"""

from __future__ import annotations

import math
import re
from typing import List, Tuple

__all__ = ["to_digits", "to_str", "format_expansion"]

# [[fill]align][sign][0][width][.precision][type]
_FORMAT_SPEC = re.compile(
    r"(?:(?P<fill>.)?(?P<align>[<>=^]))?"
    r"(?P<sign>[-+ ])?"
    r"(?P<zero>0)?"
    r"(?P<width>\d+)?"
    r"(?:\.(?P<precision>\d+))?"
    r"(?P<type>[eEfF]?)\Z",
    re.DOTALL,
)

# Точность по умолчанию для типов 'e' и 'f', как у float
_DEFAULT_FORMAT_PRECISION = 6


def _scale(value):
    """Приводит |value| к [1, 10); возвращает (масштабированное число, порядок)."""
    cls = type(value)
    ten = cls(10.0)
    r = value.abs()
    exponent = math.floor(math.log10(abs(r[0])))

    # 10^e вне диапазона float при |e| > 308, поэтому масштабируем в два шага
    if exponent < -300:
        r = r * ten.powi(300)
        r = r / ten.powi(exponent + 300)
    elif exponent > 300:
        r = r.ldexp(-53)
        r = r / ten.powi(exponent)
        r = r.ldexp(53)
    else:
        r = r / ten.powi(exponent)

    # Оценка по старшей компоненте может ошибаться на единицу
    if r >= ten:
        r = r / ten
        exponent += 1
    elif r < cls.ONE:
        r = r * ten
        exponent -= 1
    return r, exponent


def _correct_range(digits: List[int]) -> None:
    """Переносит займы и переполнения так, чтобы все цифры, кроме первой, были в 0..9."""
    for i in range(len(digits) - 1, 0, -1):
        if digits[i] < 0:
            digits[i - 1] -= 1
            digits[i] += 10
        elif digits[i] > 9:
            digits[i - 1] += 1
            digits[i] -= 10


def to_digits(value, precision: int) -> Tuple[List[int], int]:
    """
    `precision` значащих цифр |value| и десятичный порядок первой из них.
    Знак игнорируется; для нуля возвращает нули и порядок 0.
    """
    if value.is_zero():
        return [0] * precision, 0

    r, exponent = _scale(value)

    # Лишняя цифра — для округления
    digits = []
    for _ in range(precision + 1):
        digit = int(r[0])
        r = (r - digit) * 10
        digits.append(digit)

    _correct_range(digits)
    if digits[0] > 9:
        # r[0] округлилось до 10.0
        digits = [1, digits[0] - 10] + digits[1:-1]
        exponent += 1
    elif digits[0] == 0:
        digits = digits[1:] + [0]
        exponent -= 1

    last = digits.pop()
    if last >= 5:
        i = len(digits) - 1
        digits[i] += 1
        while i > 0 and digits[i] > 9:
            digits[i] -= 10
            i -= 1
            digits[i] += 1
        if digits[0] > 9:
            digits = [1] + [0] * (precision - 1)
            exponent += 1

    return digits, exponent


# --- str() ----------------------------------------------------------------


def _positional(digits: List[int], exponent: int, frac_digits: int = -1) -> str:
    """Раскладывает цифры вокруг точки; frac_digits < 0 — отбросить хвостовые нули."""
    text = "".join(str(d) for d in digits)
    if exponent >= 0:
        text = text.ljust(exponent + 1, "0")
        int_part, frac = text[: exponent + 1], text[exponent + 1 :]
    else:
        int_part, frac = "0", "0" * (-exponent - 1) + text

    if frac_digits < 0:
        frac = frac.rstrip("0")
    else:
        frac = frac[:frac_digits].ljust(frac_digits, "0")
    return int_part + ("." + frac if frac else "")


def _scientific(digits: List[int], exponent: int, marker: str = "e", strip: bool = True) -> str:
    mantissa = "".join(str(d) for d in digits[1:])
    if strip:
        mantissa = mantissa.rstrip("0")
    head = str(digits[0]) + ("." + mantissa if mantissa else "")
    return f"{head}{marker}{exponent:+03d}"


def _special(value, upper: bool = False):
    if value.is_nan():
        text = "nan"
    elif value.is_infinite():
        text = "inf"
    else:
        return None
    return text.upper() if upper else text


def _short_body(value) -> str:
    """Модуль числа во всю точность типа, без знака."""
    cls = type(value)
    if value.is_zero():
        return "0"
    digits, exponent = to_digits(value, cls.DIGITS)
    if -5 <= exponent < cls.DIGITS:
        return _positional(digits, exponent)
    return _scientific(digits, exponent)


def to_str(value) -> str:
    """`str(x)`: все значащие цифры типа, позиционно или в научной записи."""
    special = _special(value)
    if special is not None:
        return "-inf" if special == "inf" and value.is_sign_negative() else special
    sign = "-" if value.is_sign_negative() else ""
    return sign + _short_body(value)


# --- format() -------------------------------------------------------------


def _fixed_body(value, precision: int) -> str:
    """Модуль числа ровно с `precision` знаками после точки."""
    if value.is_zero():
        return _positional([0], 0, precision)

    r, exponent = _scale(value)
    n = exponent + 1 + precision
    if n < 0 or (n == 0 and r[0] < 5.0):
        return _positional([0], 0, precision)
    if n == 0:
        # Округление вверх до единицы в последнем разряде
        return _positional([1], -precision, precision)

    digits, rounded = to_digits(value, n)
    if rounded > exponent:
        digits.append(0)
    return _positional(digits, rounded, precision)


def _exp_body(value, precision: int, upper: bool) -> str:
    marker = "E" if upper else "e"
    if value.is_zero():
        return _scientific([0] * (precision + 1), 0, marker, strip=False)
    digits, exponent = to_digits(value, precision + 1)
    return _scientific(digits, exponent, marker, strip=False)


def format_expansion(value, format_spec: str) -> str:
    """Реализация `format(x, spec)` для подмножества мини-языка форматирования."""
    if not format_spec:
        return to_str(value)

    match = _FORMAT_SPEC.match(format_spec)
    if match is None:
        raise ValueError(f"Invalid format specifier {format_spec!r} for object of type {type(value).__name__!r}")

    kind = match["type"]
    precision = int(match["precision"]) if match["precision"] is not None else None
    upper = kind in ("E", "F")

    special = _special(value, upper)
    if special is not None:
        body = special
    elif kind in ("e", "E"):
        body = _exp_body(value, _DEFAULT_FORMAT_PRECISION if precision is None else precision, upper)
    elif kind in ("f", "F") or precision is not None:
        body = _fixed_body(value, _DEFAULT_FORMAT_PRECISION if precision is None else precision)
    else:
        body = _short_body(value)

    negative = value.is_sign_negative() and not value.is_nan()
    if negative:
        sign = "-"
    elif match["sign"] in ("+", " "):
        sign = match["sign"]
    else:
        sign = ""

    fill = match["fill"] or " "
    align = match["align"]
    if align is None:
        if match["zero"]:
            fill, align = "0", "="
        else:
            align = ">"
    width = int(match["width"]) if match["width"] is not None else 0

    padding = max(width - len(sign) - len(body), 0)
    if align == "=":
        return sign + fill * padding + body
    text = sign + body
    if align == "<":
        return text + fill * padding
    if align == "^":
        left = padding // 2
        return fill * left + text + fill * (padding - left)
    return fill * padding + text
