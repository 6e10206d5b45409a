"""qd_fx._expansion
====================
Базовый класс многокомпонентных чисел и глобальный диспатчер операций.

Число хранится как кортеж `components` из k float64-компонент, сумма
которых (в точной арифметике) равна представляемому значению. Класс
неизменяем: любая операция создаёт новый экземпляр.

Сами алгоритмы (сложение, умножение, exp, ...) живут в отдельных
модулях и регистрируются декоратором `@implements(cls, name)` в
`HANDLED_FUNCTIONS`; методы и операторы класса лишь перенаправляют
вызов туда.
"""

from __future__ import annotations

import math
import numbers
from fractions import Fraction
from typing import Callable, Dict, Iterator, Optional, Tuple

from mpmath import mp

from ._renorm import renormalize
from ._tables import split_mpf

# Глобальный диспатчер: (класс, имя операции) -> реализация.
# Заполняется декоратором @implements в модулях с операциями.
HANDLED_FUNCTIONS: Dict[Tuple[type, str], Callable] = {}


def implements(cls: type, name: str):
    """Декоратор для регистрации реализации операции `name` для класса `cls`."""
    def decorator(func):
        HANDLED_FUNCTIONS[(cls, name)] = func
        return func
    return decorator


def _split_rational(value: Fraction, k: int) -> Tuple[float, ...]:
    """Точно раскладывает рациональное число на k компонент."""
    comps = []
    residue = value
    for _ in range(k):
        try:
            c_float = float(residue)
        except OverflowError:
            c_float = math.inf if residue > 0 else -math.inf
        comps.append(c_float)
        if not math.isfinite(c_float) or c_float == 0.0:
            break
        residue -= Fraction(c_float)
    return tuple(comps) + (0.0,) * (k - len(comps))


def _ldexp(c: float, n: int) -> float:
    try:
        return math.ldexp(c, n)
    except OverflowError:
        return math.copysign(math.inf, c)


class Expansion:
    """
    Неизменяемое число вида c0 + c1 + ... + c(k-1).

    Подклассы задают `precision_k` (число компонент), `DIGITS` (число
    значащих десятичных цифр) и `EPSILON`; константы (`ZERO`, `NAN`,
    `PI`, ...) присваиваются классу после его определения.
    """

    __slots__ = ("components",)

    precision_k: int = 0
    DIGITS: int = 0
    EPSILON: float = 0.0

    def __init__(self, *args):
        k = self.precision_k
        if not args:
            limbs: Tuple[float, ...] = (0.0,) * k
        elif len(args) == 1:
            limbs = self._convert(args[0])
        elif len(args) <= k:
            limbs = tuple(float(a) for a in args) + (0.0,) * (k - len(args))
        else:
            raise TypeError(f"{type(self).__name__} takes at most {k} limbs, got {len(args)}")
        object.__setattr__(self, "components", limbs)

    @classmethod
    def _convert(cls, value) -> Tuple[float, ...]:
        k = cls.precision_k
        if isinstance(value, Expansion):
            return renormalize(value.components, k)
        if isinstance(value, float):
            return (value,) + (0.0,) * (k - 1)
        if isinstance(value, int):
            return _split_rational(Fraction(value), k)
        if isinstance(value, str):
            from ._parse import parse
            return parse(cls, value).components
        if isinstance(value, mp.mpf):
            return split_mpf(value, k)
        if isinstance(value, Fraction):
            return _split_rational(value, k)
        if isinstance(value, numbers.Real):
            return (float(value),) + (0.0,) * (k - 1)
        raise TypeError(f"cannot convert {type(value).__name__} to {cls.__name__}")

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        return (type(self), self.components)

    # --- Конструкторы ---

    @classmethod
    def from_limbs(cls, limbs) -> "Expansion":
        """Создаёт число из произвольной («грязной») последовательности компонент."""
        return cls(*renormalize(list(limbs), cls.precision_k))

    @classmethod
    def from_mpmath(cls, value) -> "Expansion":
        """
        Создаёт число из mpmath.mpf, извлекая k старших float64-компонент.
        Всё, что глубже последней компоненты, округляется в неё.
        """
        return cls(*split_mpf(value, cls.precision_k))

    def to_mpmath(self):
        """Точная сумма компонент как mpmath.mpf (в точности текущего контекста mp)."""
        return mp.fsum(mp.mpf(c) for c in self.components)

    def as_fraction(self) -> Fraction:
        """Точное рациональное значение; для NaN/Inf поднимает ValueError/OverflowError."""
        return sum((Fraction(c) for c in self.components), Fraction(0))

    # --- Доступ к компонентам ---

    def __getitem__(self, index):
        return self.components[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self.components)

    def __len__(self) -> int:
        return self.precision_k

    # --- Свойства числа ---

    def is_zero(self) -> bool:
        return self.components[0] == 0.0

    def is_nan(self) -> bool:
        return any(math.isnan(c) for c in self.components)

    def is_infinite(self) -> bool:
        # Переполнение может возникнуть на любой стадии ренормализации
        return any(math.isinf(c) for c in self.components)

    def is_finite(self) -> bool:
        return all(math.isfinite(c) for c in self.components)

    def is_sign_negative(self) -> bool:
        return math.copysign(1.0, self.components[0]) < 0

    def is_sign_positive(self) -> bool:
        return not self.is_sign_negative()

    # --- Приведение типов ---

    def _coerce(self, other):
        """Приводит второй операнд к типу self или возвращает NotImplemented."""
        cls = type(self)
        if type(other) is cls:
            return other
        if isinstance(other, Expansion):
            if other.precision_k <= cls.precision_k:
                return cls(other)
            return NotImplemented
        if isinstance(other, (int, float, Fraction)) or isinstance(other, numbers.Real):
            return cls(other)
        return NotImplemented

    def _dispatch(self, name: str, *args):
        func = HANDLED_FUNCTIONS.get((type(self), name))
        if func is None:
            raise NotImplementedError(f"{type(self).__name__}: operation {name} is not implemented.")
        return func(self, *args)

    # --- Сравнение ---

    def _compare(self, other) -> Optional[int]:
        if self.is_nan() or other.is_nan():
            return None
        for a, b in zip(self.components, other.components):
            if a < b:
                return -1
            if a > b:
                return 1
        return 0

    def __eq__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) == 0

    def __ne__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) != 0

    def __lt__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) == -1

    def __le__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) in (-1, 0)

    def __gt__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) == 1

    def __ge__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._compare(other) in (1, 0)

    def __hash__(self):
        head = self.components[0]
        if not math.isfinite(head) or all(c == 0.0 for c in self.components[1:]):
            return hash(head)
        return hash(self.as_fraction())

    def __bool__(self) -> bool:
        return not self.is_zero()

    # --- Магические методы для операторов ---

    def __add__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._dispatch("add", other)

    def __radd__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._dispatch("add", self)

    def __sub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._dispatch("sub", other)

    def __rsub__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._dispatch("sub", self)

    def __mul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._dispatch("mul", other)

    def __rmul__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._dispatch("mul", self)

    def __truediv__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return self._dispatch("div", other)

    def __rtruediv__(self, other):
        other = self._coerce(other)
        if other is NotImplemented:
            return NotImplemented
        return other._dispatch("div", self)

    def __pow__(self, exponent):
        if isinstance(exponent, int) and not isinstance(exponent, bool):
            return self.powi(exponent)
        other = self._coerce(exponent)
        if other is NotImplemented:
            return NotImplemented
        return self.powf(other)

    def __rpow__(self, base):
        other = self._coerce(base)
        if other is NotImplemented:
            return NotImplemented
        return other.powf(self)

    def __neg__(self):
        return type(self)(*(-c for c in self.components))

    def __pos__(self):
        return self

    def __abs__(self):
        return self.abs()

    # --- Преобразования ---

    def __float__(self) -> float:
        if not self.is_finite():
            return math.nan if self.is_nan() else self.components[0] + sum(self.components[1:])
        return math.fsum(self.components)

    def __int__(self) -> int:
        if not self.is_finite():
            # Тот же ValueError/OverflowError, что и у float
            return int(float(self))
        return int(self.as_fraction())

    __trunc__ = __int__

    def __floor__(self) -> int:
        if not self.is_finite():
            return math.floor(float(self))
        return math.floor(self.as_fraction())

    def __ceil__(self) -> int:
        if not self.is_finite():
            return math.ceil(float(self))
        return math.ceil(self.as_fraction())

    def __repr__(self) -> str:
        limbs = ", ".join(repr(c) for c in self.components)
        return f"{type(self).__name__}({limbs})"

    def __str__(self) -> str:
        from ._display import to_str
        return to_str(self)

    def __format__(self, format_spec: str) -> str:
        from ._display import format_expansion
        return format_expansion(self, format_spec)

    # --- Простые операции без отдельной реализации ---

    def abs(self):
        return -self if self.is_sign_negative() else self

    def ldexp(self, n: int):
        """Умножает число на 2**n (покомпонентно, без потери точности)."""
        return type(self)(*(_ldexp(c, n) for c in self.components))

    def mul_pwr2(self, factor: float):
        """Умножает число на степень двойки `factor` (покомпонентно)."""
        return type(self)(*(c * factor for c in self.components))

    def recip(self):
        return type(self).ONE / self

    def floor(self):
        """Наибольшее целое, не превосходящее число (тем же типом)."""
        return self._round_with(math.floor)

    def ceil(self):
        """Наименьшее целое, не меньшее числа (тем же типом)."""
        return self._round_with(math.ceil)

    def _round_with(self, op):
        if not self.is_finite():
            return self
        cls = type(self)
        limbs = [0.0] * cls.precision_k
        for i, c in enumerate(self.components):
            limbs[i] = float(op(c))
            if limbs[i] != c:
                break
        return cls(*renormalize(limbs, cls.precision_k))

    # --- Операции, реализованные в отдельных модулях ---

    def sqr(self):
        return self._dispatch("sqr")

    def powi(self, n: int):
        if not isinstance(n, int):
            raise TypeError(f"powi expects an int exponent, got {type(n).__name__}")
        return self._dispatch("powi", n)

    def powf(self, n):
        other = self._coerce(n)
        if other is NotImplemented:
            raise TypeError(f"powf expects a real exponent, got {type(n).__name__}")
        return self._dispatch("powf", other)

    def sqrt(self):
        return self._dispatch("sqrt")

    def cbrt(self):
        return self.nroot(3)

    def nroot(self, n: int):
        if not isinstance(n, int):
            raise TypeError(f"nroot expects an int degree, got {type(n).__name__}")
        return self._dispatch("nroot", n)

    def exp(self):
        return self._dispatch("exp")

    def ln(self):
        return self._dispatch("ln")

    def log10(self):
        return self._dispatch("log10")

    def log2(self):
        return self._dispatch("log2")

    def log(self, base):
        other = self._coerce(base)
        if other is NotImplemented:
            raise TypeError(f"log expects a real base, got {type(base).__name__}")
        return self._dispatch("log", other)

    def sin_cos(self):
        return self._dispatch("sin_cos")

    def sin(self):
        return self.sin_cos()[0]

    def cos(self):
        return self.sin_cos()[1]

    def atan2(self, other):
        """Двухаргументный арктангенс: self — это y, other — x."""
        x = self._coerce(other)
        if x is NotImplemented:
            raise TypeError(f"atan2 expects a real argument, got {type(other).__name__}")
        return self._dispatch("atan2", x)


# --- Общие таблицы специальных значений для бинарных операций ---


def _signed(cls, negative: bool, zero: bool):
    if zero:
        return cls.NEG_ZERO if negative else cls.ZERO
    return cls.NEG_INFINITY if negative else cls.INFINITY


def pre_add(a: Expansion, b: Expansion) -> Optional[Expansion]:
    """Возвращает готовый результат a + b для NaN/Inf/нулей или None."""
    cls = type(a)
    if a.is_nan() or b.is_nan():
        return cls.NAN
    if a.is_infinite():
        if b.is_infinite() and a.is_sign_negative() != b.is_sign_negative():
            return cls.NAN
        return _signed(cls, a.is_sign_negative(), zero=False)
    if b.is_infinite():
        return _signed(cls, b.is_sign_negative(), zero=False)
    if a.is_zero():
        if b.is_zero():
            return cls(a[0] + b[0])
        return b
    if b.is_zero():
        return a
    return None


def pre_mul(a: Expansion, b: Expansion) -> Optional[Expansion]:
    """Возвращает готовый результат a * b для NaN/Inf/нулей или None."""
    cls = type(a)
    if a.is_nan() or b.is_nan():
        return cls.NAN
    negative = a.is_sign_negative() != b.is_sign_negative()
    if a.is_zero():
        if b.is_infinite():
            return cls.NAN  # 0·∞
        return _signed(cls, negative, zero=True)
    if a.is_infinite():
        if b.is_zero():
            return cls.NAN
        return _signed(cls, negative, zero=False)
    if b.is_infinite():
        return _signed(cls, negative, zero=False)
    if b.is_zero():
        return _signed(cls, negative, zero=True)
    return None


def pre_div(a: Expansion, b: Expansion) -> Optional[Expansion]:
    """Возвращает готовый результат a / b для NaN/Inf/нулей или None."""
    cls = type(a)
    if a.is_nan() or b.is_nan():
        return cls.NAN
    negative = a.is_sign_negative() != b.is_sign_negative()
    if a.is_zero():
        if b.is_zero():
            return cls.NAN  # 0/0
        return _signed(cls, negative, zero=True)
    if a.is_infinite():
        if b.is_infinite():
            return cls.NAN  # ∞/∞
        return _signed(cls, negative, zero=False)
    if b.is_zero():
        return _signed(cls, negative, zero=False)
    if b.is_infinite():
        return _signed(cls, negative, zero=True)
    return None


def _max_limbs(k: int) -> Tuple[float, ...]:
    # Каждая следующая компонента — наибольший float строго меньше ulp/2 предыдущей
    limbs = [1.7976931348623157e308]
    for _ in range(k - 1):
        half_ulp = math.ulp(limbs[-1]) / 2
        limbs.append(half_ulp - math.ulp(half_ulp) / 2)
    return tuple(limbs)


def install_constants(cls, named: Dict[str, Tuple[float, ...]]) -> None:
    """Присваивает классу специальные значения и именованные константы."""
    k = cls.precision_k
    cls.ZERO = cls(0.0)
    cls.NEG_ZERO = cls(-0.0)
    cls.ONE = cls(1.0)
    cls.NAN = cls(math.nan)
    cls.INFINITY = cls(math.inf)
    cls.NEG_INFINITY = cls(-math.inf)
    cls.MAX = cls(*_max_limbs(k))
    cls.MIN = -cls.MAX
    cls.MIN_POSITIVE = cls(math.ldexp(1.0, -1022 + 53 * (k - 1)))
    for name, limbs in named.items():
        setattr(cls, name, cls(*limbs))
