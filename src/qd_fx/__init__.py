"""qd-fx — числа двойной-двойной и четверной-двойной точности.

`Double` хранит значение как неоценённую сумму двух float64 (~31 цифра),
`Quad` — четырёх (~62 цифры). Вся арифметика построена на EFT-примитивах
(`two_sum`, `two_prod`) и ренормализации, без bignum.
"""

from ._core import quick_two_sum, two_diff, two_prod, two_sqr, two_sum  # noqa: F401
from ._renorm import renormalize  # noqa: F401
from ._errors import ConvergenceError, ErrorKind, ParseError  # noqa: F401
from ._expansion import Expansion  # noqa: F401
from ._double import Double  # noqa: F401
from ._quad import Quad  # noqa: F401

# Импортируем модули операций ради побочных эффектов (рег. HANDLED_FUNCTIONS)
from . import _double_ops as _double_ops  # noqa: F401
from . import _quad_ops as _quad_ops  # noqa: F401
from . import _elementary as _elementary  # noqa: F401
from . import _transcendental as _transcendental  # noqa: F401

from ._display import to_digits  # noqa: F401
from ._parse import parse_double, parse_quad  # noqa: F401

__all__ = [
    "two_sum",
    "quick_two_sum",
    "two_diff",
    "two_prod",
    "two_sqr",
    "renormalize",
    "Expansion",
    "Double",
    "Quad",
    "ErrorKind",
    "ParseError",
    "ConvergenceError",
    "to_digits",
    "parse_double",
    "parse_quad",
]
