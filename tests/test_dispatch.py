"""Тесты для глобального диспатчера операций HANDLED_FUNCTIONS."""

import pytest

from qd_fx import Double, Expansion, Quad
from qd_fx._expansion import HANDLED_FUNCTIONS, implements


class Triple(Expansion):
    """Тип без единой зарегистрированной операции."""

    __slots__ = ()
    precision_k = 3
    DIGITS = 47
    EPSILON = 2.0 ** -157


REQUIRED_OPS = [
    "add", "sub", "mul", "div", "sqr", "powi", "powf", "sqrt", "nroot",
    "exp", "ln", "log10", "log2", "log", "sin_cos", "atan2",
]


@pytest.mark.parametrize("cls", [Double, Quad])
def test_dispatch_registration(cls):
    """Все операции зарегистрированы для обоих типов."""
    for name in REQUIRED_OPS:
        assert (cls, name) in HANDLED_FUNCTIONS, f"Operation {name} not registered for {cls.__name__}"


def test_dispatch_shared_implementation():
    """Обобщённые функции обслуживают оба типа одной реализацией."""
    assert HANDLED_FUNCTIONS[(Double, "exp")] is HANDLED_FUNCTIONS[(Quad, "exp")]
    assert HANDLED_FUNCTIONS[(Double, "add")] is not HANDLED_FUNCTIONS[(Quad, "add")]


@pytest.mark.parametrize(
    "call, name",
    [
        (lambda x: x + x, "add"),
        (lambda x: x * 2, "mul"),
        (lambda x: 1 / x, "div"),
        (lambda x: x.sqrt(), "sqrt"),
        (lambda x: x.sin(), "sin_cos"),
        (lambda x: x.powi(3), "powi"),
    ],
)
def test_dispatch_unsupported_operation(call, name):
    """Незарегистрированные операции вызывают NotImplementedError."""
    with pytest.raises(NotImplementedError, match=f"Triple: operation {name} is not implemented"):
        call(Triple(1.5))


def test_dispatch_promotes_to_unimplemented_type():
    """Double + Triple приводится к Triple и упирается в отсутствующую операцию."""
    with pytest.raises(NotImplementedError, match="Triple: operation add is not implemented"):
        Double(1.0) + Triple(2.0)


def test_dispatch_register_new_operation(monkeypatch):
    monkeypatch.setitem(HANDLED_FUNCTIONS, (Triple, "add"), None)

    def triple_add(a, b):
        return Triple.from_limbs(a.components + b.components)

    assert implements(Triple, "add")(triple_add) is triple_add
    assert HANDLED_FUNCTIONS[(Triple, "add")] is triple_add

    c = Triple(1.0) + Triple(2.0 ** -60)
    assert isinstance(c, Triple)
    assert c.components == (1.0, 2.0 ** -60, 0.0)


def test_dispatch_mixed_types():
    """Double с Quad в любом порядке даёт Quad."""
    a = Double.PI
    b = Quad(2.0)
    c1 = a * b
    c2 = b * a
    assert type(c1) is Quad and type(c2) is Quad
    assert c1 == c2


def test_dispatch_scalar_operations():
    a = Quad(1.5)
    assert type(a + 3) is Quad
    assert type(3.0 + a) is Quad
    assert a + 3 == 3 + a
