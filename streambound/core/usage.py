"""Usage annotation combinators.

A usage function maps one input to the Multiplicity of the stage's effect
for that input. It must be pure and must never under-declare: the runtime
validator can only catch over-bound usage, not dishonest annotations.

Combinators return ``Usage`` objects, which carry a declared ``UsageShape``
next to the function. The shape is what fusion reasons about, because the
value a downstream stage will see is not known when the bound is computed.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from streambound.core.multiplicity import (
    Exact,
    Multiplicity,
    Unbounded,
    UNBOUNDED,
    ZERO,
    mul,
)


UsageFunction = Callable[[Any], Multiplicity]


# ---------------------------------------------------------------------------
# Shapes
# ---------------------------------------------------------------------------

class ShapeKind(Enum):
    CONSTANT = "constant"
    CONDITIONAL = "conditional"
    DATA_DEPENDENT = "data_dependent"
    UNBOUNDED = "unbounded"


_ARITY = {
    ShapeKind.CONSTANT: 1,
    ShapeKind.CONDITIONAL: 2,
    ShapeKind.DATA_DEPENDENT: 0,
    ShapeKind.UNBOUNDED: 0,
}


@dataclass(frozen=True)
class UsageShape:
    """Statically declared form of a usage function."""

    kind: ShapeKind
    values: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if len(self.values) != _ARITY[self.kind]:
            raise ValueError(
                f"{self.kind.value} shape takes {_ARITY[self.kind]} value(s), got {len(self.values)}"
            )
        for v in self.values:
            Exact(v)  # validates

    @classmethod
    def constant(cls, k: int) -> UsageShape:
        return cls(kind=ShapeKind.CONSTANT, values=(k,))

    @classmethod
    def conditional(cls, when_true: int, when_false: int) -> UsageShape:
        return cls(kind=ShapeKind.CONDITIONAL, values=(when_true, when_false))

    @classmethod
    def data_dependent(cls) -> UsageShape:
        return cls(kind=ShapeKind.DATA_DEPENDENT)

    @classmethod
    def unbounded(cls) -> UsageShape:
        return cls(kind=ShapeKind.UNBOUNDED)

    @property
    def is_constant(self) -> bool:
        return self.kind == ShapeKind.CONSTANT

    @property
    def bound(self) -> Multiplicity:
        """Upper bound over all inputs."""
        if self.kind in (ShapeKind.CONSTANT, ShapeKind.CONDITIONAL):
            return Exact(max(self.values))
        return UNBOUNDED

    def __str__(self) -> str:
        if self.values:
            return f"{self.kind.value}({', '.join(str(v) for v in self.values)})"
        return self.kind.value


@dataclass(frozen=True)
class Usage:
    """A usage function paired with its declared shape."""

    fn: UsageFunction
    shape: UsageShape

    def __call__(self, value: Any) -> Multiplicity:
        return self.fn(value)


# ---------------------------------------------------------------------------
# Combinators
# ---------------------------------------------------------------------------

def constant_usage(k: int) -> Usage:
    """Fixed fan-out: Exact(k) for every input."""
    m = Exact(k)
    return Usage(fn=lambda _value: m, shape=UsageShape.constant(k))


def once_usage() -> Usage:
    """Strict 1:1 invocation."""
    return constant_usage(1)


def never_usage() -> Usage:
    return constant_usage(0)


def unbounded_usage() -> Usage:
    """Data-dependent fan-out with no static bound (flatMap and friends)."""
    return Usage(fn=lambda _value: UNBOUNDED, shape=UsageShape.unbounded())


def conditional_usage(
    pred: Callable[[Any], bool],
    when_true: int,
    when_false: int,
) -> Usage:
    """Exact(when_true) if pred(input) else Exact(when_false). pred must be pure."""
    t, f = Exact(when_true), Exact(when_false)

    def _usage(value: Any) -> Multiplicity:
        return t if pred(value) else f

    return Usage(fn=_usage, shape=UsageShape.conditional(when_true, when_false))


def dependent_usage(f: Callable[[Any], object]) -> Usage:
    """Usage computed from the input's structure, e.g. an element count.

    ``f`` may return an int, a Multiplicity, or None. Anything that is not a
    non-negative count becomes Unbounded rather than a guess.
    """

    def _usage(value: Any) -> Multiplicity:
        return _coerce(f(value))

    return Usage(fn=_usage, shape=UsageShape.data_dependent())


def _coerce(result: object) -> Multiplicity:
    if isinstance(result, (Exact, Unbounded)):
        return result
    if isinstance(result, int) and not isinstance(result, bool) and result >= 0:
        return Exact(result)
    return UNBOUNDED


def as_usage(value: object) -> UsageFunction:
    """Accept a usage function, an int, or a Multiplicity; return a usage function."""
    if isinstance(value, Unbounded):
        return unbounded_usage()
    if isinstance(value, Exact):
        return constant_usage(value.n)
    if isinstance(value, int) and not isinstance(value, bool):
        return constant_usage(value)
    if callable(value):
        return value
    raise TypeError(f"Cannot build a usage function from {type(value).__name__}")


def usage_for_shape(shape: UsageShape) -> Usage:
    """A usage function that always reports the shape's upper bound."""
    bound = shape.bound
    return Usage(fn=lambda _value: bound, shape=shape)


# ---------------------------------------------------------------------------
# Shape queries
# ---------------------------------------------------------------------------

def shape_of(usage: UsageFunction) -> UsageShape:
    """Declared shape; undeclared callables are data-dependent."""
    if isinstance(usage, Usage):
        return usage.shape
    return UsageShape.data_dependent()


def declared_bound(usage: UsageFunction) -> Multiplicity:
    return shape_of(usage).bound


def composition_factor(shape: UsageShape) -> Multiplicity:
    """Per-upstream-run multiplier a downstream shape contributes to a;b.

    Only a constant shape gives a finite factor. Conditional and
    data-dependent shapes depend on a value that is not known when the
    composed usage is computed, so they count as Unbounded.
    """
    if shape.is_constant:
        return Exact(shape.values[0])
    return UNBOUNDED


def compose_shapes(a: UsageShape, b: UsageShape) -> UsageShape:
    """Shape of the sequential composition a;b."""
    b_factor = composition_factor(b)

    if a.kind == ShapeKind.CONSTANT:
        return _shape_from_bound(mul(Exact(a.values[0]), b_factor))

    if a.kind == ShapeKind.CONDITIONAL:
        on_true = mul(Exact(a.values[0]), b_factor)
        on_false = mul(Exact(a.values[1]), b_factor)
        if isinstance(on_true, Exact) and isinstance(on_false, Exact):
            if on_true == on_false:
                return UsageShape.constant(on_true.n)
            return UsageShape.conditional(on_true.n, on_false.n)
        if isinstance(on_true, Unbounded) and isinstance(on_false, Unbounded):
            return UsageShape.unbounded()
        return UsageShape.data_dependent()

    if b_factor == ZERO:
        return UsageShape.constant(0)
    return a


def _shape_from_bound(m: Multiplicity) -> UsageShape:
    if isinstance(m, Exact):
        return UsageShape.constant(m.n)
    return UsageShape.unbounded()

