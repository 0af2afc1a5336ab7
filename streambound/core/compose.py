"""Stage composition with usage bounds.

Sequential (a;b):
  state = (state_a, state_b), threaded independently
  usage(i) = a.usage(i) * c      if b is constant(c)
           = Unbounded            otherwise, unless a.usage(i) is 0

b's *declared* shape is used, not b.usage(output_of_a): the output of a is
not known when the usage is computed.

Parallel (a|b) over paired inputs:  usage = max(a.usage(x), b.usage(y))
Fan-out (a&b) on a shared input:     usage = a.usage(i) + b.usage(i)
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from streambound.core.multiplicity import (
    Multiplicity,
    add,
    maximum,
    mul,
    product,
)
from streambound.core.stage import Category, StreamStage
from streambound.core.usage import ShapeKind, Usage, UsageShape, compose_shapes, composition_factor


def _split(state: Any) -> tuple[Any, Any]:
    # None stands for "both sides fresh"
    if state is None:
        return None, None
    return state


def compose_bound(upstream: Multiplicity, downstream: UsageShape) -> Multiplicity:
    """Static bound of upstream;downstream."""
    return mul(upstream, composition_factor(downstream))


def sequence_bound(bounds: Iterable[Multiplicity]) -> Multiplicity:
    """Bound of a whole chain of sequentially composed segments."""
    return product(bounds)


def compose_usage(a: StreamStage, b: StreamStage) -> StreamStage:
    """Sequential composition a;b as a single stage named "a+b"."""
    b_factor = composition_factor(b.shape)

    def _usage(value: Any) -> Multiplicity:
        return mul(a.usage(value), b_factor)

    def _run(value: Any, state: Any) -> tuple[Any, Any]:
        state_a, state_b = _split(state)
        state_a, out_a = a.run(value, state_a)
        state_b, out_b = b.run(out_a, state_b)
        return (state_a, state_b), out_b

    return StreamStage(
        run=_run,
        usage=Usage(fn=_usage, shape=compose_shapes(a.shape, b.shape)),
        category=Category.join(a.category, b.category),
        operator_name=f"{a.operator_name}+{b.operator_name}",
    )


def parallel_usage(a: StreamStage, b: StreamStage) -> StreamStage:
    """Run a and b side by side on a paired input (x, y)."""

    def _usage(value: Any) -> Multiplicity:
        x, y = value
        return maximum(a.usage(x), b.usage(y))

    def _run(value: Any, state: Any) -> tuple[Any, Any]:
        x, y = value
        state_a, state_b = _split(state)
        state_a, out_a = a.run(x, state_a)
        state_b, out_b = b.run(y, state_b)
        return (state_a, state_b), (out_a, out_b)

    return StreamStage(
        run=_run,
        usage=Usage(fn=_usage, shape=_pair_shape(a.shape, b.shape, max)),
        category=Category.join(a.category, b.category),
        operator_name=f"{a.operator_name}|{b.operator_name}",
    )


def fan_out_usage(a: StreamStage, b: StreamStage) -> StreamStage:
    """Feed the same input to a and b; usages add up."""

    def _usage(value: Any) -> Multiplicity:
        return add(a.usage(value), b.usage(value))

    def _run(value: Any, state: Any) -> tuple[Any, Any]:
        state_a, state_b = _split(state)
        state_a, out_a = a.run(value, state_a)
        state_b, out_b = b.run(value, state_b)
        return (state_a, state_b), (out_a, out_b)

    return StreamStage(
        run=_run,
        usage=Usage(fn=_usage, shape=_pair_shape(a.shape, b.shape, lambda x, y: x + y)),
        category=Category.join(a.category, b.category),
        operator_name=f"{a.operator_name}&{b.operator_name}",
    )


def _pair_shape(
    a: UsageShape,
    b: UsageShape,
    combine: Callable[[int, int], int],
) -> UsageShape:
    if a.kind == ShapeKind.UNBOUNDED or b.kind == ShapeKind.UNBOUNDED:
        return UsageShape.unbounded()
    if a.is_constant and b.is_constant:
        return UsageShape.constant(combine(a.values[0], b.values[0]))
    return UsageShape.data_dependent()
