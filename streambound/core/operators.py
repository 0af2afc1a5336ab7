"""Reference operator constructors.

Small, honest stages for the builtin operator names. Each one declares the
usage the registry expects for its name, so chains built from them can be
handed straight to optimize_chain().
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from streambound.core.stage import Category, StreamStage, lift_stateful, lift_stateless
from streambound.core.usage import constant_usage, once_usage, unbounded_usage


def create_map_stream(fn: Callable[[Any], Any]) -> StreamStage:
    return lift_stateless(fn, once_usage(), operator_name="map")


def create_filter_stream(pred: Callable[[Any], bool]) -> StreamStage:
    """Pass values for which pred holds; filtered values come out as None."""

    def _keep(value: Any) -> Any:
        return value if pred(value) else None

    return lift_stateless(_keep, once_usage(), operator_name="filter")


def create_scan_stream(initial: Any, reducer: Callable[[Any, Any], Any]) -> StreamStage:
    """Running fold. The state is the accumulator; None starts from ``initial``."""

    def _step(value: Any, state: Any) -> tuple[Any, Any]:
        acc = initial if state is None else state
        acc = reducer(acc, value)
        return acc, acc

    return lift_stateful(_step, once_usage(), operator_name="scan")


def create_take_stream(n: int) -> StreamStage:
    """Pass the first n values, then None. The state counts values taken.

    Usage is Exact(n) for every input: the bound comes from the argument,
    never from the value flowing through.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n < 0:
        raise ValueError(f"take count must be a non-negative int, got {n!r}")

    def _step(value: Any, state: Any) -> tuple[Any, Any]:
        taken = 0 if state is None else state
        if taken >= n:
            return taken, None
        return taken + 1, value

    return lift_stateful(_step, constant_usage(n), operator_name="take")


def create_flat_map_stream(fn: Callable[[Any], Iterable[Any]]) -> StreamStage:
    """Expand each value into a list; fan-out has no static bound."""

    def _expand(value: Any) -> list[Any]:
        return list(fn(value))

    return lift_stateless(_expand, unbounded_usage(), operator_name="flatMap")


def create_tap_stream(effect: Callable[[Any], None]) -> StreamStage:
    """Run ``effect`` once per value and pass the value through."""

    def _run(value: Any, state: Any) -> tuple[Any, Any]:
        effect(value)
        return state, value

    return StreamStage(
        run=_run,
        usage=once_usage(),
        category=Category.EFFECTFUL,
        operator_name="tap",
    )
