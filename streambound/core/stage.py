"""Stream stages: run function + usage annotation + category."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from streambound.core.multiplicity import Multiplicity
from streambound.core.usage import UsageFunction, UsageShape, as_usage, shape_of


# run(input, state) -> (state, output)
RunFn = Callable[[Any, Any], tuple[Any, Any]]


class Category(Enum):
    """Stage classification, ordered from least to most restrictive."""

    STATELESS = "stateless"
    STATEFUL = "stateful"
    EFFECTFUL = "effectful"

    @property
    def rank(self) -> int:
        return _CATEGORY_RANK[self]

    @staticmethod
    def join(a: Category, b: Category) -> Category:
        return a if a.rank >= b.rank else b


_CATEGORY_RANK = {
    Category.STATELESS: 0,
    Category.STATEFUL: 1,
    Category.EFFECTFUL: 2,
}


@dataclass(frozen=True)
class StreamStage:
    """One pipeline stage. Immutable; fusion builds new stages."""

    run: RunFn
    usage: UsageFunction
    category: Category
    operator_name: str
    max_usage: Multiplicity | None = None  # set by with_usage_validation

    @property
    def shape(self) -> UsageShape:
        return shape_of(self.usage)

    @property
    def bound(self) -> Multiplicity:
        """Declared upper bound over all inputs."""
        return self.shape.bound

    def __repr__(self) -> str:
        return f"StreamStage({self.operator_name!r}, {self.category.value}, {self.shape})"


def lift_stateless(
    fn: Callable[[Any], Any],
    usage: UsageFunction | Multiplicity | int = 1,
    operator_name: str = "map",
) -> StreamStage:
    """Stage that applies ``fn`` to each input and passes state through."""

    def _run(value: Any, state: Any) -> tuple[Any, Any]:
        return state, fn(value)

    return StreamStage(
        run=_run,
        usage=as_usage(usage),
        category=Category.STATELESS,
        operator_name=operator_name,
    )


def lift_stateful(
    step: Callable[[Any, Any], tuple[Any, Any]],
    usage: UsageFunction | Multiplicity | int = 1,
    operator_name: str = "scan",
) -> StreamStage:
    """Stage from ``step(input, state) -> (state, output)``."""
    return StreamStage(
        run=step,
        usage=as_usage(usage),
        category=Category.STATEFUL,
        operator_name=operator_name,
    )
