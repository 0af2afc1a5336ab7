"""Operator metadata registry.

An OperatorRegistry is an immutable name -> OperatorMetadata table. It is
built once and passed to the safety checker and optimizer; nothing mutates
it afterwards. ``with_operators`` returns a new, extended registry instead.

Names produced by fusion ("map+filter") are resolved by folding the
metadata of their components. An unknown component makes the whole name
unknown, and unknown operators are never assumed safe to fuse.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType
from typing import Iterable, Iterator

from streambound.core.errors import MetadataError
from streambound.core.multiplicity import format_multiplicity
from streambound.core.stage import Category
from streambound.core.usage import UsageShape, compose_shapes

FUSED_SEPARATOR = "+"


@dataclass(frozen=True)
class OperatorMetadata:
    name: str
    category: Category
    shape: UsageShape

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "category": self.category.value,
            "shape": str(self.shape),
            "bound": format_multiplicity(self.shape.bound),
        }


def fuse_metadata(up: OperatorMetadata, down: OperatorMetadata) -> OperatorMetadata:
    """Metadata describing the fused stage up+down."""
    return OperatorMetadata(
        name=f"{up.name}{FUSED_SEPARATOR}{down.name}",
        category=Category.join(up.category, down.category),
        shape=compose_shapes(up.shape, down.shape),
    )


class OperatorRegistry:
    """Read-only operator table."""

    def __init__(self, records: Iterable[OperatorMetadata] = ()) -> None:
        table: dict[str, OperatorMetadata] = {}
        for record in records:
            _check_record(record)
            if record.name in table:
                raise MetadataError(f"Duplicate operator metadata for {record.name!r}")
            table[record.name] = record
        self._table = MappingProxyType(table)

    def get(self, name: str) -> OperatorMetadata | None:
        return self._table.get(name)

    def resolve(self, name: str) -> OperatorMetadata | None:
        """Look up a plain or fused ("a+b+c") operator name."""
        direct = self._table.get(name)
        if direct is not None or FUSED_SEPARATOR not in name:
            return direct

        resolved: OperatorMetadata | None = None
        for part in name.split(FUSED_SEPARATOR):
            meta = self._table.get(part)
            if meta is None:
                return None
            resolved = meta if resolved is None else fuse_metadata(resolved, meta)
        return resolved

    def by_category(self, category: Category) -> list[OperatorMetadata]:
        return [m for m in self._table.values() if m.category == category]

    def names(self) -> list[str]:
        return list(self._table.keys())

    def with_operators(self, *records: OperatorMetadata) -> OperatorRegistry:
        """New registry with ``records`` added or overriding existing entries."""
        merged = dict(self._table)
        for record in records:
            _check_record(record)
            merged[record.name] = record
        return OperatorRegistry(merged.values())

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def __len__(self) -> int:
        return len(self._table)

    def __iter__(self) -> Iterator[OperatorMetadata]:
        return iter(self._table.values())

    def __repr__(self) -> str:
        return f"OperatorRegistry({len(self)} operators)"


def _check_record(record: object) -> None:
    if not isinstance(record, OperatorMetadata):
        raise MetadataError(f"Expected OperatorMetadata, got {type(record).__name__}")
    if not isinstance(record.name, str) or not record.name or FUSED_SEPARATOR in record.name:
        raise MetadataError(f"Invalid operator name {record.name!r}")
    if not isinstance(record.category, Category):
        raise MetadataError(f"Operator {record.name!r} has invalid category {record.category!r}")
    if not isinstance(record.shape, UsageShape):
        raise MetadataError(f"Operator {record.name!r} has invalid usage shape {record.shape!r}")


# ---------------------------------------------------------------------------
# Builtin table
# ---------------------------------------------------------------------------

def _builtin_records() -> list[OperatorMetadata]:
    once = UsageShape.constant(1)
    fan_out = UsageShape.unbounded()
    rate_limited = UsageShape.conditional(1, 0)

    table = [
        # stateless 1:1
        ("map", Category.STATELESS, once),
        ("filter", Category.STATELESS, once),
        ("mapTo", Category.STATELESS, once),
        ("pluck", Category.STATELESS, once),
        # stateless, unbounded fan-out
        ("flatMap", Category.STATELESS, fan_out),
        ("chain", Category.STATELESS, fan_out),
        ("mergeMap", Category.STATELESS, fan_out),
        ("concatMap", Category.STATELESS, fan_out),
        ("switchMap", Category.STATELESS, fan_out),
        # stateful, one step per input
        ("scan", Category.STATEFUL, once),
        ("reduce", Category.STATEFUL, once),
        ("drop", Category.STATEFUL, once),
        ("skip", Category.STATEFUL, once),
        ("distinctUntilChanged", Category.STATEFUL, once),
        ("bufferCount", Category.STATEFUL, once),
        ("slidingWindow", Category.STATEFUL, once),
        # stateful, may suppress the step
        ("throttleTime", Category.STATEFUL, rate_limited),
        ("debounceTime", Category.STATEFUL, rate_limited),
        # bound comes from take(n)'s argument, not its name
        ("take", Category.STATEFUL, UsageShape.data_dependent()),
        # combinators over several sources
        ("merge", Category.STATEFUL, fan_out),
        ("zip", Category.STATEFUL, fan_out),
        ("concat", Category.STATEFUL, fan_out),
        ("switch", Category.STATEFUL, fan_out),
        ("combineLatest", Category.STATEFUL, fan_out),
        # observable side effects
        ("tap", Category.EFFECTFUL, once),
        ("log", Category.EFFECTFUL, once),
        ("metrics", Category.EFFECTFUL, once),
    ]
    return [OperatorMetadata(name=n, category=c, shape=s) for n, c, s in table]


@lru_cache(maxsize=1)
def default_registry() -> OperatorRegistry:
    """The builtin operator table, built once per process."""
    return OperatorRegistry(_builtin_records())


def get_operator_metadata(
    name: str,
    registry: OperatorRegistry | None = None,
) -> OperatorMetadata | None:
    return _or_default(registry).get(name)


def get_operators_by_category(
    category: Category,
    registry: OperatorRegistry | None = None,
) -> list[OperatorMetadata]:
    return _or_default(registry).by_category(category)


def _or_default(registry: OperatorRegistry | None) -> OperatorRegistry:
    return default_registry() if registry is None else registry
