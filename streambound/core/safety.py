"""Fusion safety checker.

Decides from operator metadata alone whether two adjacent stages may be
merged without changing observable invocation counts. Rules, first match
wins:

  1. missing metadata on either side              -> refuse
  2. upstream shape unbounded                     -> refuse
  3. upstream stateless with constant(1)          -> fuse
  4. upstream constant(k), downstream stateless   -> fuse
  5. both stateful with finite bounds             -> fuse, bound = up * down
  6. anything else                                -> refuse
"""

from __future__ import annotations

from dataclasses import dataclass

from streambound.core.compose import compose_bound
from streambound.core.multiplicity import (
    Multiplicity,
    UNBOUNDED,
    is_finite,
    leq,
    mul,
)
from streambound.core.registry import OperatorMetadata, OperatorRegistry, default_registry
from streambound.core.stage import Category, StreamStage
from streambound.core.usage import ShapeKind, UsageShape


@dataclass(frozen=True)
class FusionCheck:
    allowed: bool
    rule: str
    fused_bound: Multiplicity
    reason: str | None = None


_ONCE = UsageShape.constant(1)


def check_fusion(
    up: OperatorMetadata | None,
    down: OperatorMetadata | None,
    *,
    up_name: str | None = None,
    down_name: str | None = None,
) -> FusionCheck:
    """Apply the rule ladder to two metadata records (None = unknown operator)."""
    if up is None or down is None:
        missing = [
            repr(name or "?")
            for name, meta in ((up_name, up), (down_name, down))
            if meta is None
        ]
        return FusionCheck(
            allowed=False,
            rule="missing-metadata",
            fused_bound=UNBOUNDED,
            reason=f"missing operator metadata for {', '.join(missing)}",
        )

    fused_bound = mul(up.shape.bound, down.shape.bound)

    if up.shape.kind == ShapeKind.UNBOUNDED:
        return FusionCheck(
            allowed=False,
            rule="unbounded-upstream",
            fused_bound=fused_bound,
            reason=f"upstream {up.name!r} has unbounded fan-out",
        )

    if up.category == Category.STATELESS and up.shape == _ONCE:
        return FusionCheck(allowed=True, rule="stateless-identity", fused_bound=fused_bound)

    if up.shape.is_constant and down.category == Category.STATELESS:
        return FusionCheck(allowed=True, rule="constant-into-stateless", fused_bound=fused_bound)

    if (
        up.category == Category.STATEFUL
        and down.category == Category.STATEFUL
        and is_finite(up.shape.bound)
        and is_finite(down.shape.bound)
    ):
        return FusionCheck(allowed=True, rule="stateful-finite", fused_bound=fused_bound)

    return FusionCheck(
        allowed=False,
        rule="no-rule",
        fused_bound=fused_bound,
        reason=(
            f"no fusion rule admits {up.category.value} {up.name!r} [{up.shape}] "
            f"-> {down.category.value} {down.name!r} [{down.shape}]"
        ),
    )


def explain_fusion(
    up: str,
    down: str,
    registry: OperatorRegistry | None = None,
) -> FusionCheck:
    reg = default_registry() if registry is None else registry
    return check_fusion(reg.resolve(up), reg.resolve(down), up_name=up, down_name=down)


def can_fuse_operators(up: str, down: str, registry: OperatorRegistry | None = None) -> bool:
    return explain_fusion(up, down, registry).allowed


def would_increase_multiplicity(
    up: str,
    down: str,
    registry: OperatorRegistry | None = None,
) -> bool:
    """True if the naive fused bound up*down exceeds downstream's own bound.

    This is a diagnostic signal, separate from the can_fuse veto. Unknown
    operators count as unbounded.
    """
    reg = default_registry() if registry is None else registry
    up_meta, down_meta = reg.resolve(up), reg.resolve(down)
    up_bound = up_meta.shape.bound if up_meta is not None else UNBOUNDED
    down_bound = down_meta.shape.bound if down_meta is not None else UNBOUNDED
    return not leq(mul(up_bound, down_bound), down_bound)


def calculate_fused_bound(a: StreamStage, b: StreamStage) -> Multiplicity:
    """Declared bound of a;b, whether or not the pair is fusible."""
    return compose_bound(a.bound, b.shape)
