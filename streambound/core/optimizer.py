"""Fusion optimizer: greedy stage fusion, repeated to a fixed point.

Pipeline: build stages -> optimize_chain() -> drive stage.run() externally

Each pass walks the chain left to right with one accumulator:
  - fusible with the next stage  -> accumulator becomes the fused stage
  - not fusible                  -> seal the accumulator, restart at next
The last accumulator is sealed at the end. Passes repeat until one fuses
nothing, so the result is a fixed point of the pass. There is no
backtracking, so some fusible groupings are missed; unfused stages still
run correctly in their original order.

The input chain is never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

from streambound.core import diagnostics
from streambound.core.compose import compose_usage, sequence_bound
from streambound.core.diagnostics import FusionStats, log_fusion_stats
from streambound.core.multiplicity import Multiplicity, ONE, format_multiplicity
from streambound.core.registry import FUSED_SEPARATOR, OperatorRegistry, default_registry
from streambound.core.safety import calculate_fused_bound, explain_fusion
from streambound.core.stage import StreamStage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChainLink:
    """A stage together with the operator name the registry knows it by."""

    stage: StreamStage
    operator_name: str


@dataclass(frozen=True)
class FusionDecision:
    fused: bool
    fused_bound: Multiplicity
    fused_stage: StreamStage | None = None
    reason: str | None = None


@dataclass(frozen=True)
class FusionTrace:
    """One fusion attempt. ``iteration`` counts passes from 0."""

    step: int
    iteration: int
    position: int
    upstream: str
    downstream: str
    fused: bool
    fused_bound: Multiplicity
    reason: str | None = None

    def as_dict(self) -> dict:
        return {
            "step": self.step,
            "iteration": self.iteration,
            "position": self.position,
            "upstream": self.upstream,
            "downstream": self.downstream,
            "fused": self.fused,
            "fused_bound": format_multiplicity(self.fused_bound),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class OptimizedChain:
    links: tuple[ChainLink, ...]
    usage_bound: Multiplicity
    trace: tuple[FusionTrace, ...] = ()
    stats: FusionStats = field(default_factory=FusionStats)
    diagnostics: tuple[str, ...] = ()

    @property
    def stages(self) -> list[StreamStage]:
        return [link.stage for link in self.links]

    @property
    def operator_names(self) -> list[str]:
        return [link.operator_name for link in self.links]

    def summary(self) -> str:
        segments = " -> ".join(
            f"{link.operator_name}[{format_multiplicity(link.stage.bound)}]"
            for link in self.links
        ) or "(empty)"
        lines = [
            f"segments: {segments}",
            f"usage bound: {format_multiplicity(self.usage_bound)}",
            f"fused {self.stats.successful_fusions} of {self.stats.total_attempts} attempts",
        ]
        lines.extend(f"warning: {message}" for message in self.diagnostics)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Pairwise fusion
# ---------------------------------------------------------------------------

def fuse(
    a: StreamStage,
    b: StreamStage,
    name_a: str,
    name_b: str,
    *,
    registry: OperatorRegistry | None = None,
) -> FusionDecision:
    """Try to merge a;b into one stage named "name_a+name_b"."""
    check = explain_fusion(name_a, name_b, registry)
    fused_bound = calculate_fused_bound(a, b)

    if not check.allowed:
        diagnostics.debug(
            "fusion_skipped | up=%s | down=%s | rule=%s | reason=%s",
            name_a, name_b, check.rule, check.reason,
        )
        return FusionDecision(fused=False, fused_bound=fused_bound, reason=check.reason)

    fused_stage = replace(compose_usage(a, b), operator_name=f"{name_a}{FUSED_SEPARATOR}{name_b}")
    diagnostics.debug(
        "fusion_applied | up=%s | down=%s | rule=%s | bound=%s",
        name_a, name_b, check.rule, fused_bound,
    )
    return FusionDecision(fused=True, fused_bound=fused_bound, fused_stage=fused_stage)


# ---------------------------------------------------------------------------
# Chain pass
# ---------------------------------------------------------------------------

def optimize_chain(
    links: Iterable[ChainLink | tuple[StreamStage, str]],
    *,
    registry: OperatorRegistry | None = None,
) -> OptimizedChain:
    """Fuse adjacent stages greedily, left to right, until nothing fuses.

    Args:
        links: ChainLinks or (stage, operator_name) tuples, in pipeline order.
        registry: Operator table; defaults to the builtin one.

    Returns:
        An OptimizedChain with the sealed segments, the sequential bound of
        those segments, a per-attempt trace, and fusion statistics. Unknown
        operators are reported in ``diagnostics`` and never fused.
    """
    reg = default_registry() if registry is None else registry
    chain = [_as_link(link) for link in links]
    stats = FusionStats()

    problems = _unknown_operators(chain, reg)
    for message in problems:
        logger.warning("fusion_config | %s", message)

    if len(chain) <= 1:
        bound = chain[0].stage.bound if chain else ONE
        return OptimizedChain(
            links=tuple(chain),
            usage_bound=bound,
            stats=stats,
            diagnostics=problems,
        )

    trace: list[FusionTrace] = []
    iteration = 0
    while True:
        sealed = _greedy_pass(chain, reg, stats, trace, iteration)
        settled = len(sealed) == len(chain) or len(sealed) == 1
        chain = sealed
        if settled:
            break
        iteration += 1

    log_fusion_stats(stats)

    return OptimizedChain(
        links=tuple(chain),
        usage_bound=sequence_bound(link.stage.bound for link in chain),
        trace=tuple(trace),
        stats=stats,
        diagnostics=problems,
    )


def _greedy_pass(
    chain: Sequence[ChainLink],
    registry: OperatorRegistry,
    stats: FusionStats,
    trace: list[FusionTrace],
    iteration: int,
) -> list[ChainLink]:
    """One left-to-right pass; appends to ``trace`` and ``stats`` in place."""
    sealed: list[ChainLink] = []
    acc = chain[0]
    start = 0

    for position, nxt in enumerate(chain[1:], start=1):
        decision = fuse(acc.stage, nxt.stage, acc.operator_name, nxt.operator_name, registry=registry)
        trace.append(FusionTrace(
            step=len(trace),
            iteration=iteration,
            position=start,
            upstream=acc.operator_name,
            downstream=nxt.operator_name,
            fused=decision.fused,
            fused_bound=decision.fused_bound,
            reason=decision.reason,
        ))

        if decision.fused:
            stats.record_success(acc.stage.bound, nxt.stage.bound, decision.fused_bound)
            acc = ChainLink(
                stage=decision.fused_stage,
                operator_name=f"{acc.operator_name}{FUSED_SEPARATOR}{nxt.operator_name}",
            )
        else:
            stats.record_skip()
            sealed.append(acc)
            acc, start = nxt, position

    sealed.append(acc)
    return sealed


def _as_link(item: ChainLink | tuple[StreamStage, str]) -> ChainLink:
    if isinstance(item, ChainLink):
        return item
    stage, name = item
    return ChainLink(stage=stage, operator_name=name)


def _unknown_operators(chain: Sequence[ChainLink], registry: OperatorRegistry) -> tuple[str, ...]:
    seen: list[str] = []
    for link in chain:
        if registry.resolve(link.operator_name) is None and link.operator_name not in seen:
            seen.append(link.operator_name)
    return tuple(f"no metadata for operator {name!r}; treated as unfusible" for name in seen)
