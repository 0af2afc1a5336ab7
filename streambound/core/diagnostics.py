"""Fusion diagnostics: debug toggle, statistics, logging setup.

Usage:
    from streambound.core.diagnostics import enable_fusion_debug, set_stats_sink

    configure_logging(logging.DEBUG)
    enable_fusion_debug()           # log every fusion decision
    set_stats_sink(records.append)  # receive FusionStats.as_dict() per pass
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging import Logger
from typing import Callable, Iterable, Optional

from streambound.core.multiplicity import Exact, Multiplicity

logger = logging.getLogger("streambound.fusion")

StatsSink = Callable[[dict], None]

_debug_enabled: bool = False
_stats_sink: StatsSink | None = None


# ---------------------------------------------------------------------------
# Debug toggle
# ---------------------------------------------------------------------------

def enable_fusion_debug() -> None:
    global _debug_enabled
    _debug_enabled = True
    logger.info("fusion_debug | enabled=True")


def disable_fusion_debug() -> None:
    global _debug_enabled
    logger.info("fusion_debug | enabled=False")
    _debug_enabled = False


def is_fusion_debug_enabled() -> bool:
    return _debug_enabled


def set_stats_sink(sink: StatsSink | None) -> None:
    """Install the callback that receives fusion statistics (None removes it)."""
    global _stats_sink
    if sink is not None and not callable(sink):
        raise TypeError("stats sink must be callable or None")
    _stats_sink = sink


def debug(message: str, *args: object) -> None:
    """Log a fusion decision, only while fusion debug is enabled."""
    if _debug_enabled:
        logger.debug(message, *args)


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------

@dataclass
class FusionStats:
    total_attempts: int = 0
    successful_fusions: int = 0
    skipped_fusions: int = 0
    average_bound_reduction: float = 0.0
    _reductions: list[int] = field(default_factory=list, repr=False, compare=False)

    def record_success(
        self,
        up_bound: Multiplicity,
        down_bound: Multiplicity,
        fused_bound: Multiplicity,
    ) -> None:
        self.total_attempts += 1
        self.successful_fusions += 1
        if all(isinstance(m, Exact) for m in (up_bound, down_bound, fused_bound)):
            self._reductions.append(up_bound.n + down_bound.n - fused_bound.n)
            self.average_bound_reduction = sum(self._reductions) / len(self._reductions)

    def record_skip(self) -> None:
        self.total_attempts += 1
        self.skipped_fusions += 1

    def as_dict(self) -> dict:
        return {
            "totalAttempts": self.total_attempts,
            "successfulFusions": self.successful_fusions,
            "skippedFusions": self.skipped_fusions,
            "averageBoundReduction": self.average_bound_reduction,
        }


def log_fusion_stats(stats: FusionStats) -> None:
    """Report a statistics record to the log (debug only) and the sink."""
    record = stats.as_dict()
    if _debug_enabled:
        logger.info(
            "fusion_stats | attempts=%d | fused=%d | skipped=%d | avg_reduction=%.3f",
            stats.total_attempts,
            stats.successful_fusions,
            stats.skipped_fusions,
            stats.average_bound_reduction,
        )
    if _stats_sink is not None:
        _stats_sink(record)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

def configure_logging(
    level: int = logging.INFO,
    *,
    name: str = "streambound",
    propagate: bool = False,
    extra_loggers: Optional[Iterable[str]] = None,
) -> Logger:
    """Attach a stream handler to the streambound logger and return it."""

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    ))

    def _attach(target: Logger) -> None:
        if not any(isinstance(existing, logging.StreamHandler) for existing in target.handlers):
            target.addHandler(handler)
        target.setLevel(level)
        target.propagate = propagate

    root = logging.getLogger(name)
    _attach(root)

    if extra_loggers:
        for logger_name in extra_loggers:
            _attach(logging.getLogger(logger_name))

    return root
