"""Runtime usage ceilings.

with_usage_validation(stage, max_usage) checks the computed usage for each
input before delegating to the stage. A violation raises UsageExceeded and
the wrapped run never executes, so the caller's state is left untouched.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from streambound.core.errors import UsageExceeded
from streambound.core.multiplicity import Multiplicity, leq, minimum, parse_multiplicity
from streambound.core.stage import StreamStage

logger = logging.getLogger(__name__)


def validate_usage(stage: StreamStage, value: Any, max_usage: Multiplicity | int) -> Multiplicity:
    """Return stage.usage(value), or raise UsageExceeded if it is above max_usage."""
    ceiling = parse_multiplicity(max_usage)
    computed = stage.usage(value)
    if not leq(computed, ceiling):
        logger.debug(
            "usage_exceeded | operator=%s | computed=%s | max=%s",
            stage.operator_name, computed, ceiling,
        )
        raise UsageExceeded(stage.operator_name, computed, ceiling)
    return computed


def with_usage_validation(stage: StreamStage, max_usage: Multiplicity | int) -> StreamStage:
    """Wrap ``stage.run`` with a usage ceiling.

    The result keeps the stage's usage, category and operator name, so
    wrappers nest; the effective ceiling is the smallest one applied.
    """
    ceiling = parse_multiplicity(max_usage)
    inner = stage.run

    def _run(value: Any, state: Any) -> tuple[Any, Any]:
        validate_usage(stage, value, ceiling)
        return inner(value, state)

    effective = ceiling if stage.max_usage is None else minimum(stage.max_usage, ceiling)
    return replace(stage, run=_run, max_usage=effective)
