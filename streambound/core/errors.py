"""streambound exception hierarchy."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streambound.core.multiplicity import Multiplicity


class StreamboundError(Exception):
    """Base exception for all streambound errors."""


class MetadataError(StreamboundError):
    """Malformed or conflicting operator metadata."""


class UsageExceeded(StreamboundError):
    """Computed usage of a stage exceeds its declared ceiling.

    Raised before the stage's ``run`` is invoked, so the caller's state is
    exactly as it was before the call.
    """

    def __init__(self, operator_name: str, computed: Multiplicity, max_usage: Multiplicity) -> None:
        self.operator_name = operator_name
        self.computed = computed
        self.max_usage = max_usage
        super().__init__(
            f"Usage {computed} exceeds maximum bound {max_usage} for operator {operator_name!r}"
        )
