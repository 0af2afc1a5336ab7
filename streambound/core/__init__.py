"""streambound core: multiplicities, usage annotations, stages, fusion."""

from streambound.core.errors import StreamboundError, MetadataError, UsageExceeded
from streambound.core.multiplicity import (
    Exact, Unbounded, Multiplicity, ZERO, ONE, UNBOUNDED,
    add, mul, maximum, minimum, product, leq, lt, is_finite,
    parse_multiplicity, format_multiplicity,
)
from streambound.core.usage import (
    Usage, UsageShape, ShapeKind,
    constant_usage, once_usage, never_usage, unbounded_usage,
    conditional_usage, dependent_usage, usage_for_shape, shape_of, composition_factor,
)
from streambound.core.stage import StreamStage, Category, lift_stateless, lift_stateful
from streambound.core.validation import validate_usage, with_usage_validation
from streambound.core.compose import (
    compose_bound, sequence_bound, compose_usage, parallel_usage, fan_out_usage,
)
from streambound.core.registry import (
    OperatorMetadata, OperatorRegistry, default_registry,
    get_operator_metadata, get_operators_by_category,
)
from streambound.core.safety import (
    FusionCheck, check_fusion, explain_fusion, can_fuse_operators,
    would_increase_multiplicity, calculate_fused_bound,
)
from streambound.core.optimizer import (
    ChainLink, FusionDecision, FusionTrace, OptimizedChain, fuse, optimize_chain,
)
from streambound.core.diagnostics import (
    FusionStats, enable_fusion_debug, disable_fusion_debug, is_fusion_debug_enabled,
    log_fusion_stats, set_stats_sink, configure_logging,
)
from streambound.core.operators import (
    create_map_stream, create_filter_stream, create_scan_stream,
    create_take_stream, create_flat_map_stream, create_tap_stream,
)

__all__ = [
    "StreamboundError", "MetadataError", "UsageExceeded",
    "Exact", "Unbounded", "Multiplicity", "ZERO", "ONE", "UNBOUNDED",
    "add", "mul", "maximum", "minimum", "product", "leq", "lt", "is_finite",
    "parse_multiplicity", "format_multiplicity",
    "Usage", "UsageShape", "ShapeKind",
    "constant_usage", "once_usage", "never_usage", "unbounded_usage",
    "conditional_usage", "dependent_usage", "usage_for_shape", "shape_of", "composition_factor",
    "StreamStage", "Category", "lift_stateless", "lift_stateful",
    "validate_usage", "with_usage_validation",
    "compose_bound", "sequence_bound", "compose_usage", "parallel_usage", "fan_out_usage",
    "OperatorMetadata", "OperatorRegistry", "default_registry",
    "get_operator_metadata", "get_operators_by_category",
    "FusionCheck", "check_fusion", "explain_fusion", "can_fuse_operators",
    "would_increase_multiplicity", "calculate_fused_bound",
    "ChainLink", "FusionDecision", "FusionTrace", "OptimizedChain", "fuse", "optimize_chain",
    "FusionStats", "enable_fusion_debug", "disable_fusion_debug", "is_fusion_debug_enabled",
    "log_fusion_stats", "set_stats_sink", "configure_logging",
    "create_map_stream", "create_filter_stream", "create_scan_stream",
    "create_take_stream", "create_flat_map_stream", "create_tap_stream",
]
