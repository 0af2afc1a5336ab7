"""streambound API dispatcher: JSON request/response interface for AI agents.

Usage:
    from streambound.api.dispatch import dispatch
    result = dispatch({"action": "optimize", "operators": ["map", "filter", "flatMap"]})
"""

from __future__ import annotations

from typing import Any

from streambound.core.compose import sequence_bound
from streambound.core.multiplicity import format_multiplicity, parse_multiplicity
from streambound.core.optimizer import ChainLink, optimize_chain
from streambound.core.registry import OperatorRegistry, default_registry
from streambound.core.safety import explain_fusion, would_increase_multiplicity
from streambound.core.stage import Category, StreamStage
from streambound.core.usage import UsageShape, usage_for_shape
from streambound.api.tools import get_tool_definitions as _get_tool_defs


def dispatch(request: dict, *, registry: OperatorRegistry | None = None) -> dict:
    """Main entry point for the streambound tool-use API.

    Args:
        request: JSON-like dict with "action" and action-specific params.
        registry: Operator table; defaults to the builtin one.

    Returns:
        JSON-like dict with results or error information.
    """
    action = request.get("action")
    if not action:
        return {"error": "Missing 'action' field"}

    reg = default_registry() if registry is None else registry

    try:
        if action == "list_ops":
            return _handle_list_ops(reg)
        elif action == "check":
            return _handle_check(request, reg)
        elif action == "optimize":
            return _handle_optimize(request, reg)
        elif action == "bound":
            return _handle_bound(request)
        else:
            return {"error": f"Unknown action: {action!r}"}
    except Exception as e:
        return {"error": f"{type(e).__name__}: {e}"}


def get_tool_definitions() -> list[dict]:
    """Return AI agent tool schema definitions."""
    return _get_tool_defs()


# ---------------------------------------------------------------------------
# Action handlers
# ---------------------------------------------------------------------------

def _handle_list_ops(registry: OperatorRegistry) -> dict:
    return {"operators": [meta.to_dict() for meta in registry]}


def _handle_check(request: dict, registry: OperatorRegistry) -> dict:
    upstream = request.get("upstream")
    downstream = request.get("downstream")
    if not isinstance(upstream, str) or not upstream:
        return {"error": "Missing 'upstream' field"}
    if not isinstance(downstream, str) or not downstream:
        return {"error": "Missing 'downstream' field"}

    check = explain_fusion(upstream, downstream, registry)
    return {
        "upstream": upstream,
        "downstream": downstream,
        "can_fuse": check.allowed,
        "rule": check.rule,
        "reason": check.reason,
        "fused_bound": format_multiplicity(check.fused_bound),
        "would_increase": would_increase_multiplicity(upstream, downstream, registry),
    }


def _handle_optimize(request: dict, registry: OperatorRegistry) -> dict:
    names = request.get("operators")
    if not isinstance(names, list):
        return {"error": "Missing 'operators' field"}
    if not all(isinstance(name, str) and name for name in names):
        return {"error": "'operators' must be a list of operator names"}

    result = optimize_chain(
        [ChainLink(stage=_placeholder_stage(name, registry), operator_name=name) for name in names],
        registry=registry,
    )
    return {
        "segments": [
            {
                "name": link.operator_name,
                "category": link.stage.category.value,
                "shape": str(link.stage.shape),
                "bound": format_multiplicity(link.stage.bound),
            }
            for link in result.links
        ],
        "usage_bound": format_multiplicity(result.usage_bound),
        "trace": [entry.as_dict() for entry in result.trace],
        "stats": result.stats.as_dict(),
        "diagnostics": list(result.diagnostics),
    }


def _handle_bound(request: dict) -> dict:
    bounds = request.get("bounds")
    if not isinstance(bounds, list):
        return {"error": "Missing 'bounds' field"}

    total = sequence_bound(parse_multiplicity(b) for b in bounds)
    return {"usage_bound": format_multiplicity(total)}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _passthrough(value: Any, state: Any) -> tuple[Any, Any]:
    return state, value


def _placeholder_stage(name: str, registry: OperatorRegistry) -> StreamStage:
    """Identity stage carrying the registry's usage for ``name``.

    Unknown operators get unbounded usage and the effectful category.
    """
    meta = registry.resolve(name)
    if meta is None:
        shape, category = UsageShape.unbounded(), Category.EFFECTFUL
    else:
        shape, category = meta.shape, meta.category
    return StreamStage(
        run=_passthrough,
        usage=usage_for_shape(shape),
        category=category,
        operator_name=name,
    )
