"""Tool definitions for the streambound API: JSON Schema descriptions for AI agents."""

from __future__ import annotations

_OPERATOR_NAME = {
    "type": "string",
    "description": "Operator name from the registry, e.g. 'map' or 'flatMap'. "
                   "Fused names such as 'map+filter' are accepted.",
}

TOOL_DEFINITIONS: list[dict] = [
    {
        "name": "list_ops",
        "description": "List the operator registry: name, category, usage shape and static bound.",
        "parameters": {
            "type": "object",
            "properties": {},
        },
    },
    {
        "name": "check",
        "description": "Check whether two adjacent operators can be fused, and which rule decided it.",
        "parameters": {
            "type": "object",
            "properties": {
                "upstream": _OPERATOR_NAME,
                "downstream": _OPERATOR_NAME,
            },
            "required": ["upstream", "downstream"],
        },
    },
    {
        "name": "optimize",
        "description": "Run the greedy fusion pass over a chain of operators and report "
                       "the fused segments, the overall usage bound and a fusion trace.",
        "parameters": {
            "type": "object",
            "properties": {
                "operators": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Operator names in pipeline order",
                },
            },
            "required": ["operators"],
        },
    },
    {
        "name": "bound",
        "description": "Sequential usage bound of a chain of per-stage bounds.",
        "parameters": {
            "type": "object",
            "properties": {
                "bounds": {
                    "type": "array",
                    "items": {"type": ["integer", "string"]},
                    "description": "Per-stage bounds; use \"∞\" for unbounded",
                },
            },
            "required": ["bounds"],
        },
    },
]


def get_tool_definitions() -> list[dict]:
    return TOOL_DEFINITIONS
