"""streambound tool-use API: JSON-callable interface to the fusion checker."""

from streambound.api.dispatch import dispatch, get_tool_definitions

__all__ = ["dispatch", "get_tool_definitions"]
