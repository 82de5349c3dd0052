"""Tool-related data models."""

from .models import ToolDefinition, ToolDescriptor
from .tool_call import ToolCallRequest, ToolCallResult

__all__ = ["ToolDefinition", "ToolDescriptor", "ToolCallRequest", "ToolCallResult"]
