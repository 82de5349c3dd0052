from .models import ToolDefinition, ToolDescriptor, ToolCallRequest, ToolCallResult
from .registry import ToolRegistry
from .schema import SchemaValidator

__all__ = [
    "ToolDefinition",
    "ToolDescriptor",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolRegistry",
    "SchemaValidator",
]
