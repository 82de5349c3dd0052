"""Data models for tool execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ToolCallRequest:
    """Represents a normalized tool call request from an LLM response.

    Attributes:
        id: Opaque identifier issued by the model; echoed back in the tool result.
        name: Name of the requested tool.
        arguments: Arguments the model supplied for the call.
    """

    id: str
    name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolCallResult:
    """Represents the outcome of executing a tool call."""

    call_id: str
    name: str
    content: str
    is_error: bool = False
    error: Optional[str] = None
