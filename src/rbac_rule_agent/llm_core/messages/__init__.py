"""Expose provider-agnostic message model types shared by the agent and the transports."""

from .models import (
    BaseMessage,
    Message,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolResultMessage,
)

__all__ = [
    "BaseMessage",
    "Message",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolResultMessage",
]
