"""RBAC Rule Agent - turn natural-language requirements into RBAC rules with a tool-using Claude agent."""

from .llm_core import (
    AgentLoop,
    AgentRunResult,
    ChatRequest,
    ChatResponse,
    ChatTransport,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolResultMessage,
    ToolRegistry,
    ToolDefinition,
    ToolDescriptor,
    extract_json,
    run_agent,
)
from .llm_impl.claude import ClaudeTransport
from .config import Settings, ClaudeSettings, RBACSourceSettings, load_settings

__all__ = [
    "AgentLoop",
    "AgentRunResult",
    "ChatRequest",
    "ChatResponse",
    "ChatTransport",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolResultMessage",
    "ToolRegistry",
    "ToolDefinition",
    "ToolDescriptor",
    "extract_json",
    "run_agent",
    "ClaudeTransport",
    "Settings",
    "ClaudeSettings",
    "RBACSourceSettings",
    "load_settings",
]
