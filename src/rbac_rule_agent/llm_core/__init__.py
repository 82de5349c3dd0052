"""Public exports for the core agent abstractions and utilities."""

from .base import ChatTransport, ChatRequest, ChatResponse, StopReason, Usage
from .exceptions import (
    AgentError,
    ConfigurationError,
    LLMError,
    TransportError,
    ProtocolError,
    LLMToolError,
    ToolRegistrationError,
    ToolValidationError,
    UnknownToolError,
    ToolExecutionError,
    IterationLimitExceeded,
    AgentCancelledError,
    ExtractionError,
)
from .logger import get_logger, setup_logging
from .messages import (
    BaseMessage,
    Message,
    UserMessage,
    AssistantMessage,
    SystemMessage,
    ToolResultMessage,
)
from .tools import ToolDefinition, ToolDescriptor, ToolCallRequest, ToolCallResult, ToolRegistry, SchemaValidator
from .agent import AgentLoop, AgentRunResult, run_agent
from .output import RuleOutputExtractor, extract_json

__all__ = [
    "ChatTransport",
    "ChatRequest",
    "ChatResponse",
    "StopReason",
    "Usage",
    "AgentError",
    "ConfigurationError",
    "LLMError",
    "TransportError",
    "ProtocolError",
    "LLMToolError",
    "ToolRegistrationError",
    "ToolValidationError",
    "UnknownToolError",
    "ToolExecutionError",
    "IterationLimitExceeded",
    "AgentCancelledError",
    "ExtractionError",
    "get_logger",
    "setup_logging",
    "BaseMessage",
    "Message",
    "UserMessage",
    "AssistantMessage",
    "SystemMessage",
    "ToolResultMessage",
    "ToolDefinition",
    "ToolDescriptor",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolRegistry",
    "SchemaValidator",
    "AgentLoop",
    "AgentRunResult",
    "run_agent",
    "RuleOutputExtractor",
    "extract_json",
]
