"""Export the exception hierarchy used across transport, tool and agent code paths."""

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

__all__ = [
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
]
