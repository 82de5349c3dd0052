"""
Custom exception classes for the RBAC rule agent.

This module defines the hierarchy of exceptions raised while talking to the
chat endpoint, registering and executing tools, driving the agent loop and
extracting structured output from the final answer.
"""

from typing import Any, Optional


class AgentError(Exception):
    """Base exception for all errors raised by this package."""

    pass


class ConfigurationError(AgentError):
    """Raised when required configuration is missing or invalid."""

    pass


class LLMError(AgentError):
    """Base exception for errors talking to the chat endpoint."""

    pass


class TransportError(LLMError):
    """Raised when the chat endpoint returns a non-success status or cannot be reached.

    Attributes:
        status: HTTP status code, or None if no response was received.
        body: Response body (or the network error message).
    """

    def __init__(self, status: Optional[int], body: str) -> None:
        self.status = status
        self.body = body
        super().__init__(f"API request failed: {status} - {body}")

    @property
    def retryable(self) -> bool:
        """Whether repeating the same request could plausibly succeed."""
        return self.status is None or self.status == 429 or self.status >= 500


class ProtocolError(LLMError):
    """Raised when the chat endpoint's response cannot be parsed into the expected shape."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Malformed chat response: {reason}")


class LLMToolError(AgentError):
    """Base exception for all tool-related errors."""

    pass


class ToolRegistrationError(LLMToolError):
    """Raised when there is an error registering a tool."""

    pass


class ToolValidationError(LLMToolError):
    """Raised when a tool definition or its schema is invalid."""

    pass


class UnknownToolError(LLMToolError):
    """Raised when a requested tool is not registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' not found in registry.")


class ToolExecutionError(LLMToolError):
    """Raised when a tool rejects its arguments or fails while running.

    Attributes:
        name: Name of the tool.
        cause: The underlying exception.
    """

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        self.cause = cause
        super().__init__(f"Tool '{name}' failed: {cause}")


class IterationLimitExceeded(AgentError):
    """Raised when the agent loop hits its iteration cap and is configured to fail.

    Attributes:
        last_response: The last ChatResponse received before stopping.
    """

    def __init__(self, last_response: Any, max_iterations: int) -> None:
        self.last_response = last_response
        self.max_iterations = max_iterations
        super().__init__(f"Agent did not finish within {max_iterations} iteration(s).")


class AgentCancelledError(AgentError):
    """Raised when an agent run is aborted through its cancellation signal."""

    pass


class ExtractionError(AgentError):
    """Raised when no JSON value can be extracted from model output (strict mode only)."""

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__("Could not extract JSON from model output.")
