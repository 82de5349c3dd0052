"""Core abstractions for chat transport implementations."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Coroutine, List, Optional, Sequence

from .models import ChatRequest, ChatResponse
from ..exceptions import TransportError
from ..logger import get_logger
from ..tools.models import ToolDescriptor

logger = get_logger(__name__)


class ChatTransport(ABC):
    """Abstract base class for chat endpoint transports.

    A transport turns a normalized ``ChatRequest`` into exactly one outbound call
    and returns a normalized ``ChatResponse``. It is configured once, including the
    tool descriptors it advertises; ``with_tools`` returns a new transport instead of
    mutating this one. Retries are off by default; a caller that wants them opts in
    with ``max_retries``.
    """

    def __init__(
        self,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        tools: Optional[Sequence[ToolDescriptor]] = None,
        max_retries: int = 0,
        base_retry_delay: float = 1.0,
    ):
        if max_tokens <= 0:
            raise ValueError("max_tokens must be a positive integer.")
        if not 0.0 <= temperature <= 1.0:
            raise ValueError("temperature must be within [0, 1].")

        self.max_tokens = max_tokens
        self.temperature = temperature
        self.tools: List[ToolDescriptor] = list(tools or [])
        self.max_retries = max_retries
        self.base_retry_delay = base_retry_delay

    async def _execute_with_retry(
        self,
        func: Callable[..., Coroutine[Any, Any, ChatResponse]],
        *args: Any,
        **kwargs: Any,
    ) -> ChatResponse:
        """
        Executes a function with retry logic.

        Only retryable transport errors (no response, 429, 5xx) are repeated;
        everything else propagates immediately.

        Args:
            func: The asynchronous function to execute.
            *args: Positional arguments for the function.
            **kwargs: Keyword arguments for the function.

        Returns:
            The result of the function call.

        Raises:
            TransportError: The last encountered error if all retries fail.
        """
        delay = self.base_retry_delay
        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except TransportError as e:
                if not e.retryable or attempt >= self.max_retries:
                    raise

                attempt += 1
                logger.warning(f"API Error (Retry: {attempt}/{self.max_retries}): {e}. Waiting {delay}s...")
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

    async def send(self, request: ChatRequest) -> ChatResponse:
        """
        Sends one request to the chat endpoint.

        Args:
            request: The normalized chat request.

        Returns:
            The normalized chat response.

        Raises:
            TransportError: If the endpoint returns a non-success status or cannot be reached.
            ProtocolError: If the response body does not have the expected shape.
        """
        return await self._execute_with_retry(self._send_impl, request)

    @abstractmethod
    def with_tools(self, tools: Sequence[ToolDescriptor]) -> "ChatTransport":
        """Return a new transport of the same configuration advertising ``tools``."""
        pass

    @abstractmethod
    async def _send_impl(self, request: ChatRequest) -> ChatResponse:
        pass
