from types import TracebackType
from typing import Dict, Optional, Sequence, Type

import httpx

from rbac_rule_agent.config import DEFAULT_ANTHROPIC_VERSION, ClaudeSettings
from rbac_rule_agent.llm_core.base import ChatRequest, ChatResponse, ChatTransport
from rbac_rule_agent.llm_core.exceptions import ProtocolError, TransportError
from rbac_rule_agent.llm_core.logger import get_logger
from rbac_rule_agent.llm_core.tools import ToolDescriptor
from .adapter import ClaudeMessageAdapter

logger = get_logger(__name__)


class ClaudeTransport(ChatTransport):
    """
    Chat transport for a Claude messages endpoint behind a bearer-token gateway.

    Every ``send`` performs exactly one POST (unless retries were enabled) and never
    enforces a timeout of its own; wrap the caller in a deadline if one is needed.
    """

    def __init__(
        self,
        endpoint: str,
        bearer_token: str,
        anthropic_version: str = DEFAULT_ANTHROPIC_VERSION,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        tools: Optional[Sequence[ToolDescriptor]] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_retries: int = 0,
        base_retry_delay: float = 1.0,
    ):
        """
        Initializes the Claude transport.

        Args:
            endpoint: URL of the messages endpoint.
            bearer_token: Token for the ``Authorization`` header.
            anthropic_version: Value of the ``anthropic_version`` body field.
            max_tokens: Default maximum number of tokens to generate.
            temperature: Default sampling temperature.
            tools: Tool descriptors advertised when a request carries none.
            client: Optional shared httpx client. When omitted the transport creates
                and owns one.
            max_retries: Retries for retryable transport errors. Off by default.
            base_retry_delay: Initial delay of the exponential retry backoff, in seconds.
        """
        super().__init__(
            max_tokens=max_tokens,
            temperature=temperature,
            tools=tools,
            max_retries=max_retries,
            base_retry_delay=base_retry_delay,
        )
        self.endpoint = endpoint
        self._bearer_token = bearer_token
        self.anthropic_version = anthropic_version

        self._owns_client = client is None
        self.client: httpx.AsyncClient = client if client is not None else httpx.AsyncClient(timeout=None)

    @classmethod
    def from_settings(
        cls,
        settings: ClaudeSettings,
        tools: Optional[Sequence[ToolDescriptor]] = None,
        client: Optional[httpx.AsyncClient] = None,
        **overrides: object,
    ) -> "ClaudeTransport":
        """Build a transport from ``ClaudeSettings``; keyword overrides win over the settings."""
        params: Dict[str, object] = {
            "endpoint": settings.endpoint,
            "bearer_token": settings.bearer_token,
            "anthropic_version": settings.anthropic_version,
            "max_tokens": settings.max_tokens,
            "temperature": settings.temperature,
        }
        params.update(overrides)
        return cls(tools=tools, client=client, **params)  # type: ignore[arg-type]

    def with_tools(self, tools: Sequence[ToolDescriptor]) -> "ClaudeTransport":
        """
        Returns a new transport with the same configuration advertising ``tools``.

        The new transport shares this transport's HTTP client but does not own it.
        """
        return ClaudeTransport(
            endpoint=self.endpoint,
            bearer_token=self._bearer_token,
            anthropic_version=self.anthropic_version,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            tools=tools,
            client=self.client,
            max_retries=self.max_retries,
            base_retry_delay=self.base_retry_delay,
        )

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._bearer_token}",
        }

    async def _send_impl(self, request: ChatRequest) -> ChatResponse:
        """
        Performs one POST to the messages endpoint.

        Args:
            request: The normalized chat request.

        Returns:
            The decoded response.

        Raises:
            TransportError: On a network failure or a non-2xx status.
            ProtocolError: If the body is not the expected JSON shape.
        """
        payload = ClaudeMessageAdapter.build_payload(
            request,
            anthropic_version=self.anthropic_version,
            max_tokens=request.max_tokens if request.max_tokens is not None else self.max_tokens,
            temperature=request.temperature if request.temperature is not None else self.temperature,
            tools=request.tools or self.tools,
        )
        logger.debug(
            f"Sending request to {self.endpoint}: {len(payload['messages'])} message(s), "
            f"{len(payload.get('tools', []))} tool(s)."
        )

        try:
            response = await self.client.post(self.endpoint, json=payload, headers=self._headers())
        except httpx.RequestError as exc:
            msg = f"Request to chat endpoint failed: {exc}"
            logger.error(msg)
            raise TransportError(None, msg) from exc

        if not response.is_success:
            logger.error(f"API request failed: {response.status_code}")
            raise TransportError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Chat endpoint returned a non-JSON body.")
            raise ProtocolError("Response body is not valid JSON.") from exc

        result = ClaudeMessageAdapter.decode_response(data)
        logger.debug(
            f"Response received. Stop reason: {result.stop_reason.value}, "
            f"tool calls: {len(result.tool_calls)}, tokens: {result.usage.total_tokens}"
        )
        return result

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> "ClaudeTransport":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()
