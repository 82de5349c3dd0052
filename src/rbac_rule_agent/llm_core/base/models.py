"""Normalized request and response models shared by all chat transports."""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field, computed_field, field_validator

from ..messages import BaseMessage, Message, SystemMessage
from ..tools.models import ToolCallRequest, ToolDescriptor


class StopReason(str, Enum):
    """Why the model stopped producing output for this turn."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"
    MAX_TOKENS = "max_tokens"
    OTHER = "other"

    @classmethod
    def from_vendor(cls, value: Optional[str]) -> "StopReason":
        """Map a vendor stop reason onto the enum; unknown values become ``OTHER``."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class Usage(BaseModel):
    """Token accounting for one or more model calls."""

    input_tokens: int = 0
    output_tokens: int = 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: "Usage") -> "Usage":
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )


class ChatRequest(BaseModel):
    """A single call to the chat endpoint.

    System text is never part of ``messages``; it travels in ``system_prompt``.
    ``max_tokens`` and ``temperature`` left as None fall back to the transport defaults,
    and an empty ``tools`` list falls back to the tools the transport was built with.
    """

    system_prompt: Optional[str] = None
    messages: List[Message]
    max_tokens: Optional[int] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    tools: List[ToolDescriptor] = Field(default_factory=list)

    @field_validator("messages")
    @classmethod
    def _no_inline_system_messages(cls, messages: List[BaseMessage]) -> List[BaseMessage]:
        if any(isinstance(m, SystemMessage) for m in messages):
            raise ValueError("System messages must be passed as system_prompt, not inside messages.")
        return messages

    @classmethod
    def from_history(
        cls,
        history: Sequence[BaseMessage],
        system_prompt: Optional[str] = None,
        **kwargs: Any,
    ) -> "ChatRequest":
        """Build a request from a history that may still contain system messages.

        System messages are hoisted out of the history; the last one wins over
        ``system_prompt``.

        Args:
            history: Conversation history in provider-agnostic format.
            system_prompt: Fallback system text if the history contains none.
            **kwargs: Remaining ChatRequest fields (max_tokens, temperature, tools).

        Returns:
            A ChatRequest with the system text separated from the messages.
        """
        messages: List[BaseMessage] = []
        for message in history:
            if isinstance(message, SystemMessage):
                system_prompt = message.content
            else:
                messages.append(message)
        return cls(system_prompt=system_prompt, messages=messages, **kwargs)


class ChatResponse(BaseModel):
    """Normalized chat output returned by transports.

    Attributes:
        text: Concatenated text blocks of the reply (may be empty).
        tool_calls: Tool invocations requested by the model, in order.
        stop_reason: Normalized stop reason.
        usage: Token usage reported for this call.
        raw: Provider-specific response payload for advanced use cases.
    """

    text: str = ""
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)
    stop_reason: StopReason = StopReason.END_TURN
    usage: Usage = Field(default_factory=Usage)
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)
