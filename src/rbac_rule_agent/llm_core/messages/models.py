"""Provider-agnostic message models for chat history."""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..tools.models import ToolCallRequest


class BaseMessage(BaseModel):
    """Base model for messages exchanged with an LLM.

    Attributes:
        role: Role associated with the message, used as the union discriminator.
        content: Text payload of the message.
    """

    role: str
    content: str = ""


class SystemMessage(BaseMessage):
    """Message authored by the system to steer behavior."""

    role: Literal["system"] = "system"


class UserMessage(BaseMessage):
    """Message authored by an end user."""

    role: Literal["user"] = "user"


class AssistantMessage(BaseMessage):
    """Message authored by the assistant, optionally containing tool calls."""

    role: Literal["assistant"] = "assistant"
    tool_calls: List[ToolCallRequest] = Field(default_factory=list)


class ToolResultMessage(BaseMessage):
    """Result of one tool invocation, correlated to its request by ``tool_call_id``."""

    role: Literal["tool"] = "tool"
    tool_call_id: str
    name: Optional[str] = None
    is_error: bool = False


Message = Annotated[
    Union[SystemMessage, UserMessage, AssistantMessage, ToolResultMessage],
    Field(discriminator="role"),
]
