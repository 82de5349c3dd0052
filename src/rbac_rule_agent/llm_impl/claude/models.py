from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ClaudeUsage(BaseModel):
    """
    Token counts reported by the Claude endpoint.

    Attributes:
        input_tokens: The number of tokens in the prompt.
        output_tokens: The number of tokens in the completion.
    """

    input_tokens: int = Field(default=0)
    output_tokens: int = Field(default=0)


class ClaudeContentBlock(BaseModel):
    """
    One content block of a Claude message.

    Only ``text`` and ``tool_use`` blocks are interpreted; other block types are kept
    as-is and ignored by the adapter.
    """

    model_config = ConfigDict(extra="allow")

    type: str
    text: Optional[str] = None
    id: Optional[str] = None
    name: Optional[str] = None
    input: Optional[Dict[str, Any]] = None


class ClaudeResponse(BaseModel):
    """
    Body of a successful call to the Claude messages endpoint.

    Attributes:
        content: Ordered content blocks of the assistant reply.
        stop_reason: Vendor stop reason (end_turn, tool_use, max_tokens, ...).
        usage: Token counts for the call.
    """

    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    type: Optional[str] = None
    role: Optional[str] = None
    model: Optional[str] = None
    content: List[ClaudeContentBlock]
    stop_reason: Optional[str] = None
    stop_sequence: Optional[str] = None
    usage: ClaudeUsage = Field(default_factory=ClaudeUsage)
