"""Translate between the package's chat abstractions and the Claude messages wire format."""

from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from rbac_rule_agent.llm_core.base import ChatRequest, ChatResponse, StopReason, Usage
from rbac_rule_agent.llm_core.exceptions import ProtocolError
from rbac_rule_agent.llm_core.logger import get_logger
from rbac_rule_agent.llm_core.messages import (
    AssistantMessage,
    BaseMessage,
    SystemMessage,
    ToolResultMessage,
    UserMessage,
)
from rbac_rule_agent.llm_core.tools import ToolCallRequest, ToolDescriptor
from .models import ClaudeResponse

logger = get_logger(__name__)


class ClaudeMessageAdapter:
    """Encodes requests into Claude payloads and decodes Claude responses."""

    @staticmethod
    def encode_messages(messages: Sequence[BaseMessage]) -> List[Dict[str, Any]]:
        """
        Converts generic messages into Claude message dictionaries.

        Consecutive tool results are grouped into one user message so every
        ``tool_use`` block is answered in the message that directly follows it.

        Args:
            messages: Conversation history without system messages.

        Returns:
            List of Claude message dictionaries.

        Raises:
            ProtocolError: If a system message is found in the history.
        """
        claude_messages: List[Dict[str, Any]] = []
        for msg in messages:
            if isinstance(msg, SystemMessage):
                raise ProtocolError("System messages belong in the top-level 'system' field.")

            if isinstance(msg, UserMessage):
                claude_messages.append({"role": "user", "content": [{"type": "text", "text": msg.content}]})

            elif isinstance(msg, AssistantMessage):
                content: List[Dict[str, Any]] = []
                if msg.content:
                    content.append({"type": "text", "text": msg.content})
                for tool_call in msg.tool_calls:
                    content.append(
                        {"type": "tool_use", "id": tool_call.id, "name": tool_call.name, "input": tool_call.arguments}
                    )
                if content:
                    claude_messages.append({"role": "assistant", "content": content})

            elif isinstance(msg, ToolResultMessage):
                block: Dict[str, Any] = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.content,
                }
                if msg.is_error:
                    block["is_error"] = True

                previous = claude_messages[-1] if claude_messages else None
                if previous and previous["role"] == "user" and previous["content"][-1]["type"] == "tool_result":
                    previous["content"].append(block)
                else:
                    claude_messages.append({"role": "user", "content": [block]})

        return claude_messages

    @staticmethod
    def encode_tools(tools: Sequence[ToolDescriptor]) -> List[Dict[str, Any]]:
        """Converts tool descriptors into Claude tool definitions."""
        encoded = []
        for tool in tools:
            schema = dict(tool.input_schema)
            encoded.append(
                {
                    "name": tool.name,
                    "description": tool.description,
                    "input_schema": {
                        **schema,
                        "type": "object",
                        "properties": schema.get("properties", {}),
                        "required": schema.get("required", []),
                    },
                }
            )
        return encoded

    @classmethod
    def build_payload(
        cls,
        request: ChatRequest,
        *,
        anthropic_version: str,
        max_tokens: int,
        temperature: float,
        tools: Optional[Sequence[ToolDescriptor]] = None,
    ) -> Dict[str, Any]:
        """
        Builds the JSON body of a messages call.

        Args:
            request: The normalized chat request.
            anthropic_version: Value of the ``anthropic_version`` body field.
            max_tokens: Effective token limit for the call.
            temperature: Effective sampling temperature for the call.
            tools: Tool descriptors to advertise. Omitted from the payload when empty.

        Returns:
            The request body.
        """
        payload: Dict[str, Any] = {
            "anthropic_version": anthropic_version,
            "messages": cls.encode_messages(request.messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        if request.system_prompt:
            payload["system"] = request.system_prompt

        if tools:
            payload["tools"] = cls.encode_tools(tools)

        return payload

    @staticmethod
    def decode_response(data: Any) -> ChatResponse:
        """
        Converts a Claude response body into a ChatResponse.

        Args:
            data: The decoded JSON body.

        Returns:
            The normalized response.

        Raises:
            ProtocolError: If the body does not have the expected shape, or a tool_use
                block lacks its id, name or input.
        """
        if not isinstance(data, dict):
            raise ProtocolError("Response body is not a JSON object.")

        try:
            parsed = ClaudeResponse.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(f"Unexpected response shape: {exc}") from exc

        text = ""
        tool_calls: List[ToolCallRequest] = []
        for block in parsed.content:
            if block.type == "text":
                text += block.text or ""
            elif block.type == "tool_use":
                if not block.id:
                    raise ProtocolError("tool_use block is missing its id.")
                if not block.name:
                    raise ProtocolError(f"tool_use block '{block.id}' is missing its name.")
                if block.input is None:
                    raise ProtocolError(f"tool_use block '{block.id}' is missing its input.")
                tool_calls.append(ToolCallRequest(id=block.id, name=block.name, arguments=dict(block.input)))
            else:
                logger.debug(f"Ignoring content block of type '{block.type}'.")

        stop_reason = StopReason.from_vendor(parsed.stop_reason)
        if tool_calls and stop_reason is StopReason.MAX_TOKENS:
            # The last tool_use input may be cut off mid-generation
            raise ProtocolError("Response has tool_use blocks but hit max_tokens; tool input may be truncated.")
        if tool_calls and stop_reason is not StopReason.TOOL_USE:
            logger.warning(f"Response has tool calls but stop_reason '{parsed.stop_reason}'. Treating as tool_use.")
            stop_reason = StopReason.TOOL_USE
        if stop_reason is StopReason.TOOL_USE and not tool_calls:
            raise ProtocolError("stop_reason is 'tool_use' but the response contains no tool_use blocks.")

        return ChatResponse(
            text=text,
            tool_calls=tool_calls,
            stop_reason=stop_reason,
            usage=Usage(input_tokens=parsed.usage.input_tokens, output_tokens=parsed.usage.output_tokens),
            raw=data,
        )
