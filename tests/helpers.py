"""Test doubles and builders for chat responses and Claude response bodies."""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from rbac_rule_agent.llm_core import (
    ChatRequest,
    ChatResponse,
    ChatTransport,
    StopReason,
    ToolCallRequest,
    ToolDescriptor,
    Usage,
)

CHAT_ENDPOINT = "https://gateway.example.test/v1/messages"
RBAC_ENDPOINT = "https://policies.example.test/rbac/rules"

Scripted = Union[ChatResponse, Exception, Callable[[ChatRequest], ChatResponse]]


class ScriptedTransport(ChatTransport):
    """Replays prepared responses and records every request it receives.

    A callable entry answers every remaining call.
    """

    def __init__(self, responses: Sequence[Scripted] = (), tools: Optional[Sequence[ToolDescriptor]] = None) -> None:
        super().__init__(tools=tools)
        self.responses: List[Scripted] = list(responses)
        self.requests: List[ChatRequest] = []

    def with_tools(self, tools: Sequence[ToolDescriptor]) -> "ScriptedTransport":
        transport = ScriptedTransport(self.responses, tools=tools)
        transport.requests = self.requests
        return transport

    async def _send_impl(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("Unexpected model call: no scripted response left.")

        item = self.responses[0]
        if isinstance(item, ChatResponse):
            self.responses.pop(0)
            return item
        if isinstance(item, Exception):
            self.responses.pop(0)
            raise item
        return item(request)


def text_response(text: str, input_tokens: int = 10, output_tokens: int = 5) -> ChatResponse:
    return ChatResponse(
        text=text,
        stop_reason=StopReason.END_TURN,
        usage=Usage(input_tokens=input_tokens, output_tokens=output_tokens),
    )


def tool_response(*calls: ToolCallRequest, text: str = "") -> ChatResponse:
    return ChatResponse(
        text=text,
        tool_calls=list(calls),
        stop_reason=StopReason.TOOL_USE,
        usage=Usage(input_tokens=10, output_tokens=5),
    )


def text_block(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def tool_use_block(block_id: str, name: str, tool_input: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "tool_use", "id": block_id, "name": name, "input": tool_input}


def claude_body(*blocks: Dict[str, Any], stop_reason: str = "end_turn") -> Dict[str, Any]:
    return {
        "id": "msg_01",
        "type": "message",
        "role": "assistant",
        "model": "claude-test",
        "content": list(blocks),
        "stop_reason": stop_reason,
        "stop_sequence": None,
        "usage": {"input_tokens": 12, "output_tokens": 7},
    }
