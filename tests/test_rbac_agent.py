import json
from typing import Any, Dict, List

import httpx
import pytest

from rbac_rule_agent.config import ClaudeSettings, RBACSourceSettings
from rbac_rule_agent.rbac import (
    DEFAULT_SYSTEM_PROMPT,
    RBAC_SYSTEM_PROMPT,
    build_simple_prompt,
    create_claude_agent,
    create_rbac_agent,
    generate_rule,
    get_weather,
)
from helpers import CHAT_ENDPOINT, RBAC_ENDPOINT, claude_body, text_block, tool_use_block

GENERATED_RULE = {
    "name": "RBAC_MONEY_TRANSFER_PB_SG_USERS_196",
    "description": "(SG) Money transfer for PB users",
    "target": "(subject.claims['country'] == 'SG' && action['api'] == 'MONEY_TRANSFER')",
    "condition": "true",
    "type": "R",
    "overridable": "N",
    "hybrid": "N",
}

EXISTING_RULES = [
    {"ruleId": 195, "name": "RBAC_MONEY_TRANSFER_PB_SG_HK_USERS_195", "description": "(SG, HK) transfers"},
    {"ruleId": 12, "name": "RBAC_CLIENT_EXCHANGE_RETAIL_IN_USERS_12", "description": "(IN) exchange"},
]


class FakeGateway:
    """Serves the chat endpoint from a script and the policies API from a fixed list."""

    def __init__(self, chat_bodies: List[Dict[str, Any]]) -> None:
        self.chat_bodies = list(chat_bodies)
        self.chat_payloads: List[Dict[str, Any]] = []
        self.rbac_requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == CHAT_ENDPOINT:
            self.chat_payloads.append(json.loads(request.content))
            return httpx.Response(200, json=self.chat_bodies.pop(0))
        if str(request.url) == RBAC_ENDPOINT:
            self.rbac_requests.append(request)
            return httpx.Response(200, json=EXISTING_RULES)
        return httpx.Response(404)


@pytest.mark.asyncio
async def test_generate_rule_with_tools(claude_settings: ClaudeSettings, rbac_settings: RBACSourceSettings) -> None:
    gateway = FakeGateway(
        [
            claude_body(
                text_block("Let me look at the existing rules."),
                tool_use_block("toolu_1", "fetch_rbac_rules", {"filter": "MONEY_TRANSFER"}),
                stop_reason="tool_use",
            ),
            claude_body(text_block(f"```json\n{json.dumps(GENERATED_RULE)}\n```")),
        ]
    )

    async with httpx.AsyncClient(transport=httpx.MockTransport(gateway)) as client:
        rule = await generate_rule(
            claude_settings, rbac_settings, "Allow PB users in SG to transfer money", client=client
        )
        assert client.is_closed is False

    assert rule == GENERATED_RULE
    assert len(gateway.rbac_requests) == 1

    first, second = gateway.chat_payloads
    assert first["system"] == RBAC_SYSTEM_PROMPT
    assert first["temperature"] == 0.3
    assert first["max_tokens"] == 4096
    assert [t["name"] for t in first["tools"]] == ["fetch_rbac_rules"]
    assert first["messages"] == [
        {"role": "user", "content": [{"type": "text", "text": "Allow PB users in SG to transfer money"}]}
    ]

    tool_result = second["messages"][-1]["content"][0]
    assert tool_result["type"] == "tool_result"
    assert tool_result["tool_use_id"] == "toolu_1"
    assert json.loads(tool_result["content"])["totalRules"] == 1


@pytest.mark.asyncio
async def test_generate_rule_without_tools(claude_settings: ClaudeSettings, rbac_settings: RBACSourceSettings) -> None:
    gateway = FakeGateway([claude_body(text_block("I need more detail about the segment."))])

    async with httpx.AsyncClient(transport=httpx.MockTransport(gateway)) as client:
        rule = await generate_rule(
            claude_settings, rbac_settings, "Allow hybrid users", use_tools=False, client=client
        )

    # Not JSON, so the raw text comes back
    assert rule == "I need more detail about the segment."
    assert gateway.rbac_requests == []

    (payload,) = gateway.chat_payloads
    assert "system" not in payload
    assert "tools" not in payload
    assert payload["messages"][0]["content"][0]["text"] == build_simple_prompt("Allow hybrid users")


def test_simple_prompt_layout() -> None:
    prompt = build_simple_prompt("Allow RM users", existing_rules='[{"name":"RBAC_A"}]')

    assert prompt.startswith(RBAC_SYSTEM_PROMPT)
    assert '[{"name":"RBAC_A"}]' in prompt
    assert prompt.endswith("User Requirement: Allow RM users\n\nGenerate the RBAC rule(s) as JSON:")
    assert build_simple_prompt("Allow RM users").endswith(
        f"{RBAC_SYSTEM_PROMPT}\n\nUser Requirement: Allow RM users\n\nGenerate the RBAC rule(s) as JSON:"
    )


@pytest.mark.asyncio
async def test_plain_chat_agent_sends_no_system_prompt_or_tools(claude_settings: ClaudeSettings) -> None:
    gateway = FakeGateway([claude_body(text_block("Paris."))])

    async with httpx.AsyncClient(transport=httpx.MockTransport(gateway)) as client:
        async with create_claude_agent(claude_settings, client=client) as agent:
            result = await agent.invoke("What is the capital of France?")

    assert result.final_text == "Paris."
    (payload,) = gateway.chat_payloads
    assert "system" not in payload
    assert "tools" not in payload


@pytest.mark.asyncio
async def test_weather_agent_uses_default_system_prompt(claude_settings: ClaudeSettings) -> None:
    gateway = FakeGateway(
        [
            claude_body(tool_use_block("toolu_1", "get_weather", {"city": "Singapore"}), stop_reason="tool_use"),
            claude_body(text_block("86°F with thunderstorms.")),
        ]
    )

    async with httpx.AsyncClient(transport=httpx.MockTransport(gateway)) as client:
        async with create_claude_agent(claude_settings, tools=[get_weather], client=client) as agent:
            result = await agent.invoke("Weather in Singapore?")

    assert result.final_text == "86°F with thunderstorms."
    assert result.iterations_used == 2
    assert gateway.chat_payloads[0]["system"] == DEFAULT_SYSTEM_PROMPT
    assert json.loads(gateway.chat_payloads[1]["messages"][-1]["content"][0]["content"])["humidity"] == "90%"


def test_rbac_agent_advertises_the_rule_lookup(
    claude_settings: ClaudeSettings, rbac_settings: RBACSourceSettings
) -> None:
    agent = create_rbac_agent(claude_settings, rbac_settings, client=httpx.AsyncClient())

    assert agent.system_prompt == RBAC_SYSTEM_PROMPT
    assert [t.name for t in agent.loop.tool_descriptors] == ["fetch_rbac_rules"]
    assert agent.loop.max_iterations == 5
