"""Agent factories: plain chat, tool-using chat and RBAC rule generation."""

import asyncio
from types import TracebackType
from typing import Any, Callable, Iterable, Optional, Type, Union

import httpx

from rbac_rule_agent.config import ClaudeSettings, RBACSourceSettings
from rbac_rule_agent.llm_core.agent import AgentLoop, AgentRunResult
from rbac_rule_agent.llm_core.logger import get_logger
from rbac_rule_agent.llm_core.output import extract_json
from rbac_rule_agent.llm_core.tools import ToolDefinition, ToolRegistry
from rbac_rule_agent.llm_impl.claude import ClaudeTransport
from .prompts import DEFAULT_SYSTEM_PROMPT, RBAC_SYSTEM_PROMPT, build_simple_prompt
from .tools import RBACRulesTool

logger = get_logger(__name__)

RBAC_MAX_ITERATIONS = 5
RBAC_TEMPERATURE = 0.3
RBAC_MAX_TOKENS = 4096
DEFAULT_MAX_ITERATIONS = 15


class ClaudeAgent:
    """An agent loop bound to a transport and a system prompt."""

    def __init__(self, loop: AgentLoop, transport: ClaudeTransport, system_prompt: Optional[str] = None) -> None:
        self.loop = loop
        self.transport = transport
        self.system_prompt = system_prompt

    async def invoke(self, user_input: str, cancel_event: Optional[asyncio.Event] = None) -> AgentRunResult:
        """Run the agent for one user input."""
        return await self.loop.run(user_input, system_prompt=self.system_prompt, cancel_event=cancel_event)

    async def aclose(self) -> None:
        await self.transport.aclose()

    async def __aenter__(self) -> "ClaudeAgent":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()


class SimpleRBACAgent(ClaudeAgent):
    """Generates rules in a single model call, without tools."""

    async def invoke(  # type: ignore[override]
        self,
        user_input: str,
        existing_rules: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> AgentRunResult:
        """Run one model call on the composed rule-generation prompt.

        Args:
            user_input: The requirement for the new rule.
            existing_rules: Optional serialized rules to include as reference.
            cancel_event: Optional cancellation signal.
        """
        prompt = build_simple_prompt(user_input, existing_rules)
        return await self.loop.run(prompt, cancel_event=cancel_event)


def create_claude_agent(
    settings: ClaudeSettings,
    tools: Optional[Iterable[Union[Callable, ToolDefinition]]] = None,
    *,
    system_prompt: Optional[str] = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    client: Optional[httpx.AsyncClient] = None,
    **transport_overrides: Any,
) -> ClaudeAgent:
    """
    Create a general-purpose agent.

    Without tools the agent is a plain chat: one model call and no system prompt
    unless one is given. With tools it uses ``DEFAULT_SYSTEM_PROMPT`` by default.

    Args:
        settings: Chat endpoint settings.
        tools: Callables or ToolDefinitions to register.
        system_prompt: Overrides the default system prompt.
        max_iterations: Maximum number of model calls per run.
        client: Optional shared httpx client.
        **transport_overrides: Overrides for the transport (max_tokens, temperature, ...).

    Returns:
        The configured agent.
    """
    registry = ToolRegistry()
    for tool in tools or []:
        registry.register(tool)

    if len(registry) == 0:
        transport = ClaudeTransport.from_settings(settings, client=client, **transport_overrides)
        loop = AgentLoop(transport, max_iterations=max_iterations)
        return ClaudeAgent(loop, transport, system_prompt)

    transport = ClaudeTransport.from_settings(settings, tools=registry.describe(), client=client, **transport_overrides)
    loop = AgentLoop(transport, registry, max_iterations=max_iterations)
    return ClaudeAgent(loop, transport, system_prompt or DEFAULT_SYSTEM_PROMPT)


def create_rbac_agent(
    settings: ClaudeSettings,
    rbac_settings: RBACSourceSettings,
    client: Optional[httpx.AsyncClient] = None,
) -> ClaudeAgent:
    """Create the rule-generation agent that looks up existing rules before answering."""
    registry = ToolRegistry()
    RBACRulesTool(rbac_settings, client=client).register(registry)

    transport = ClaudeTransport.from_settings(
        settings,
        tools=registry.describe(),
        client=client,
        max_tokens=RBAC_MAX_TOKENS,
        temperature=RBAC_TEMPERATURE,
    )
    loop = AgentLoop(transport, registry, max_iterations=RBAC_MAX_ITERATIONS)
    return ClaudeAgent(loop, transport, RBAC_SYSTEM_PROMPT)


def create_simple_rbac_agent(settings: ClaudeSettings, client: Optional[httpx.AsyncClient] = None) -> SimpleRBACAgent:
    """Create the tool-less rule-generation agent."""
    transport = ClaudeTransport.from_settings(
        settings,
        client=client,
        max_tokens=RBAC_MAX_TOKENS,
        temperature=RBAC_TEMPERATURE,
    )
    return SimpleRBACAgent(AgentLoop(transport, max_iterations=1), transport)


async def generate_rule(
    settings: ClaudeSettings,
    rbac_settings: RBACSourceSettings,
    requirement: str,
    use_tools: bool = True,
    client: Optional[httpx.AsyncClient] = None,
) -> Any:
    """
    Generate an RBAC rule for ``requirement``.

    Args:
        settings: Chat endpoint settings.
        rbac_settings: Policies API settings for the rule lookup tool.
        requirement: Natural-language description of the rule.
        use_tools: Let the model fetch existing rules first.
        client: Optional shared httpx client.

    Returns:
        The parsed rule JSON, or the model's raw text if it is not valid JSON.
    """
    logger.info(f"Generating RBAC rule for: {requirement} (using tools: {use_tools})")

    agent: ClaudeAgent
    if use_tools:
        agent = create_rbac_agent(settings, rbac_settings, client=client)
    else:
        agent = create_simple_rbac_agent(settings, client=client)

    async with agent:
        result = await agent.invoke(requirement)

    logger.info(
        f"Rule generation finished after {result.iterations_used} model call(s), "
        f"{result.usage.total_tokens} token(s)."
    )
    return extract_json(result.final_text)
