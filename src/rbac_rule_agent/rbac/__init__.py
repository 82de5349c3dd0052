"""RBAC rule generation built on the agent core."""

from .agent import (
    ClaudeAgent,
    SimpleRBACAgent,
    create_claude_agent,
    create_rbac_agent,
    create_simple_rbac_agent,
    generate_rule,
)
from .prompts import DEFAULT_SYSTEM_PROMPT, RBAC_SYSTEM_PROMPT, build_simple_prompt
from .tools import RBACRule, RBACRulesTool, get_weather

__all__ = [
    "ClaudeAgent",
    "SimpleRBACAgent",
    "create_claude_agent",
    "create_rbac_agent",
    "create_simple_rbac_agent",
    "generate_rule",
    "DEFAULT_SYSTEM_PROMPT",
    "RBAC_SYSTEM_PROMPT",
    "build_simple_prompt",
    "RBACRule",
    "RBACRulesTool",
    "get_weather",
]
