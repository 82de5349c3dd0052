"""Agent loop and its result model."""

from .agent_loop import AgentLoop, run_agent
from .models import AgentRunResult

__all__ = ["AgentLoop", "AgentRunResult", "run_agent"]
