"""Tool registry: registration, description and execution of agent tools."""

from .base import ToolRegistry

__all__ = ["ToolRegistry"]
