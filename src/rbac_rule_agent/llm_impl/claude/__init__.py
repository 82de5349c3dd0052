"""Expose the Claude chat transport and its wire-format adapter."""

from .adapter import ClaudeMessageAdapter
from .core import ClaudeTransport

__all__ = ["ClaudeTransport", "ClaudeMessageAdapter"]
