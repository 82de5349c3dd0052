"""Collect concrete chat transport implementations."""

from .claude import ClaudeTransport, ClaudeMessageAdapter

__all__ = ["ClaudeTransport", "ClaudeMessageAdapter"]
