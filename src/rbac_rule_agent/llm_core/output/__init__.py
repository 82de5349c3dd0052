"""Structured output extraction."""

from .extractor import JSON_FENCE_PATTERN, RuleOutputExtractor, extract_json

__all__ = ["JSON_FENCE_PATTERN", "RuleOutputExtractor", "extract_json"]
