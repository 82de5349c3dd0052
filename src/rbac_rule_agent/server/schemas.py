"""Pydantic models for the HTTP API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GenerateRuleRequest(BaseModel):
    """Request body of ``POST /api/generate-rule``."""

    model_config = ConfigDict(populate_by_name=True)

    requirement: str = Field(..., min_length=1)
    use_tools: bool = Field(default=True, alias="useTools")


class GenerateRuleResponse(BaseModel):
    """Successful rule generation. ``generatedRule`` is parsed JSON or the raw model text."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    requirement: str
    generated_rule: Any = Field(alias="generatedRule")


class HealthResponse(BaseModel):
    status: str
    timestamp: str
