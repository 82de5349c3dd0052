"""Configuration models and their loading from the process environment."""

import os
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .llm_core.exceptions import ConfigurationError
from .llm_core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_ANTHROPIC_VERSION = "vertex-2023-10-16"


class ClaudeSettings(BaseModel):
    """
    Connection settings of the chat endpoint.

    Attributes:
        endpoint: URL the messages request is POSTed to.
        bearer_token: Token sent as ``Authorization: Bearer <token>``.
        anthropic_version: Value of the ``anthropic_version`` body field.
        max_tokens: Default token limit per call.
        temperature: Default sampling temperature.
    """

    endpoint: str = Field(min_length=1)
    bearer_token: str = Field(min_length=1, repr=False)
    anthropic_version: str = DEFAULT_ANTHROPIC_VERSION
    max_tokens: int = Field(default=4096, gt=0)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)


class RBACSourceSettings(BaseModel):
    """Where the fetch_rbac_rules tool reads existing rules from. Both fields are optional at startup."""

    endpoint: Optional[str] = None
    token: Optional[str] = Field(default=None, repr=False)

    @property
    def configured(self) -> bool:
        return bool(self.endpoint and self.token)


class ServerSettings(BaseModel):
    """HTTP service settings."""

    host: str = "0.0.0.0"
    port: int = 3000
    public_dir: Optional[Path] = None
    log_level: str = "INFO"


class Settings(BaseModel):
    """Everything the service needs, passed explicitly to each component."""

    claude: ClaudeSettings
    rbac: RBACSourceSettings = Field(default_factory=RBACSourceSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def load_settings(dotenv: bool = True) -> Settings:
    """Read the settings from the environment, optionally after loading a ``.env`` file.

    Args:
        dotenv: Load variables from the nearest ``.env`` file first. Existing
            environment variables are not overridden.

    Returns:
        The validated settings.

    Raises:
        ConfigurationError: If the chat endpoint or bearer token is missing, or a value is invalid.
    """
    if dotenv:
        env_file = find_dotenv(usecwd=True)
        if env_file:
            logger.debug(f"Loading .env from: {env_file}")
            load_dotenv(env_file)

    endpoint = _env("CLAUDE_API_ENDPOINT")
    bearer_token = _env("CLAUDE_BEARER_TOKEN")
    if not endpoint or not bearer_token:
        msg = "Missing CLAUDE_API_ENDPOINT or CLAUDE_BEARER_TOKEN in environment variables"
        logger.error(msg)
        raise ConfigurationError(msg)

    claude: dict = {"endpoint": endpoint, "bearer_token": bearer_token}
    for field_name, env_name in (
        ("anthropic_version", "CLAUDE_ANTHROPIC_VERSION"),
        ("max_tokens", "CLAUDE_MAX_TOKENS"),
        ("temperature", "CLAUDE_TEMPERATURE"),
    ):
        value = _env(env_name)
        if value is not None:
            claude[field_name] = value

    server: dict = {}
    for field_name, env_name in (("host", "HOST"), ("port", "PORT"), ("public_dir", "PUBLIC_DIR"), ("log_level", "LOG_LEVEL")):
        value = _env(env_name)
        if value is not None:
            server[field_name] = value

    try:
        return Settings(
            claude=ClaudeSettings(**claude),
            rbac=RBACSourceSettings(endpoint=_env("RBAC_API_ENDPOINT"), token=_env("CLICON_GATEWAY_TOKEN")),
            server=ServerSettings(**server),
        )
    except ValidationError as exc:
        msg = f"Invalid configuration: {exc}"
        logger.error(msg)
        raise ConfigurationError(msg) from exc
