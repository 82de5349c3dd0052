import os
from typing import Any

import pytest
from dotenv import load_dotenv, find_dotenv

from rbac_rule_agent.config import ClaudeSettings, RBACSourceSettings, ServerSettings, Settings
from helpers import CHAT_ENDPOINT, RBAC_ENDPOINT

# Load environment variables from .env file
env_file = find_dotenv(usecwd=True)
if env_file:
    print(f"Loading .env from: {env_file}")
    load_dotenv(env_file)


@pytest.fixture
def claude_settings() -> ClaudeSettings:
    return ClaudeSettings(endpoint=CHAT_ENDPOINT, bearer_token="test-token")


@pytest.fixture
def rbac_settings() -> RBACSourceSettings:
    return RBACSourceSettings(endpoint=RBAC_ENDPOINT, token="gateway-token")


@pytest.fixture
def settings(claude_settings: ClaudeSettings, rbac_settings: RBACSourceSettings) -> Settings:
    return Settings(claude=claude_settings, rbac=rbac_settings, server=ServerSettings())


@pytest.fixture(scope="session")
def vcr_config() -> dict[str, Any]:
    return {
        "cassette_library_dir": "tests/cassettes",
        "record_mode": os.getenv("VCR_RECORD_MODE", "once"),
        "match_on": ["method", "path", "query"],
        "filter_headers": [
            "authorization",
            "x-api-key",
            "api-key",
        ],
        "filter_query_parameters": ["key", "api_key", "access_token"],
        "decode_compressed_response": True,
    }
