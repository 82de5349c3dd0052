from datetime import datetime
from pathlib import Path
from typing import Any, List, Tuple
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from rbac_rule_agent.config import ServerSettings, Settings
from rbac_rule_agent.llm_core import TransportError
from rbac_rule_agent.server import create_app

RULE = {"name": "RBAC_CLIENT_EXCHANGE_TREASURES_SG_USERS_7", "type": "R"}


def make_client(settings: Settings, calls: List[Tuple[str, bool]], result: Any = RULE) -> TestClient:
    async def fake_generator(requirement: str, use_tools: bool) -> Any:
        calls.append((requirement, use_tools))
        if isinstance(result, Exception):
            raise result
        return result

    return TestClient(create_app(settings, rule_generator=fake_generator))


def test_generate_rule_success(settings: Settings) -> None:
    calls: List[Tuple[str, bool]] = []

    with make_client(settings, calls) as client:
        response = client.post("/api/generate-rule", json={"requirement": "Allow treasures users in SG"})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "requirement": "Allow treasures users in SG",
        "generatedRule": RULE,
    }
    assert calls == [("Allow treasures users in SG", True)]


def test_generate_rule_passes_use_tools_flag(settings: Settings) -> None:
    calls: List[Tuple[str, bool]] = []

    with make_client(settings, calls, result="raw model text") as client:
        response = client.post("/api/generate-rule", json={"requirement": "Allow RM users", "useTools": False})

    assert response.status_code == 200
    assert response.json()["generatedRule"] == "raw model text"
    assert calls == [("Allow RM users", False)]


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"requirement": ""},
        {"requirement": 42},
        {"requirement": None},
        {"useTools": True},
    ],
)
def test_generate_rule_rejects_invalid_requirement(settings: Settings, body: Any) -> None:
    calls: List[Tuple[str, bool]] = []

    with make_client(settings, calls) as client:
        response = client.post("/api/generate-rule", json=body)

    assert response.status_code == 400
    assert response.json() == {"error": "Missing or invalid 'requirement' field in request body"}
    assert calls == []


def test_generate_rule_reports_generation_failure(settings: Settings) -> None:
    calls: List[Tuple[str, bool]] = []
    error = TransportError(502, "bad gateway")

    with make_client(settings, calls, result=error) as client:
        response = client.post("/api/generate-rule", json={"requirement": "Allow PB users"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to generate RBAC rule",
        "details": "API request failed: 502 - bad gateway",
    }


def test_health(settings: Settings) -> None:
    with make_client(settings, []) as client:
        response = client.get("/api/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["timestamp"].endswith("Z")
    datetime.fromisoformat(body["timestamp"].replace("Z", "+00:00"))


def test_static_files_are_served(settings: Settings, tmp_path: Path) -> None:
    (tmp_path / "index.html").write_text("<h1>RBAC Rule Generator</h1>")
    (tmp_path / "app.js").write_text("console.log('hi');")
    settings = settings.model_copy(update={"server": ServerSettings(public_dir=tmp_path)})

    with make_client(settings, []) as client:
        index = client.get("/")
        script = client.get("/app.js")
        health = client.get("/api/health")

    assert index.status_code == 200
    assert "RBAC Rule Generator" in index.text
    assert script.status_code == 200
    assert health.status_code == 200


def test_cors_allows_any_origin(settings: Settings) -> None:
    with make_client(settings, []) as client:
        response = client.get("/api/health", headers={"Origin": "https://ui.example.test"})

    assert response.headers["access-control-allow-origin"] == "*"


def test_default_use_tools_with_async_mock_generator(settings: Settings) -> None:
    generator = AsyncMock(return_value=[RULE])

    with TestClient(create_app(settings, rule_generator=generator)) as client:
        response = client.post("/api/generate-rule", json={"requirement": "Allow SSR users"})

    assert response.json()["generatedRule"] == [RULE]
    generator.assert_awaited_once_with("Allow SSR users", True)
