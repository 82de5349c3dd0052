"""RBAC rule generator HTTP service."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from rbac_rule_agent.config import Settings
from rbac_rule_agent.llm_core.logger import get_logger
from rbac_rule_agent.rbac import generate_rule
from .schemas import GenerateRuleRequest, GenerateRuleResponse, HealthResponse

logger = get_logger(__name__)

RuleGenerator = Callable[[str, bool], Awaitable[Any]]

INVALID_REQUIREMENT_MESSAGE = "Missing or invalid 'requirement' field in request body"


def create_app(settings: Settings, rule_generator: Optional[RuleGenerator] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Validated service settings.
        rule_generator: Replaces the agent-backed generator, mainly for tests. Called as
            ``await rule_generator(requirement, use_tools)``.

    Returns:
        The application.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Startup / shutdown lifecycle: one shared HTTP client for the chat and policies APIs."""
        app.state.http_client = httpx.AsyncClient(timeout=None)
        logger.info(f"Chat endpoint: {settings.claude.endpoint}")
        if not settings.rbac.configured:
            logger.warning("RBAC_API_ENDPOINT or CLICON_GATEWAY_TOKEN not set; fetch_rbac_rules will report an error.")

        yield

        await app.state.http_client.aclose()
        logger.info("HTTP client closed")

    app = FastAPI(title="RBAC Rule Generator", version="0.1.0", lifespan=lifespan)
    app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])

    async def default_generator(requirement: str, use_tools: bool) -> Any:
        return await generate_rule(
            settings.claude,
            settings.rbac,
            requirement,
            use_tools=use_tools,
            client=app.state.http_client,
        )

    generator: RuleGenerator = rule_generator or default_generator

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info(f"Rejected request body: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": INVALID_REQUIREMENT_MESSAGE})

    @app.post("/api/generate-rule", response_model=GenerateRuleResponse, response_model_by_alias=True)
    async def generate(body: GenerateRuleRequest) -> Any:
        try:
            generated = await generator(body.requirement, body.use_tools)
        except Exception as exc:
            logger.error(f"Error generating RBAC rule: {exc}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to generate RBAC rule", "details": str(exc) or type(exc).__name__},
            )

        return GenerateRuleResponse(requirement=body.requirement, generated_rule=generated)

    @app.get("/api/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return HealthResponse(status="ok", timestamp=timestamp)

    public_dir = settings.server.public_dir
    if public_dir is not None and public_dir.is_dir():
        index_file = public_dir / "index.html"

        @app.get("/", include_in_schema=False)
        async def index() -> FileResponse:
            return FileResponse(index_file)

        app.mount("/", StaticFiles(directory=str(public_dir), html=True), name="public")

    return app
