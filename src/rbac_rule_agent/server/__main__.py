"""Run the RBAC rule generator service: ``python -m rbac_rule_agent.server``."""

import sys

import uvicorn

from rbac_rule_agent.config import load_settings
from rbac_rule_agent.llm_core.exceptions import ConfigurationError
from rbac_rule_agent.llm_core.logger import get_logger, setup_logging
from .app import create_app

logger = get_logger(__name__)


def main() -> None:
    setup_logging()
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(f"Cannot start server: {e}")
        sys.exit(1)

    setup_logging(settings.server.log_level)
    app = create_app(settings)

    banner = "=" * 50
    logger.info(banner)
    logger.info("RBAC Rule Generator Server")
    logger.info(f"Server running at: http://{settings.server.host}:{settings.server.port}")
    logger.info("API endpoint: POST /api/generate-rule")
    logger.info("Health check: GET /api/health")
    logger.info(banner)

    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_level=settings.server.log_level.lower())


if __name__ == "__main__":
    main()
