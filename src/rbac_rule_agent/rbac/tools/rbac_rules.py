"""Read-only tool that fetches existing RBAC rules as context for rule generation."""

from typing import Annotated, Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from rbac_rule_agent.config import RBACSourceSettings
from rbac_rule_agent.llm_core.logger import get_logger
from rbac_rule_agent.llm_core.tools import ToolRegistry
from .serialization import to_json

logger = get_logger(__name__)

# Bounds the size of the tool result fed back into the prompt
MAX_RETURNED_RULES = 20

FETCH_RBAC_RULES_DESCRIPTION = """Fetches existing RBAC (Role-Based Access Control) rules from the policies API.
Use this tool to get context about existing rules before generating new ones.
You can optionally filter rules by keywords like country codes (SG, HK), segments (PB, RETAIL, TREASURES),
APIs (MONEY_TRANSFER, CLIENT_EXCHANGE), or user types."""


class RBACRule(BaseModel):
    """One rule as returned by the policies API. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    rule_id: Optional[int] = Field(default=None, alias="ruleId")
    name: str = ""
    description: str = ""
    target: str = ""
    condition: str = ""
    type: str = ""
    overridable: str = ""
    hybrid: str = ""

    def matches(self, keyword: str) -> bool:
        """Case-insensitive substring match on name, description or target."""
        needle = keyword.lower()
        return any(needle in (value or "").lower() for value in (self.name, self.description, self.target))


def filter_rules(rules: List[RBACRule], keyword: Optional[str]) -> Dict[str, Any]:
    """Apply the keyword filter and the result cap.

    Returns:
        ``{totalRules, returnedRules, rules}`` where ``totalRules`` counts every match
        and ``rules`` holds at most ``MAX_RETURNED_RULES`` of them.
    """
    if keyword:
        rules = [rule for rule in rules if rule.matches(keyword)]

    limited = rules[:MAX_RETURNED_RULES]
    return {
        "totalRules": len(rules),
        "returnedRules": len(limited),
        "rules": [rule.model_dump(by_alias=True, exclude_unset=True) for rule in limited],
    }


class RBACRulesTool:
    """
    Fetches rules from the policies API with a bearer token.

    Failures are reported to the model as a JSON ``error`` payload, never raised.
    """

    name = "fetch_rbac_rules"

    def __init__(
        self,
        settings: RBACSourceSettings,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Args:
            settings: Endpoint and token of the policies API.
            client: Optional shared httpx client; a short-lived one is used otherwise.
            timeout: Request timeout in seconds.
        """
        self.settings = settings
        self.client = client
        self.timeout = timeout

    def register(self, registry: ToolRegistry) -> None:
        """Register ``fetch_rbac_rules`` in ``registry``."""
        registry.register(self.fetch_rbac_rules, description=FETCH_RBAC_RULES_DESCRIPTION)

    async def fetch_rbac_rules(
        self,
        filter: Annotated[
            Optional[str],
            Field(description="Optional filter keyword to search rules (e.g., 'MONEY_TRANSFER', 'SG', 'PB')"),
        ] = None,
    ) -> str:
        """Fetches existing RBAC rules, optionally filtered by a keyword."""
        if not self.settings.configured:
            msg = "Missing RBAC_API_ENDPOINT or CLICON_GATEWAY_TOKEN in environment"
            logger.warning(msg)
            return to_json({"error": msg})

        try:
            response = await self._get()
            if not response.is_success:
                logger.warning(f"RBAC API returned {response.status_code}.")
                return to_json(
                    {"error": f"Failed to fetch RBAC rules: {response.status_code} {response.reason_phrase}"}
                )

            payload = response.json()
            if not isinstance(payload, list):
                raise ValueError("expected a JSON array of rules")
            rules = [RBACRule.model_validate(item) for item in payload]
        except (httpx.HTTPError, ValueError) as e:
            msg = f"Error fetching RBAC rules: {e}"
            logger.error(msg)
            return to_json({"error": msg})

        result = filter_rules(rules, filter)
        logger.info(
            f"Fetched {len(rules)} RBAC rule(s); filter={filter!r} matched {result['totalRules']}, "
            f"returning {result['returnedRules']}."
        )
        return to_json(result)

    async def _get(self) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self.settings.token}",
            "Content-Type": "application/json",
        }
        url = str(self.settings.endpoint)
        if self.client is not None:
            return await self.client.get(url, headers=headers, timeout=self.timeout)

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, headers=headers)
