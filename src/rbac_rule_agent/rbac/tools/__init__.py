"""Business tools available to the agents."""

from .rbac_rules import FETCH_RBAC_RULES_DESCRIPTION, MAX_RETURNED_RULES, RBACRule, RBACRulesTool, filter_rules
from .weather import WEATHER_DATA, get_weather

__all__ = [
    "FETCH_RBAC_RULES_DESCRIPTION",
    "MAX_RETURNED_RULES",
    "RBACRule",
    "RBACRulesTool",
    "filter_rules",
    "WEATHER_DATA",
    "get_weather",
]
