"""
Triage Domain Layer
===================

Domain layer for the complaint triage module.

Contains:
- Entities: ClassificationInput, ClassificationResult
- Value Objects: CategoryRule, KeywordMatcher, AgentRoute and the built-in
  rule table

This layer is framework-agnostic and contains pure business logic.
"""

from src.triage.domain.entities import (
    ClassificationInput,
    ClassificationResult,
)
from src.triage.domain.value_objects import (
    AGENT_ROUTES,
    DEFAULT_CATEGORY_RULES,
    DEFAULT_RULE,
    ESCALATION_KEYWORDS,
    AgentRoute,
    CategoryRule,
    KeywordMatcher,
    boost_confidence,
)

__all__ = [
    "ClassificationInput",
    "ClassificationResult",
    "AgentRoute",
    "CategoryRule",
    "KeywordMatcher",
    "AGENT_ROUTES",
    "DEFAULT_CATEGORY_RULES",
    "DEFAULT_RULE",
    "ESCALATION_KEYWORDS",
    "boost_confidence",
]
