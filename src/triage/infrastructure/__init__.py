"""
Triage Infrastructure Layer
============================

Infrastructure implementations for the complaint triage module.

Contains:
- External: YAML rule table loader
"""

from src.triage.infrastructure.external import (
    CategoryRuleConfig,
    RuleTableConfig,
    RuleTableLoader,
)

__all__ = [
    "CategoryRuleConfig",
    "RuleTableConfig",
    "RuleTableLoader",
]
