"""
Triage Application Layer
=========================

Application layer for the complaint triage module.

Contains:
- Services: the triage engine and its application service
- DTOs: Data transfer objects for API serialization
"""

from src.triage.application.dto import (
    CategorizeRequest,
    CategorizationResponse,
    CategoryRuleInfo,
    RuleTableResponse,
)
from src.triage.application.services import (
    TriageEngine,
    ComplaintTriageService,
    classify_complaint,
    get_default_engine,
)

__all__ = [
    # DTOs
    "CategorizeRequest",
    "CategorizationResponse",
    "CategoryRuleInfo",
    "RuleTableResponse",
    # Services
    "TriageEngine",
    "ComplaintTriageService",
    "classify_complaint",
    "get_default_engine",
]
