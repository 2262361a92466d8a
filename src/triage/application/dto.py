"""
Triage Application DTOs
========================

Data Transfer Objects for the Triage API layer.

Pydantic models for request/response validation. The wire format is
camelCase; snake_case field names are accepted on input too.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.triage.domain import CategoryRule, ClassificationResult


# ========== Type Aliases for Literals ==========
PriorityStr = Literal["low", "medium", "high", "urgent"]
ReporterTrustStr = Literal["trusted"]
AgentStr = Literal["TriageAgent", "EmergencyTriageAgent", "PriorityTriageAgent"]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ========== Request DTOs ==========

class CategorizeRequest(CamelModel):
    """Request model for complaint categorization."""
    description: str = Field(..., min_length=1, description="Complaint description")
    title: Optional[str] = Field(None, description="Complaint title, prepended to the description")
    image_urls: List[str] = Field(default_factory=list, description="Evidence image URLs")
    location: Optional[str] = Field(None, description="Free-text location")
    reporter_trust: Optional[ReporterTrustStr] = Field(
        None, description="'trusted' when the reporter has verified history"
    )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        """Reject whitespace-only descriptions and oversized payloads."""
        if not v.strip():
            raise ValueError("Description must not be blank")
        if len(v) > 10000:
            raise ValueError("Description too long (max 10000 characters)")
        return v


# ========== Response DTOs ==========

class CategorizationResponse(CamelModel):
    """Response model for complaint categorization."""
    issue_type: str
    urgency_label: str
    category: str
    subcategory: str
    priority: PriorityStr
    confidence: float = Field(..., ge=0.0, le=0.95)
    department: str
    estimated_resolution_time: str
    tags: List[str]
    agent: AgentStr
    coordination_note: str
    blockchain_ready: bool
    attestation_eligible: bool
    matched_keywords: List[str]
    escalated: bool
    processing_time_ms: int = 0

    @classmethod
    def from_domain(cls, result: ClassificationResult, processing_time_ms: int = 0) -> "CategorizationResponse":
        """Create from domain result."""
        return cls(
            issue_type=result.issue_type,
            urgency_label=result.urgency_label,
            category=result.category,
            subcategory=result.subcategory,
            priority=result.priority.value,
            confidence=result.confidence,
            department=result.department,
            estimated_resolution_time=result.estimated_resolution_time,
            tags=list(result.tags),
            agent=result.agent.value,
            coordination_note=result.coordination_note,
            blockchain_ready=result.blockchain_ready,
            attestation_eligible=result.attestation_eligible,
            matched_keywords=list(result.matched_keywords),
            escalated=result.escalated,
            processing_time_ms=processing_time_ms,
        )


class CategoryRuleInfo(CamelModel):
    """One entry of the active category rule table."""
    issue_type: str
    keywords: List[str]
    urgency_label: str
    category: str
    subcategory: str
    priority: PriorityStr
    base_confidence: float
    department: str
    estimated_resolution_time: str
    tags: List[str]

    @classmethod
    def from_domain(cls, rule: CategoryRule) -> "CategoryRuleInfo":
        return cls(
            issue_type=rule.issue_type,
            keywords=list(rule.keywords),
            urgency_label=rule.urgency_label,
            category=rule.category,
            subcategory=rule.subcategory,
            priority=rule.priority.value,
            base_confidence=rule.base_confidence,
            department=rule.department,
            estimated_resolution_time=rule.estimated_resolution_time,
            tags=list(rule.tags),
        )


class RuleTableResponse(CamelModel):
    """Response model for the active rule table, in evaluation order."""
    rules: List[CategoryRuleInfo]
    default_rule: CategoryRuleInfo
    escalation_keywords: List[str]
