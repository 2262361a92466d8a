"""
Triage Controllers (API Routes)
================================

FastAPI routes for complaint triage endpoints.

Controllers delegate to the application service; request validation
(a missing or blank description) is handled here by pydantic before the
engine is called.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from src.shared.infrastructure.logging import get_logger
from src.triage.application import (
    CategorizationResponse,
    CategorizeRequest,
    CategoryRuleInfo,
    ComplaintTriageService,
    RuleTableResponse,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/triage", tags=["Complaint Triage"])


# ========== Example payloads for Swagger ==========

CATEGORIZE_REQUEST_EXAMPLE = {
    "description": "urgent water leak near school",
    "imageUrls": ["a.jpg"],
    "location": "Ward 5",
    "reporterTrust": "trusted"
}

CATEGORIZE_RESPONSE_EXAMPLE = {
    "issueType": "Water Infrastructure",
    "urgencyLabel": "Critical",
    "category": "utilities",
    "subcategory": "water_supply",
    "priority": "urgent",
    "confidence": 0.95,
    "department": "Water Department",
    "estimatedResolutionTime": "0-24 hours",
    "tags": ["water", "utilities", "infrastructure", "emergency", "image_verified", "location:ward_5"],
    "agent": "EmergencyTriageAgent",
    "coordinationNote": (
        "Escalated to emergency protocols. Location-based routing to Water Department. "
        "Reporter has verified history"
    ),
    "blockchainReady": True,
    "attestationEligible": True,
    "matchedKeywords": ["water", "leak"],
    "escalated": True,
    "processingTimeMs": 0
}


# ========== Dependencies ==========

def get_triage_service(request: Request) -> ComplaintTriageService:
    """Get the triage service built during application startup."""
    service = getattr(request.app.state, "triage_service", None)
    if service is None:
        raise HTTPException(
            status_code=503,
            detail="Triage service not initialized"
        )
    return service


# ========== Route Handlers ==========

@router.post(
    "/categorize",
    response_model=CategorizationResponse,
    summary="Categorize a complaint",
    description="""
    Classify a citizen complaint with the deterministic triage engine:
    - **Category**: first matching rule wins (roads, waste, water, lighting, noise, general)
    - **Escalation**: emergency wording forces `urgent` priority
    - **Confidence**: boosted by image evidence and trusted reporters, capped at 0.95
    - **Agent**: EmergencyTriageAgent, PriorityTriageAgent or TriageAgent
    """,
    responses={
        200: {
            "description": "Complaint categorized successfully",
            "content": {
                "application/json": {
                    "example": CATEGORIZE_RESPONSE_EXAMPLE
                }
            }
        },
        422: {
            "description": "Missing or blank description"
        },
        503: {
            "description": "Triage service not initialized"
        }
    }
)
async def categorize_complaint(
    request: Request,
    payload: CategorizeRequest,
    service: ComplaintTriageService = Depends(get_triage_service)
):
    correlation_id = getattr(request.state, "correlation_id", "unknown")

    logger.info(
        "Categorizing complaint",
        extra={
            "correlation_id": correlation_id,
            "image_count": len(payload.image_urls),
            "has_location": payload.location is not None,
            "has_title": payload.title is not None,
        }
    )

    result, elapsed_ms = service.categorize(
        description=payload.description,
        image_urls=payload.image_urls,
        location=payload.location,
        reporter_trust=payload.reporter_trust,
        title=payload.title,
        correlation_id=correlation_id,
    )

    return CategorizationResponse.from_domain(result, elapsed_ms)


@router.get(
    "/categories",
    response_model=RuleTableResponse,
    summary="Get the active category rule table",
    description="Rules in evaluation order, the default rule and the escalation keywords."
)
async def get_categories(
    service: ComplaintTriageService = Depends(get_triage_service)
):
    engine = service.engine
    return RuleTableResponse(
        rules=[CategoryRuleInfo.from_domain(rule) for rule in engine.rules],
        default_rule=CategoryRuleInfo.from_domain(engine.default_rule),
        escalation_keywords=list(engine.escalation_keywords),
    )


# Export router for inclusion in main app
triage_router = router
