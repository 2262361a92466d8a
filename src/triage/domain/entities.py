"""
Triage Domain Entities
======================

Domain entities for the complaint triage module.

Pure Python business objects: the caller-supplied classification input and
the classification result the engine hands back.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from src.config import Priority, ReporterTrust, TriageAgent
from src.core import ValidationException


@dataclass(frozen=True)
class ClassificationInput:
    """
    Complaint fields the triage engine classifies.

    ``description`` must be non-blank; the HTTP layer rejects a missing
    description before the engine is ever called.
    """
    description: str
    image_urls: Tuple[str, ...] = ()
    location: Optional[str] = None
    reporter_trust: Optional[ReporterTrust] = None

    def __post_init__(self):
        if not isinstance(self.description, str) or not self.description.strip():
            raise ValidationException(
                "Complaint description is required",
                {"field": "description"}
            )
        object.__setattr__(self, "image_urls", tuple(self.image_urls or ()))
        if self.reporter_trust is not None and not isinstance(self.reporter_trust, ReporterTrust):
            try:
                object.__setattr__(self, "reporter_trust", ReporterTrust(self.reporter_trust))
            except ValueError:
                raise ValidationException(
                    f"Unknown reporter trust '{self.reporter_trust}'",
                    {"field": "reporter_trust"}
                )

    @classmethod
    def create(
        cls,
        description: str,
        image_urls: Optional[Sequence[str]] = None,
        location: Optional[str] = None,
        reporter_trust: Union[ReporterTrust, str, None] = None,
    ) -> "ClassificationInput":
        return cls(
            description=description,
            image_urls=tuple(image_urls or ()),
            location=location,
            reporter_trust=reporter_trust,
        )

    @property
    def has_image_evidence(self) -> bool:
        return len(self.image_urls) > 0

    @property
    def is_trusted_reporter(self) -> bool:
        return self.reporter_trust == ReporterTrust.TRUSTED

    @property
    def has_location(self) -> bool:
        """A location is present unless it is absent or whitespace only."""
        return bool(self.location and self.location.strip())


@dataclass(frozen=True)
class ClassificationResult:
    """
    Result of complaint classification.

    Built fresh for every call and never mutated afterwards. Storage is the
    caller's concern.
    """
    issue_type: str
    urgency_label: str
    category: str
    subcategory: str
    priority: Priority
    confidence: float  # 0.0 to 0.95
    department: str
    estimated_resolution_time: str
    tags: Tuple[str, ...]
    agent: TriageAgent
    coordination_note: str
    matched_keywords: Tuple[str, ...] = ()
    escalated: bool = False
    # Placeholders for the ledger integration; constant True for every result.
    blockchain_ready: bool = field(default=True, init=False)
    attestation_eligible: bool = field(default=True, init=False)

    def __post_init__(self):
        """Validate classification result."""
        if not 0.0 <= self.confidence <= 0.95:
            raise ValueError("Confidence must be between 0 and 0.95")
