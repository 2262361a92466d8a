"""
Triage Value Objects
====================

Immutable value objects for the complaint triage domain.

Holds the built-in category rule table, the escalation keyword set, the
priority-to-agent routing table and the lexical matcher every stage shares.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

from src.config import Priority, TriageAgent


CONFIDENCE_CEILING = 0.95


class KeywordMatcher:
    """
    Pure functions for lexical feature matching.

    Matching is plain substring containment on the normalized text: no
    tokenization, no stemming, no word boundaries ("lighting" hits "light").
    """

    _WHITESPACE = re.compile(r"\s+")

    @staticmethod
    def normalize(text: str) -> str:
        """Lowercase form every keyword test runs against."""
        return text.lower()

    @staticmethod
    def contains_any(normalized: str, keywords: Tuple[str, ...]) -> bool:
        return any(keyword in normalized for keyword in keywords)

    @staticmethod
    def matching_keywords(normalized: str, keywords: Tuple[str, ...]) -> Tuple[str, ...]:
        """Keywords found in the text, in keyword-set order."""
        return tuple(keyword for keyword in keywords if keyword in normalized)

    @classmethod
    def location_slug(cls, location: str) -> str:
        """
        Normalize a free-text location for tagging.

        Lowercases the string and collapses every whitespace run, leading and
        trailing ones included, to a single underscore: "New  York" -> "new_york", " Ward 5" -> "_ward_5".
        """
        return cls._WHITESPACE.sub("_", location.lower())


@dataclass(frozen=True)
class CategoryRule:
    """
    Static record mapping a keyword set to classification fields.

    A rule matches when the normalized description contains ANY of its
    keywords. The default rule has no keywords and never matches on its own.
    """
    issue_type: str
    urgency_label: str
    category: str
    subcategory: str
    priority: Priority
    base_confidence: float
    department: str
    estimated_resolution_time: str
    keywords: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()

    def __post_init__(self):
        if not 0.0 <= self.base_confidence <= CONFIDENCE_CEILING:
            raise ValueError(f"base_confidence must be between 0 and {CONFIDENCE_CEILING}")
        if any(keyword != keyword.lower() for keyword in self.keywords):
            raise ValueError("keywords must be lowercase")

    def matches(self, normalized: str) -> bool:
        return KeywordMatcher.contains_any(normalized, self.keywords)


@dataclass(frozen=True)
class AgentRoute:
    """Handling agent and the coordination note seed for one priority."""
    agent: TriageAgent
    note_seed: str


DEFAULT_RULE = CategoryRule(
    issue_type="General Complaint",
    urgency_label="Low",
    category="general",
    subcategory="other",
    priority=Priority.LOW,
    base_confidence=0.7,
    department="General Services",
    estimated_resolution_time="5-7 days",
)

# Evaluation order is significant: first match wins.
DEFAULT_CATEGORY_RULES: Tuple[CategoryRule, ...] = (
    CategoryRule(
        issue_type="Road Infrastructure",
        urgency_label="High",
        category="infrastructure",
        subcategory="road_maintenance",
        priority=Priority.HIGH,
        base_confidence=0.9,
        department="Roads & Transportation",
        estimated_resolution_time="2-4 days",
        keywords=("pothole", "road damage", "street", "pavement"),
        tags=("roads", "infrastructure", "maintenance"),
    ),
    CategoryRule(
        issue_type="Waste Management",
        urgency_label="Medium",
        category="sanitation",
        subcategory="waste_collection",
        priority=Priority.MEDIUM,
        base_confidence=0.85,
        department="Sanitation Department",
        estimated_resolution_time="1-2 days",
        keywords=("garbage", "waste", "trash", "litter"),
        tags=("waste", "sanitation", "cleanliness"),
    ),
    CategoryRule(
        issue_type="Water Infrastructure",
        urgency_label="High",
        category="utilities",
        subcategory="water_supply",
        priority=Priority.HIGH,
        base_confidence=0.9,
        department="Water Department",
        estimated_resolution_time="1-3 days",
        keywords=("water", "leak", "pipe", "flooding"),
        tags=("water", "utilities", "infrastructure"),
    ),
    CategoryRule(
        issue_type="Street Lighting",
        urgency_label="Medium",
        category="utilities",
        subcategory="electrical",
        priority=Priority.MEDIUM,
        base_confidence=0.8,
        department="Electrical Department",
        estimated_resolution_time="2-3 days",
        keywords=("light", "lamp", "dark", "electricity"),
        tags=("lighting", "electricity", "safety"),
    ),
    CategoryRule(
        issue_type="Noise Complaint",
        urgency_label="Low",
        category="public_order",
        subcategory="noise_control",
        priority=Priority.LOW,
        base_confidence=0.75,
        department="Public Safety",
        estimated_resolution_time="3-5 days",
        keywords=("noise", "loud", "sound"),
        tags=("noise", "public_order", "quality_of_life"),
    ),
)

ESCALATION_KEYWORDS: Tuple[str, ...] = ("emergency", "urgent", "immediate", "dangerous")
ESCALATION_URGENCY_LABEL = "Critical"
ESCALATION_RESOLUTION_TIME = "0-24 hours"
ESCALATION_TAG = "emergency"

IMAGE_VERIFIED_TAG = "image_verified"
LOCATION_TAG_PREFIX = "location:"
EVIDENCE_BOOST = 0.1
TRUST_BOOST = 0.1

TRUSTED_REPORTER_NOTE = "Reporter has verified history"
LOCATION_NOTE_TEMPLATE = "Location-based routing to {department}"
NOTE_SEPARATOR = ". "

AGENT_ROUTES: Mapping[Priority, AgentRoute] = MappingProxyType({
    Priority.URGENT: AgentRoute(TriageAgent.EMERGENCY, "Escalated to emergency protocols"),
    Priority.HIGH: AgentRoute(TriageAgent.PRIORITY, "Flagged for priority handling"),
    Priority.MEDIUM: AgentRoute(TriageAgent.TRIAGE, "Initial categorization completed"),
    Priority.LOW: AgentRoute(TriageAgent.TRIAGE, "Initial categorization completed"),
})


def boost_confidence(confidence: float, boost: float, ceiling: float = CONFIDENCE_CEILING) -> float:
    """
    Raise confidence by ``boost`` and clamp to the ceiling.

    Each boost clamps on its own, so image evidence plus a trusted reporter
    is min(0.95, min(0.95, c + 0.1) + 0.1), not a flat +0.2. The result is
    rounded to ten places, which drops float drift (0.7 + 0.1 is 0.8) and
    keeps a three-decimal base such as 0.825 exact.
    """
    return round(min(ceiling, confidence + boost), 10)
