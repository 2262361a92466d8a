"""
Triage Application Services
============================

The complaint triage engine and the application service that exposes it to
the HTTP layer.

The engine is a linear pipeline over one complaint:

    matcher -> category resolver -> escalation filter
            -> evidence/trust adjuster -> location enricher -> agent dispatcher

Every stage is a pure computation. The engine keeps no state between calls
beyond its read-only rule table, so one instance can serve concurrent
requests without locking.
"""

from functools import lru_cache
from typing import List, Optional, Sequence, Tuple, Union

from src.config import Priority, ReporterTrust
from src.core import ConfigurationException
from src.shared.infrastructure.logging import get_logger, log_latency
from src.triage.domain import (
    AGENT_ROUTES,
    DEFAULT_CATEGORY_RULES,
    DEFAULT_RULE,
    ESCALATION_KEYWORDS,
    CategoryRule,
    ClassificationInput,
    ClassificationResult,
    KeywordMatcher,
    boost_confidence,
)
from src.triage.domain.value_objects import (
    ESCALATION_RESOLUTION_TIME,
    ESCALATION_TAG,
    ESCALATION_URGENCY_LABEL,
    EVIDENCE_BOOST,
    IMAGE_VERIFIED_TAG,
    LOCATION_NOTE_TEMPLATE,
    LOCATION_TAG_PREFIX,
    NOTE_SEPARATOR,
    TRUST_BOOST,
    TRUSTED_REPORTER_NOTE,
)

logger = get_logger(__name__)


class TriageEngine:
    """
    Deterministic rule engine that classifies a complaint.

    Args:
        rules: Ordered category rule table; the first rule with a keyword
            hit wins.
        default_rule: Record used when no rule matches.
        escalation_keywords: Keywords that force urgent priority.
    """

    def __init__(
        self,
        rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES,
        default_rule: CategoryRule = DEFAULT_RULE,
        escalation_keywords: Sequence[str] = ESCALATION_KEYWORDS,
    ):
        if not rules:
            raise ConfigurationException("Category rule table is empty")
        self._rules: Tuple[CategoryRule, ...] = tuple(rules)
        self._default_rule = default_rule
        self._escalation_keywords: Tuple[str, ...] = tuple(escalation_keywords)

    @property
    def rules(self) -> Tuple[CategoryRule, ...]:
        return self._rules

    @property
    def default_rule(self) -> CategoryRule:
        return self._default_rule

    @property
    def escalation_keywords(self) -> Tuple[str, ...]:
        return self._escalation_keywords

    def classify(self, payload: ClassificationInput) -> ClassificationResult:
        """
        Run the full pipeline over one complaint.

        Args:
            payload: Complaint description plus optional evidence, location
                and reporter trust

        Returns:
            ClassificationResult built fresh for this call
        """
        text = KeywordMatcher.normalize(payload.description)

        rule, matched_keywords = self.resolve_category(text)

        # Rule fields are copied one by one; default tags never leak in.
        priority = rule.priority
        urgency_label = rule.urgency_label
        resolution_time = rule.estimated_resolution_time
        tags: List[str] = list(rule.tags)

        escalated = self.is_escalation(text)
        if escalated:
            priority = Priority.URGENT
            urgency_label = ESCALATION_URGENCY_LABEL
            resolution_time = ESCALATION_RESOLUTION_TIME
            tags.append(ESCALATION_TAG)

        confidence = rule.base_confidence
        if payload.has_image_evidence:
            confidence = boost_confidence(confidence, EVIDENCE_BOOST)
            tags.append(IMAGE_VERIFIED_TAG)
        if payload.is_trusted_reporter:
            confidence = boost_confidence(confidence, TRUST_BOOST)

        if payload.has_location:
            tags.append(LOCATION_TAG_PREFIX + KeywordMatcher.location_slug(payload.location))

        route = AGENT_ROUTES[priority]
        note = self.compose_note(
            route.note_seed,
            department=rule.department if payload.has_location else None,
            trusted=payload.is_trusted_reporter,
        )

        result = ClassificationResult(
            issue_type=rule.issue_type,
            urgency_label=urgency_label,
            category=rule.category,
            subcategory=rule.subcategory,
            priority=priority,
            confidence=confidence,
            department=rule.department,
            estimated_resolution_time=resolution_time,
            tags=tuple(tags),
            agent=route.agent,
            coordination_note=note,
            matched_keywords=matched_keywords,
            escalated=escalated,
        )

        logger.debug(
            "Complaint classified",
            extra={
                "category": result.category,
                "subcategory": result.subcategory,
                "priority": result.priority.value,
                "agent": result.agent.value,
                "escalated": escalated,
                "confidence": result.confidence,
            }
        )
        return result

    def resolve_category(self, normalized: str) -> Tuple[CategoryRule, Tuple[str, ...]]:
        """
        Pick the first rule whose keyword set hits the normalized text.

        Returns:
            Tuple of (rule, keywords of that rule found in the text). The
            default rule comes back with no keywords when nothing matches.
        """
        for rule in self._rules:
            hits = KeywordMatcher.matching_keywords(normalized, rule.keywords)
            if hits:
                return rule, hits
        return self._default_rule, ()

    def is_escalation(self, normalized: str) -> bool:
        return KeywordMatcher.contains_any(normalized, self._escalation_keywords)

    @staticmethod
    def compose_note(
        note_seed: str,
        department: Optional[str] = None,
        trusted: bool = False,
    ) -> str:
        """Agent seed, then location routing, then reporter history."""
        fragments = [note_seed]
        if department is not None:
            fragments.append(LOCATION_NOTE_TEMPLATE.format(department=department))
        if trusted:
            fragments.append(TRUSTED_REPORTER_NOTE)
        return NOTE_SEPARATOR.join(fragments)


class ComplaintTriageService:
    """
    Service for complaint categorization.

    Builds the engine input from request fields, times the call and logs the
    outcome.
    """

    def __init__(self, engine: TriageEngine):
        self._engine = engine

    @property
    def engine(self) -> TriageEngine:
        return self._engine

    def categorize(
        self,
        description: str,
        image_urls: Optional[Sequence[str]] = None,
        location: Optional[str] = None,
        reporter_trust: Union[ReporterTrust, str, None] = None,
        title: Optional[str] = None,
        correlation_id: str = "unknown",
    ) -> Tuple[ClassificationResult, int]:
        """
        Categorize a complaint.

        Args:
            description: Complaint text
            image_urls: Uploaded evidence image URLs
            location: Free-text location
            reporter_trust: "trusted" when the reporter has verified history
            title: Optional complaint title, prepended to the description
            correlation_id: Request correlation ID for logging

        Returns:
            Tuple of (ClassificationResult, processing time in ms)
        """
        text = f"{title} {description}" if title and title.strip() else description
        payload = ClassificationInput.create(
            description=text,
            image_urls=image_urls,
            location=location,
            reporter_trust=reporter_trust,
        )

        with log_latency(logger, "categorize", correlation_id=correlation_id) as timer:
            result = self._engine.classify(payload)

        logger.info(
            "Complaint categorized",
            extra={
                "correlation_id": correlation_id,
                "category": result.category,
                "priority": result.priority.value,
                "agent": result.agent.value,
                "confidence": result.confidence,
                "tag_count": len(result.tags),
            }
        )
        return result, timer.elapsed_ms


@lru_cache()
def get_default_engine() -> TriageEngine:
    """Engine over the built-in rule table, built once per process."""
    return TriageEngine()


def classify_complaint(
    description: str,
    image_urls: Optional[Sequence[str]] = None,
    location: Optional[str] = None,
    reporter_trust: Union[ReporterTrust, str, None] = None,
) -> ClassificationResult:
    """Classify one complaint with the built-in rule table."""
    return get_default_engine().classify(
        ClassificationInput.create(
            description=description,
            image_urls=image_urls,
            location=location,
            reporter_trust=reporter_trust,
        )
    )
