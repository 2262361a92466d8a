"""
Triage Rule Table Loader
=========================

Loads the category rule table from a YAML file.

The table is read once at startup and handed to the engine as an immutable
tuple. There is no hot reload: a changed file takes effect on restart.
"""

from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from src.config import Priority
from src.core import RuleTableException
from src.shared.infrastructure.logging import get_logger
from src.triage.application.services import TriageEngine
from src.triage.domain import (
    DEFAULT_CATEGORY_RULES,
    DEFAULT_RULE,
    ESCALATION_KEYWORDS,
    CategoryRule,
)
from src.triage.domain.value_objects import CONFIDENCE_CEILING

logger = get_logger(__name__)


class CategoryRuleConfig(BaseModel):
    """One category rule as written in the YAML file."""
    issue_type: str = Field(..., min_length=1)
    urgency_label: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    subcategory: str = Field(..., min_length=1)
    priority: Priority
    base_confidence: float = Field(..., ge=0.0, le=CONFIDENCE_CEILING)
    department: str = Field(..., min_length=1)
    estimated_resolution_time: str = Field(..., min_length=1)
    keywords: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)

    @field_validator("keywords")
    @classmethod
    def normalize_keywords(cls, v: List[str]) -> List[str]:
        """Keywords are matched against lowercased text."""
        return [keyword.lower() for keyword in v if keyword.strip()]

    def to_domain(self) -> CategoryRule:
        return CategoryRule(
            issue_type=self.issue_type,
            urgency_label=self.urgency_label,
            category=self.category,
            subcategory=self.subcategory,
            priority=self.priority,
            base_confidence=self.base_confidence,
            department=self.department,
            estimated_resolution_time=self.estimated_resolution_time,
            keywords=tuple(self.keywords),
            tags=tuple(self.tags),
        )


class RuleTableConfig(BaseModel):
    """
    Rule table file layout.

    ``rules`` is evaluated top to bottom; ``default_rule`` and
    ``escalation_keywords`` fall back to the built-in values when omitted.
    """
    rules: List[CategoryRuleConfig] = Field(..., min_length=1)
    default_rule: Optional[CategoryRuleConfig] = None
    escalation_keywords: Optional[List[str]] = None

    @field_validator("rules")
    @classmethod
    def validate_rules_have_keywords(cls, v: List[CategoryRuleConfig]) -> List[CategoryRuleConfig]:
        for rule in v:
            if not rule.keywords:
                raise ValueError(f"rule '{rule.issue_type}' has no keywords")
        return v

    @field_validator("escalation_keywords")
    @classmethod
    def normalize_escalation_keywords(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return [keyword.lower() for keyword in v if keyword.strip()]


class RuleTableLoader:
    """Builds a TriageEngine from the built-in table or a YAML file."""

    def load(self, path: Optional[Path] = None) -> TriageEngine:
        """
        Build the engine for this process.

        Args:
            path: YAML rule file; None or a missing file selects the
                built-in table

        Raises:
            RuleTableException: file exists but cannot be parsed or fails
                validation
        """
        if path is None:
            logger.info("Using built-in category rule table",
                        extra={"rule_count": len(DEFAULT_CATEGORY_RULES)})
            return TriageEngine()

        if not path.exists():
            logger.warning(f"Rule table file not found: {path}, using built-in rules")
            return TriageEngine()

        config = self._load_from_file(path)
        rules = tuple(rule.to_domain() for rule in config.rules)
        default_rule = config.default_rule.to_domain() if config.default_rule else DEFAULT_RULE
        escalation_keywords = (
            tuple(config.escalation_keywords)
            if config.escalation_keywords is not None
            else ESCALATION_KEYWORDS
        )

        logger.info(
            "Loaded category rule table",
            extra={"path": str(path), "rule_count": len(rules)}
        )
        return TriageEngine(
            rules=rules,
            default_rule=default_rule,
            escalation_keywords=escalation_keywords,
        )

    def _load_from_file(self, path: Path) -> RuleTableConfig:
        """Load and validate the YAML rule file."""
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise RuleTableException(str(path), f"cannot read rule table: {e}")

        if not isinstance(data, dict):
            raise RuleTableException(str(path), "rule table must be a mapping")

        try:
            return RuleTableConfig(**data)
        except ValidationError as e:
            raise RuleTableException(
                str(path),
                "invalid rule table",
                {"source": str(path), "errors": e.errors(include_url=False)}
            )
