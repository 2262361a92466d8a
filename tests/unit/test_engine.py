"""Tests for the complaint triage engine pipeline."""

import dataclasses
from concurrent.futures import ThreadPoolExecutor

import pytest

from src.config import Priority, ReporterTrust, TriageAgent
from src.core import ConfigurationException
from src.triage.application import TriageEngine, classify_complaint
from src.triage.domain import CategoryRule, ClassificationInput


def classify(engine, description, **kwargs):
    return engine.classify(ClassificationInput.create(description, **kwargs))


# ==========================================
#  CATEGORY RESOLUTION
# ==========================================


class TestCategoryResolution:
    def test_no_keywords_falls_back_to_general(self, engine):
        result = classify(engine, "Missing bench in the park")
        assert result.issue_type == "General Complaint"
        assert result.category == "general"
        assert result.subcategory == "other"
        assert result.priority == Priority.LOW
        assert result.confidence == 0.7
        assert result.department == "General Services"
        assert result.estimated_resolution_time == "5-7 days"
        assert result.tags == ()
        assert result.matched_keywords == ()

    def test_pothole_resolves_to_roads(self, engine):
        result = classify(engine, "There is a huge POTHOLE on Main Road")
        assert result.category == "infrastructure"
        assert result.subcategory == "road_maintenance"
        assert result.priority == Priority.HIGH
        assert result.confidence == 0.9
        assert result.department == "Roads & Transportation"
        assert result.urgency_label == "High"
        assert result.tags == ("roads", "infrastructure", "maintenance")
        assert result.matched_keywords == ("pothole",)

    def test_first_match_wins_by_table_order(self, engine):
        result = classify(engine, "water damaged the street")
        assert result.category == "infrastructure"
        assert result.department == "Roads & Transportation"
        assert "water" not in result.tags

    def test_waste_rule(self, engine):
        result = classify(engine, "Trash has not been collected for a week")
        assert result.category == "sanitation"
        assert result.subcategory == "waste_collection"
        assert result.priority == Priority.MEDIUM
        assert result.confidence == 0.85
        assert result.estimated_resolution_time == "1-2 days"

    def test_substring_match_without_word_boundaries(self, engine):
        result = classify(engine, "The lighting on my block is broken")
        assert result.issue_type == "Street Lighting"
        assert result.subcategory == "electrical"
        assert result.matched_keywords == ("light",)

    def test_noise_rule(self, engine):
        result = classify(engine, "Loud music every night")
        assert result.category == "public_order"
        assert result.priority == Priority.LOW
        assert result.confidence == 0.75
        assert result.tags == ("noise", "public_order", "quality_of_life")

    def test_matched_rule_does_not_merge_default_fields(self, engine):
        result = classify(engine, "pipe burst")
        assert result.subcategory == "water_supply"
        assert result.tags == ("water", "utilities", "infrastructure")

    def test_resolve_category_returns_all_hits_in_keyword_order(self, engine):
        rule, hits = engine.resolve_category("flooding from a leak in the water main")
        assert rule.issue_type == "Water Infrastructure"
        assert hits == ("water", "leak", "flooding")


# ==========================================
#  ESCALATION
# ==========================================


class TestEscalation:
    def test_emergency_forces_urgent(self, engine):
        result = classify(engine, "Emergency: noise from the factory")
        assert result.category == "public_order"
        assert result.priority == Priority.URGENT
        assert result.urgency_label == "Critical"
        assert result.estimated_resolution_time == "0-24 hours"
        assert result.tags == ("noise", "public_order", "quality_of_life", "emergency")
        assert result.escalated is True

    @pytest.mark.parametrize("description", [
        "emergency",
        "Dangerous pothole on the corner",
        "immediate help needed with garbage",
        "URGENT street lamp down",
    ])
    def test_escalation_applies_to_any_category(self, engine, description):
        result = classify(engine, description)
        assert result.priority == Priority.URGENT
        assert result.estimated_resolution_time == "0-24 hours"
        assert result.agent == TriageAgent.EMERGENCY

    def test_escalation_on_default_rule(self, engine):
        result = classify(engine, "emergency at the park")
        assert result.category == "general"
        assert result.tags == ("emergency",)

    def test_escalation_keeps_department_and_confidence(self, engine):
        result = classify(engine, "dangerous pothole")
        assert result.department == "Roads & Transportation"
        assert result.confidence == 0.9

    def test_no_escalation_without_keywords(self, engine):
        result = classify(engine, "pothole")
        assert result.escalated is False
        assert "emergency" not in result.tags


# ==========================================
#  EVIDENCE & TRUST
# ==========================================


class TestEvidenceAndTrust:
    def test_image_evidence_boosts_and_tags(self, engine):
        result = classify(engine, "Missing bench", image_urls=["a.jpg"])
        assert result.confidence == 0.8
        assert result.tags == ("image_verified",)

    def test_trust_boosts_without_tag(self, engine):
        result = classify(engine, "Missing bench", reporter_trust="trusted")
        assert result.confidence == 0.8
        assert result.tags == ()

    def test_both_boosts_on_default(self, engine):
        result = classify(
            engine, "Missing bench", image_urls=["a.jpg", "b.jpg"], reporter_trust=ReporterTrust.TRUSTED
        )
        assert result.confidence == 0.9

    def test_waste_with_both_boosts_clamps(self, engine):
        result = classify(engine, "garbage everywhere", image_urls=["a.jpg"], reporter_trust="trusted")
        assert result.confidence == 0.95

    def test_each_boost_clamps_individually(self, engine):
        result = classify(engine, "pothole", image_urls=["a.jpg"])
        assert result.confidence == 0.95
        result = classify(engine, "pothole", image_urls=["a.jpg"], reporter_trust="trusted")
        assert result.confidence == 0.95

    def test_noise_with_both_boosts(self, engine):
        result = classify(engine, "loud party", image_urls=["a.jpg"], reporter_trust="trusted")
        assert result.confidence == 0.95

    def test_empty_image_list_is_no_evidence(self, engine):
        result = classify(engine, "Missing bench", image_urls=[])
        assert result.confidence == 0.7
        assert "image_verified" not in result.tags

    def test_image_tag_follows_emergency_tag(self, engine):
        result = classify(engine, "urgent trash pile", image_urls=["a.jpg"])
        assert result.tags == ("waste", "sanitation", "cleanliness", "emergency", "image_verified")

    def test_boost_keeps_three_decimal_base(self):
        rule = CategoryRule(
            issue_type="Park Maintenance",
            urgency_label="Medium",
            category="parks",
            subcategory="benches",
            priority=Priority.MEDIUM,
            base_confidence=0.825,
            department="Parks Department",
            estimated_resolution_time="2-3 days",
            keywords=("bench",),
        )
        engine = TriageEngine(rules=[rule])
        assert classify(engine, "broken bench").confidence == 0.825
        result = classify(engine, "broken bench", image_urls=["a.jpg"])
        assert result.confidence == pytest.approx(0.925)
        assert result.confidence != 0.92


# ==========================================
#  LOCATION & DISPATCH
# ==========================================


class TestLocationAndDispatch:
    def test_location_tag_collapses_whitespace(self, engine):
        result = classify(engine, "Missing bench", location="New  York")
        assert result.tags == ("location:new_york",)

    def test_location_tag_keeps_edge_whitespace(self, engine):
        assert classify(engine, "Missing bench", location=" Ward 5").tags == ("location:_ward_5",)
        assert classify(engine, "Missing bench", location="  Ward\t5 ").tags == ("location:_ward_5_",)

    def test_blank_location_is_ignored(self, engine):
        result = classify(engine, "Missing bench", location="   ")
        assert result.tags == ()
        assert result.coordination_note == "Initial categorization completed"

    def test_location_note_uses_resolved_department(self, engine):
        result = classify(engine, "dangerous pothole", location="Ward 1")
        assert result.coordination_note == (
            "Escalated to emergency protocols. Location-based routing to Roads & Transportation"
        )

    @pytest.mark.parametrize("description, agent, note", [
        ("pothole", TriageAgent.PRIORITY, "Flagged for priority handling"),
        ("litter", TriageAgent.TRIAGE, "Initial categorization completed"),
        ("noise", TriageAgent.TRIAGE, "Initial categorization completed"),
        ("emergency", TriageAgent.EMERGENCY, "Escalated to emergency protocols"),
    ])
    def test_agent_follows_final_priority(self, engine, description, agent, note):
        result = classify(engine, description)
        assert result.agent == agent
        assert result.coordination_note == note

    def test_note_fragment_order(self, engine):
        result = classify(engine, "litter", location="Ward 2", reporter_trust="trusted")
        assert result.coordination_note == (
            "Initial categorization completed. Location-based routing to Sanitation Department. "
            "Reporter has verified history"
        )

    def test_trusted_without_location(self, engine):
        result = classify(engine, "pothole", reporter_trust="trusted")
        assert result.coordination_note == "Flagged for priority handling. Reporter has verified history"


# ==========================================
#  END TO END
# ==========================================


def test_end_to_end_emergency_water_leak(engine):
    result = classify(
        engine,
        "urgent water leak near school",
        image_urls=["a.jpg"],
        location="Ward 5",
        reporter_trust="trusted",
    )
    assert result.category == "utilities"
    assert result.subcategory == "water_supply"
    assert result.priority == Priority.URGENT
    assert result.urgency_label == "Critical"
    assert result.estimated_resolution_time == "0-24 hours"
    assert result.confidence == 0.95
    assert result.tags == (
        "water", "utilities", "infrastructure", "emergency", "image_verified", "location:ward_5"
    )
    assert result.agent == TriageAgent.EMERGENCY
    assert result.coordination_note == (
        "Escalated to emergency protocols. Location-based routing to Water Department. "
        "Reporter has verified history"
    )
    assert result.blockchain_ready is True
    assert result.attestation_eligible is True


def test_duplicate_tags_are_kept():
    rule = CategoryRule(
        issue_type="Hazard",
        urgency_label="High",
        category="safety",
        subcategory="hazard",
        priority=Priority.HIGH,
        base_confidence=0.8,
        department="Public Safety",
        estimated_resolution_time="1 day",
        keywords=("hazard",),
        tags=("emergency",),
    )
    engine = TriageEngine(rules=[rule])
    result = classify(engine, "emergency hazard")
    assert result.tags == ("emergency", "emergency")


def test_result_is_immutable(engine):
    result = classify(engine, "pothole")
    with pytest.raises(dataclasses.FrozenInstanceError):
        result.priority = Priority.LOW


def test_engine_rejects_empty_rule_table():
    with pytest.raises(ConfigurationException):
        TriageEngine(rules=[])


def test_classify_complaint_uses_builtin_table():
    result = classify_complaint("pothole", image_urls=["a.jpg"])
    assert result.category == "infrastructure"
    assert result.confidence == 0.95


def test_concurrent_calls_are_independent(engine):
    inputs = [
        ClassificationInput.create("urgent water leak", image_urls=["a.jpg"], location="Ward 5"),
        ClassificationInput.create("garbage", reporter_trust="trusted"),
        ClassificationInput.create("Missing bench"),
    ] * 50
    expected = [engine.classify(payload) for payload in inputs]

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(engine.classify, inputs))

    assert results == expected
