"""Tests for the triage application service and DTOs."""

import json
import logging

import pytest
from pydantic import ValidationError

from src.config import Priority, Settings
from src.core import ValidationException
from src.shared.infrastructure.logging import CustomJsonFormatter, log_latency
from src.triage.application import CategorizationResponse, CategorizeRequest


class TestComplaintTriageService:
    def test_categorize_returns_result_and_timing(self, service):
        result, elapsed_ms = service.categorize(description="garbage pile", reporter_trust="trusted")
        assert result.category == "sanitation"
        assert result.confidence == 0.95
        assert elapsed_ms >= 0

    def test_title_is_prepended(self, service):
        result, _ = service.categorize(description="near the school", title="Water leak")
        assert result.category == "utilities"

    def test_blank_title_is_ignored(self, service):
        result, _ = service.categorize(description="Missing bench", title="  ")
        assert result.category == "general"

    def test_blank_description_rejected(self, service):
        with pytest.raises(ValidationException):
            service.categorize(description=" ")

    def test_logs_latency(self, service, caplog):
        with caplog.at_level(logging.INFO, logger="src.triage.application.services"):
            service.categorize(description="pothole", correlation_id="abc")
        messages = [record.getMessage() for record in caplog.records]
        assert "categorize completed" in messages
        assert "Complaint categorized" in messages


class TestDTOs:
    def test_request_accepts_camel_case(self):
        request = CategorizeRequest.model_validate({
            "description": "leak",
            "imageUrls": ["a.jpg"],
            "reporterTrust": "trusted",
        })
        assert request.image_urls == ["a.jpg"]
        assert request.reporter_trust == "trusted"

    def test_request_accepts_snake_case(self):
        request = CategorizeRequest(description="leak", image_urls=["a.jpg"])
        assert request.image_urls == ["a.jpg"]

    @pytest.mark.parametrize("body", [
        {},
        {"description": ""},
        {"description": "   "},
        {"description": "leak", "reporterTrust": "new"},
    ])
    def test_request_validation(self, body):
        with pytest.raises(ValidationError):
            CategorizeRequest.model_validate(body)

    def test_description_length_limit(self):
        assert CategorizeRequest(description="x" * 10000).description == "x" * 10000
        with pytest.raises(ValidationError, match="max 10000"):
            CategorizeRequest(description="x" * 10001)

    def test_response_serializes_camel_case(self, service):
        result, _ = service.categorize(description="pothole", location="Ward 1")
        body = CategorizationResponse.from_domain(result, 3).model_dump(by_alias=True)
        assert body["issueType"] == "Road Infrastructure"
        assert body["priority"] == Priority.HIGH.value
        assert body["agent"] == "PriorityTriageAgent"
        assert body["tags"] == ["roads", "infrastructure", "maintenance", "location:ward_1"]
        assert body["blockchainReady"] is True
        assert body["attestationEligible"] is True
        assert body["processingTimeMs"] == 3


class TestLogging:
    def test_formatter_emits_json_with_context(self):
        formatter = CustomJsonFormatter(
            "%(name)s %(levelname)s %(message)s", service="civic-triage", environment="staging"
        )
        record = logging.makeLogRecord({
            "name": "test",
            "levelname": "INFO",
            "msg": "Complaint categorized",
            "correlation_id": "abc",
        })
        payload = json.loads(formatter.format(record))
        assert payload["message"] == "Complaint categorized"
        assert payload["correlation_id"] == "abc"
        assert payload["service"] == "civic-triage"
        assert payload["environment"] == "staging"
        assert "timestamp" in payload

    def test_log_latency_records_elapsed(self, caplog):
        logger = logging.getLogger("test.latency")
        with caplog.at_level(logging.INFO, logger="test.latency"):
            with log_latency(logger, "op", stage="x") as timer:
                pass
        assert timer.elapsed_ms >= 0
        record = caplog.records[-1]
        assert record.getMessage() == "op completed"
        assert record.stage == "x"


class TestSettings:
    def test_defaults(self, settings):
        assert settings.app_name == "civic-triage"
        assert settings.triage_rules_path is None

    def test_log_level_is_uppercased(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("field, value", [
        ("environment", "qa"),
        ("log_level", "verbose"),
    ])
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            Settings(**{field: value})
