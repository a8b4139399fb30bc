from __future__ import annotations

from dataclasses import replace
from types import SimpleNamespace

from prometheus_client import REGISTRY
from starlette.requests import Request

from nlweb_agent.app.health import DEGRADED, HEALTHY, UNHEALTHY, HealthService
from nlweb_agent.app.metrics import refresh_gauges, route_label
from nlweb_agent.app.settings import Settings
from nlweb_agent.index.inmemory import ContentIndex
from nlweb_agent.rag.profiles import ProfileOverrides


def valid_settings() -> Settings:
    return Settings(openai_api_key="sk-test-key", app_env="test", port=3001, log_level="INFO")


def test_valid_settings_have_no_problems() -> None:
    assert valid_settings().validation_errors() == []


def test_validation_errors_list_every_problem() -> None:
    settings = Settings(openai_api_key="bad-key", port=0, app_env="staging", log_level="LOUD")
    problems = settings.validation_errors()
    assert len(problems) == 4
    assert 'OPENAI_API_KEY must start with "sk-"' in problems


def test_missing_key_is_reported() -> None:
    settings = replace(valid_settings(), openai_api_key=None)
    assert settings.validation_errors() == ["OPENAI_API_KEY is required"]
    assert not settings.openai_key_configured


def test_profile_overrides_come_from_settings() -> None:
    settings = replace(valid_settings(), openai_model="gpt-4o", openai_temperature=0.2)
    assert settings.profile_overrides == ProfileOverrides(model="gpt-4o", temperature=0.2)


def test_health_is_unhealthy_without_credential() -> None:
    index = ContentIndex()
    service = HealthService(replace(valid_settings(), openai_api_key=None), lambda: index)
    payload = service.status()
    assert payload["status"] == UNHEALTHY
    assert payload["services"]["openai"] == "down"
    assert payload["services"]["nlweb"] == "up"


def test_health_reports_index_and_version() -> None:
    index = ContentIndex()
    index.ingest("hello world", {"title": "Greeting"})
    service = HealthService(valid_settings(), lambda: index)
    payload = service.status()
    assert payload["status"] in {HEALTHY, DEGRADED}
    assert payload["indexed_document_count"] == 1
    assert payload["environment"] == "test"
    assert service.index_status()["indexed_document_count"] == 1


def test_error_rate_is_a_percentage() -> None:
    service = HealthService(valid_settings(), ContentIndex)
    for success in (True, True, True, False):
        service.record_request(success)
    assert service.metrics() == {"requests": 4, "errors": 1, "error_rate": 25.0}


def test_error_rate_is_zero_without_traffic() -> None:
    service = HealthService(valid_settings(), ContentIndex)
    assert service.metrics()["error_rate"] == 0.0


def test_cors_origins_follow_environment() -> None:
    assert valid_settings().cors_origins == ["*"]
    assert replace(valid_settings(), app_env="production").cors_origins == []


def test_health_reports_host_memory() -> None:
    memory = HealthService(valid_settings(), ContentIndex).status()["memory"]
    assert memory["total"] >= memory["used"] >= 0
    assert 0 <= memory["percentage"] <= 100


def test_metrics_label_by_route_template() -> None:
    request = Request({"type": "http", "method": "GET", "path": "/x", "headers": []})
    assert route_label(request) == "unmatched"
    request.scope["route"] = SimpleNamespace(path="/api/nlweb/ask")
    assert route_label(request) == "/api/nlweb/ask"


def test_refresh_gauges_records_index_size() -> None:
    refresh_gauges(7)
    assert REGISTRY.get_sample_value("nlweb_indexed_documents") == 7.0
