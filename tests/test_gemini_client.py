from __future__ import annotations

import asyncio

import pytest

from analysis.gemini_client import (
    EMPTY_DIRECTIVE,
    FAILED_DIRECTIVE,
    RemoteAnalysisClient,
    directive_prompt,
    parse_analysis,
)
from conftest import FakeModels, analysis_payload, fake_client
from telemetry.state import TrackStatus


def test_parse_analysis_reads_camel_case_fields() -> None:
    result = parse_analysis(
        '{"assessment": "Clear track", "hazardProbability": 12.5, '
        '"recommendations": ["Maintain speed"], "detectedObjects": []}'
    )
    assert result is not None
    assert result.assessment == "Clear track"
    assert result.hazard_probability == 12.5
    assert result.recommendations == ["Maintain speed"]
    assert result.detected_objects == []


def test_parse_analysis_tolerates_surrounding_text() -> None:
    text = 'Here you go:\n```json\n{"assessment": "Cow", "hazardProbability": 90, ' \
        '"recommendations": [], "detectedObjects": ["cow"]}\n```'
    result = parse_analysis(text)
    assert result is not None
    assert result.detected_objects == ["cow"]


@pytest.mark.parametrize(
    "text",
    [None, "", "not json", "[1, 2, 3]", '{"assessment": "missing fields"}', '{"assessment": "x", '
     '"hazardProbability": "high", "recommendations": [], "detectedObjects": []}'],
)
def test_parse_analysis_rejects_malformed(text) -> None:
    assert parse_analysis(text) is None


def test_analyze_frame_returns_result() -> None:
    models = FakeModels(analysis=analysis_payload(64))
    result = asyncio.run(fake_client(models).analyze_frame(b"\xff\xd8jpeg"))
    assert result is not None
    assert result.hazard_probability == 64
    call = models.calls[0]
    assert call["model"] == "test-model"
    assert call["config"].response_mime_type == "application/json"


def test_analyze_frame_failure_returns_none() -> None:
    with pytest.warns(UserWarning, match="Safety analysis failed"):
        result = asyncio.run(fake_client(FakeModels(fail=True)).analyze_frame(b"jpeg"))
    assert result is None


def test_analyze_frame_empty_response_returns_none() -> None:
    with pytest.warns(UserWarning):
        result = asyncio.run(fake_client(FakeModels(analysis=None)).analyze_frame(b"jpeg"))
    assert result is None


def test_directive_text_is_returned() -> None:
    models = FakeModels(directive="  Reduce speed; fog ahead.  ")
    text = asyncio.run(fake_client(models).safety_directive(TrackStatus()))
    assert text == "Reduce speed; fog ahead."
    assert models.calls[0]["contents"].startswith("Current Rail Status: Fog 12.0%")


def test_directive_empty_response_uses_default() -> None:
    text = asyncio.run(fake_client(FakeModels(directive="")).safety_directive(TrackStatus()))
    assert text == EMPTY_DIRECTIVE


def test_directive_failure_uses_fallback() -> None:
    with pytest.warns(UserWarning):
        text = asyncio.run(fake_client(FakeModels(fail=True)).safety_directive(TrackStatus()))
    assert text == FAILED_DIRECTIVE


def test_missing_api_key_degrades_instead_of_raising(monkeypatch) -> None:
    monkeypatch.delenv("SAFERAIL_TEST_KEY", raising=False)
    client = RemoteAnalysisClient(api_key_env="SAFERAIL_TEST_KEY")
    with pytest.warns(UserWarning, match="Missing API key"):
        assert asyncio.run(client.analyze_frame(b"jpeg")) is None
    with pytest.warns(UserWarning, match="Missing API key"):
        assert asyncio.run(client.safety_directive(TrackStatus())) == FAILED_DIRECTIVE


def test_directive_prompt_formats_status() -> None:
    prompt = directive_prompt(TrackStatus(fog_level=33.333, track_health=97.0, speed=118.6))
    assert "Fog 33.3%" in prompt
    assert "Health 97.0%" in prompt
    assert "Speed 119km/h" in prompt
