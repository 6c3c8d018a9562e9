from __future__ import annotations

from transcriptlab.core.analysis import normalize_analysis
from transcriptlab.core.analysis.payload import unwrap_fenced_json


def test_fenced_json_analysis_is_decoded() -> None:
    raw = 'Here you go:\n```json\n{"summary": "ok", "score": 7}\n```\nthanks'
    norm = normalize_analysis({"success": True, "data": {"analysis": raw, "tests": [{"q": "1?"}]}})

    assert norm.analysis == {"summary": "ok", "score": 7}
    assert norm.tests == [{"q": "1?"}]
    assert norm.has_analysis
    assert norm.has_tests


def test_plain_json_string_is_decoded() -> None:
    norm = normalize_analysis({"data": {"analysis": '{"a": 1}'}})
    assert norm.analysis == {"a": 1}
    assert norm.tests is None
    assert not norm.has_tests


def test_structured_analysis_is_kept() -> None:
    norm = normalize_analysis({"data": {"analysis": {"a": [1, 2]}}})
    assert norm.analysis == {"a": [1, 2]}


def test_invalid_analysis_keeps_raw_text() -> None:
    norm = normalize_analysis({"data": {"analysis": "```json\nnot json\n```"}})
    assert norm.analysis == {"error": "Invalid analysis format", "raw_response": "not json"}
    assert not norm.has_analysis


def test_missing_analysis() -> None:
    for result in ({}, {"data": None}, {"data": {"analysis": ""}}):
        norm = normalize_analysis(result)
        assert norm.analysis == {"error": "No analysis data available"}


def test_unwrap_without_fence_returns_text() -> None:
    assert unwrap_fenced_json('{"x": 1}') == '{"x": 1}'
