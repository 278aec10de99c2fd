"""Tests for pollen_report/reports/forecast.py"""

import json

import pytest

from pollen_report.client import EmptyResponseError, GeminiClient
from pollen_report.reports.forecast import (
    ForecastError,
    InvalidResponseError,
    LocationError,
    ResponseParseError,
    clean_json_response,
    get_forecast,
    load_forecast,
    parse_view_model,
)

BASE = "https://gemini.example.com"
MODEL = "gemini-test"
URL = f"{BASE}/v1beta/models/{MODEL}:generateContent"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _client() -> GeminiClient:
    return GeminiClient(api_key="k", model=MODEL, base_url=BASE)


def _answer(text: str, chunks: list | None = None) -> dict:
    cand = {"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}
    if chunks:
        cand["groundingMetadata"] = {"groundingChunks": chunks}
    return {"candidates": [cand]}


# ---------------------------------------------------------------------------
# clean_json_response / parse_view_model
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("text", [
    '{"a": 1}',
    '  {"a": 1}\n',
    '```json\n{"a": 1}\n```',
    '```\n{"a": 1}\n```',
])
def test_clean_json_response_strips_fences(text):
    assert json.loads(clean_json_response(text)) == {"a": 1}


def test_parse_view_model_invalid_json():
    with pytest.raises(ResponseParseError, match="not valid JSON"):
        parse_view_model("Leider kann ich das nicht.")


def test_parse_view_model_requires_object():
    with pytest.raises(ResponseParseError, match="list"):
        parse_view_model("[1, 2]")


# ---------------------------------------------------------------------------
# get_forecast
# ---------------------------------------------------------------------------

def test_get_forecast_report_envelope(requests_mock, view_model_dict):
    requests_mock.post(URL, json=_answer(json.dumps(view_model_dict)))
    report = get_forecast(_client(), "1010")
    assert report["report_type"] == "pollen_forecast"
    assert report["plz"] == "1010"
    assert report["model"] == MODEL
    assert "generated_at" in report
    assert report["view_model"]["header"]["title"] == "Polleninformation"


def test_get_forecast_prompt_mentions_plz(requests_mock, view_model_dict):
    adapter = requests_mock.post(URL, json=_answer(json.dumps(view_model_dict)))
    get_forecast(_client(), "6020")
    body = adapter.last_request.json()
    assert "Postleitzahl: 6020" in body["contents"][0]["parts"][0]["text"]
    assert "TT-MM-YYYY" in body["systemInstruction"]["parts"][0]["text"]


def test_get_forecast_fenced_output(requests_mock, view_model_dict):
    requests_mock.post(URL, json=_answer("```json\n" + json.dumps(view_model_dict) + "\n```"))
    report = get_forecast(_client(), "1010")
    assert len(report["view_model"]["kpi_cards"]) == 4


def test_get_forecast_attaches_grounding_sources(requests_mock, view_model_dict):
    chunks = [{"web": {"uri": "https://pollen.example/wien", "title": "Pollen Wien"}}]
    requests_mock.post(URL, json=_answer(json.dumps(view_model_dict), chunks))
    report = get_forecast(_client(), "1010")
    assert report["view_model"]["grounding_sources"] == [
        {"uri": "https://pollen.example/wien", "title": "Pollen Wien"}
    ]


def test_get_forecast_error_document_raises_location_error(requests_mock):
    doc = {"error": {"code": "UNKNOWN_PLZ", "message": "PLZ 9999 nicht gefunden."}}
    requests_mock.post(URL, json=_answer(json.dumps(doc)))
    with pytest.raises(LocationError, match="9999"):
        get_forecast(_client(), "9999")


def test_get_forecast_error_without_message(requests_mock):
    requests_mock.post(URL, json=_answer(json.dumps({"error": {"code": "X"}})))
    with pytest.raises(LocationError, match="Standort-Fehler"):
        get_forecast(_client(), "9999")


def test_get_forecast_missing_header(requests_mock):
    requests_mock.post(URL, json=_answer(json.dumps({"kpi_cards": []})))
    with pytest.raises(InvalidResponseError, match="Ungültiges Datenformat"):
        get_forecast(_client(), "1010")


def test_get_forecast_accepts_empty_header(requests_mock):
    requests_mock.post(URL, json=_answer(json.dumps({"header": {}})))
    report = get_forecast(_client(), "1010")
    assert report["view_model"]["header"]["title"] == ""


def test_get_forecast_empty_answer(requests_mock):
    requests_mock.post(URL, json={"candidates": []})
    with pytest.raises(EmptyResponseError):
        get_forecast(_client(), "1010")


def test_get_forecast_normalizes_severity(requests_mock, view_model_dict):
    view_model_dict["kpi_cards"][0]["severity"] = "extrem"
    requests_mock.post(URL, json=_answer(json.dumps(view_model_dict)))
    report = get_forecast(_client(), "1010")
    assert report["view_model"]["kpi_cards"][0]["severity"] == "warn"


# ---------------------------------------------------------------------------
# load_forecast
# ---------------------------------------------------------------------------

def test_load_forecast_saved_report(tmp_path, view_model_dict):
    saved = {"report_type": "pollen_forecast", "plz": "1010", "model": "m",
             "generated_at": "2026-10-18T07:30:00+00:00", "view_model": view_model_dict}
    p = tmp_path / "forecast.json"
    p.write_text(json.dumps(saved), encoding="utf-8")
    report = load_forecast(str(p))
    assert report["plz"] == "1010"
    assert report["generated_at"] == "2026-10-18T07:30:00+00:00"
    assert report["view_model"]["summaries"]["today_one_liner"].startswith("Mäßige")


def test_load_forecast_bare_view_model(tmp_path, view_model_dict):
    p = tmp_path / "vm.json"
    p.write_text(json.dumps(view_model_dict), encoding="utf-8")
    report = load_forecast(str(p))
    assert report["report_type"] == "pollen_forecast"
    assert report["plz"] == "1010"
    assert report["model"] is None


def test_load_forecast_missing_file(tmp_path):
    with pytest.raises(ForecastError, match="Cannot read"):
        load_forecast(str(tmp_path / "nope.json"))


def test_load_forecast_not_utf8(tmp_path):
    p = tmp_path / "vm.json"
    p.write_bytes(b'{"header": {"title": "\xff"}}')
    with pytest.raises(ForecastError, match="Cannot read"):
        load_forecast(str(p))


def test_load_forecast_without_header(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text(json.dumps({"view_model": {"kpi_cards": []}}), encoding="utf-8")
    with pytest.raises(InvalidResponseError):
        load_forecast(str(p))
