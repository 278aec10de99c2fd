"""Tests for pollen_report/cli.py"""

import json
import textwrap

import pytest
import requests
from click.testing import CliRunner

from pollen_report import __version__
from pollen_report.cli import cli
from pollen_report.client import DEFAULT_BASE_URL
from pollen_report.reports.forecast import GENERIC_ERROR_MESSAGE

MODEL = "gemini-test"
URL = f"{DEFAULT_BASE_URL}/v1beta/models/{MODEL}:generateContent"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("GEMINI_API_KEY", "API_KEY", "GEMINI_MODEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def config_path(tmp_path) -> str:
    p = tmp_path / "pollen-config.yaml"
    p.write_text(textwrap.dedent(f"""\
        gemini:
          api_key: "AIza_test"
          model: "{MODEL}"
        locations:
          praxis: "1010"
        """), encoding="utf-8")
    return str(p)


def _answer(payload: dict) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": json.dumps(payload)}]}}]}


# ---------------------------------------------------------------------------
# group / init / legend
# ---------------------------------------------------------------------------

def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_init_writes_template(runner, tmp_path):
    out = tmp_path / "cfg.yaml"
    result = runner.invoke(cli, ["init", "--output", str(out)])
    assert result.exit_code == 0
    assert out.exists()


def test_init_refuses_overwrite(runner, tmp_path):
    out = tmp_path / "cfg.yaml"
    out.write_text("x")
    result = runner.invoke(cli, ["init", "--output", str(out)])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_legend(runner):
    result = runner.invoke(cli, ["legend", "--no-color"])
    assert result.exit_code == 0
    assert "Sehr Hoch" in result.output


# ---------------------------------------------------------------------------
# forecast
# ---------------------------------------------------------------------------

def test_forecast_json(runner, config_path, requests_mock, view_model_dict):
    requests_mock.post(URL, json=_answer(view_model_dict))
    result = runner.invoke(cli, ["--config", config_path, "forecast", "praxis", "--format", "json"])
    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["plz"] == "1010"
    assert report["view_model"]["header"]["subtitle"].startswith("Standort:")


def test_forecast_text(runner, config_path, requests_mock, view_model_dict):
    requests_mock.post(URL, json=_answer(view_model_dict))
    result = runner.invoke(cli, ["--config", config_path, "forecast", "1010", "--no-color"])
    assert result.exit_code == 0, result.output
    assert "Gewählter Standort: Wien Innere Stadt (1010), Wien" in result.output


def test_forecast_html_to_file(runner, config_path, requests_mock, view_model_dict, tmp_path):
    requests_mock.post(URL, json=_answer(view_model_dict))
    out = tmp_path / "pollen.html"
    result = runner.invoke(cli, ["--config", config_path, "--output", str(out),
                                 "forecast", "1010", "--format", "html"])
    assert result.exit_code == 0, result.output
    assert out.read_text(encoding="utf-8").startswith("<!DOCTYPE html>")


def test_forecast_invalid_plz_makes_no_request(runner, config_path, requests_mock):
    adapter = requests_mock.post(URL, json={})
    result = runner.invoke(cli, ["--config", config_path, "forecast", "123"])
    assert result.exit_code == 1
    assert "4-stellige" in result.output
    assert not adapter.called


def test_forecast_location_error(runner, config_path, requests_mock):
    requests_mock.post(URL, json=_answer({"error": {"message": "Unbekannte PLZ"}}))
    result = runner.invoke(cli, ["--config", config_path, "forecast", "9999"])
    assert result.exit_code == 1
    assert "Unbekannte PLZ" in result.output


def test_forecast_server_error_shows_generic_message(runner, config_path, requests_mock):
    requests_mock.post(URL, status_code=500, text="boom")
    result = runner.invoke(cli, ["--config", config_path, "forecast", "1010"])
    assert result.exit_code == 1
    assert GENERIC_ERROR_MESSAGE in result.output
    assert "boom" not in result.output


def test_forecast_broken_transfer_shows_generic_message(runner, config_path, requests_mock):
    requests_mock.post(URL, exc=requests.exceptions.ChunkedEncodingError)
    result = runner.invoke(cli, ["--config", config_path, "forecast", "1010"])
    assert result.exit_code == 1
    assert GENERIC_ERROR_MESSAGE in result.output


def test_forecast_verbose_shows_detail(runner, config_path, requests_mock):
    requests_mock.post(URL, json={"candidates": [{"content": {"parts": [{"text": "kein JSON"}]}}]})
    result = runner.invoke(cli, ["--config", config_path, "--verbose", "forecast", "1010"])
    assert result.exit_code == 1
    assert "[verbose] ResponseParseError" in result.output
    assert GENERIC_ERROR_MESSAGE in result.output


def test_forecast_auth_error(runner, config_path, requests_mock):
    requests_mock.post(URL, status_code=403)
    result = runner.invoke(cli, ["--config", config_path, "forecast", "1010"])
    assert result.exit_code == 1
    assert "Authentication error" in result.output


def test_forecast_missing_config(runner, tmp_path):
    result = runner.invoke(cli, ["--config", str(tmp_path / "none.yaml"), "forecast", "1010"])
    assert result.exit_code == 1
    assert "Configuration error" in result.output


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------

def test_render_saved_view_model(runner, tmp_path, view_model_dict):
    p = tmp_path / "vm.json"
    p.write_text(json.dumps(view_model_dict), encoding="utf-8")
    result = runner.invoke(cli, ["render", str(p), "--no-color", "--expand-all"])
    assert result.exit_code == 0, result.output
    assert "Erle" in result.output


def test_render_invalid_file(runner, tmp_path):
    p = tmp_path / "vm.json"
    p.write_text("not json", encoding="utf-8")
    result = runner.invoke(cli, ["render", str(p)])
    assert result.exit_code == 1
    assert GENERIC_ERROR_MESSAGE in result.output


def test_render_file_not_utf8(runner, tmp_path):
    p = tmp_path / "vm.json"
    p.write_bytes(b'{"header": {"title": "\xff"}}')
    result = runner.invoke(cli, ["render", str(p)])
    assert result.exit_code == 1
    assert GENERIC_ERROR_MESSAGE in result.output
