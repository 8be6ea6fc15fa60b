from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
from typer.testing import CliRunner

from cli.app import app
from cli.client import ApiClient, ApiError
from cli.config import DEFAULT_BASE_URL, load_config

SAMPLE = "20230115 12.5 8.3 -999 99.9\n20231301 5.0\n20230201 3.3\n"


class StubClient:
    def __init__(self, config, unreachable: bool = False, failure: Optional[ApiError] = None) -> None:
        self.config = config
        self.unreachable = unreachable
        self.failure = failure
        self.uploaded_path: Path | None = None
        self.page_calls: List[tuple[str, int, Optional[int]]] = []
        self.closed = False

    def upload_file(self, path: Path) -> Dict[str, Any]:
        self.uploaded_path = path
        if self.unreachable:
            raise httpx.ConnectError("connection refused")
        if self.failure is not None:
            raise self.failure
        return {
            "message": "Stored 3 readings.",
            "count": 3,
            "warnings": ["Line 2: Invalid date skipped (20231301)"],
        }

    def _page(self, kind: str, page: int, limit: Optional[int]) -> Dict[str, Any]:
        self.page_calls.append((kind, page, limit))
        return {
            "data": [{"date": "2023-01-15", "min": 8.3, "max": 12.5, "count": 2}],
            "meta": {"total": 3, "page": page, "totalPages": 3},
        }

    def daily_stats(self, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        return self._page("daily", page, limit)

    def monthly_stats(self, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        return self._page("monthly", page, limit)

    def month_stats(self, year: int, month: int) -> Dict[str, Any]:
        return {"period": f"{year:04d}-{month:02d}", "min": None, "max": None, "count": 0}

    def day_stats(self, year: int, month: int, day: int) -> Dict[str, Any]:
        return {"period": f"{year:04d}-{month:02d}-{day:02d}", "min": 8.3, "max": 12.5, "count": 2}

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def sample_file(tmp_path) -> Path:
    path = tmp_path / "readings.txt"
    path.write_text(SAMPLE)
    return path


def _install_stub(monkeypatch, stub: StubClient) -> None:
    def factory(config):
        stub.config = config
        return stub

    monkeypatch.setattr("cli.app.ApiClient", factory)


def test_upload_reports_count_and_warnings(monkeypatch, runner: CliRunner, sample_file: Path) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["upload", str(sample_file)])

    assert result.exit_code == 0
    assert "Stored 3 readings." in result.stdout
    assert "Invalid date skipped (20231301)" in result.stdout
    assert stub.uploaded_path == sample_file
    assert stub.closed is True


def test_upload_falls_back_to_local_results(monkeypatch, runner: CliRunner, sample_file: Path) -> None:
    stub = StubClient(config=None, unreachable=True)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["upload", str(sample_file), "--by", "month"])

    assert result.exit_code == 0
    assert "Local results for readings.txt" in result.stdout
    assert "2023-01" in result.stdout
    assert "2023-02" in result.stdout
    assert stub.closed is True


def test_upload_error_status_falls_back_to_local_results(
    monkeypatch, runner: CliRunner, sample_file: Path
) -> None:
    stub = StubClient(config=None, failure=ApiError(500, "Failed to store readings."))
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["upload", str(sample_file)])

    assert result.exit_code == 0
    assert "Request failed with status 500: Failed to store readings." in result.output
    assert "Local results for readings.txt" in result.stdout
    assert "2023-01-15" in result.stdout
    assert "Stored 3 readings." not in result.output


def test_preview_parses_without_the_api(runner: CliRunner, sample_file: Path) -> None:
    result = runner.invoke(app, ["preview", str(sample_file)])

    assert result.exit_code == 0
    assert "2023-01-15" in result.stdout
    assert "12.5" in result.stdout
    assert "Line 2: Invalid date skipped (20231301)" in result.stdout


def test_daily_passes_pagination(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["daily", "--page", "2", "--limit", "5"])

    assert result.exit_code == 0
    assert stub.page_calls == [("daily", 2, 5)]
    assert "Page 2 of 3" in result.stdout


def test_monthly_defaults(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    result = runner.invoke(app, ["monthly"])

    assert result.exit_code == 0
    assert stub.page_calls == [("monthly", 1, None)]


def test_month_without_data(monkeypatch, runner: CliRunner) -> None:
    _install_stub(monkeypatch, StubClient(config=None))

    result = runner.invoke(app, ["month", "2024", "6"])

    assert result.exit_code == 0
    assert "Statistics for 2024-06" in result.stdout
    assert "No data for this period." in result.stdout


def test_day_lookup(monkeypatch, runner: CliRunner) -> None:
    _install_stub(monkeypatch, StubClient(config=None))

    result = runner.invoke(app, ["day", "2023", "1", "15"])

    assert result.exit_code == 0
    assert "2023-01-15" in result.stdout
    assert "8.3" in result.stdout


def test_base_url_option_reaches_client(monkeypatch, runner: CliRunner) -> None:
    stub = StubClient(config=None)
    _install_stub(monkeypatch, stub)

    runner.invoke(app, ["--base-url", "http://example.test/api/", "monthly"])

    assert stub.config.base_url == "http://example.test/api"


def test_load_config_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("API_BASE_URL", "http://stats.local/api")
    monkeypatch.setenv("CLI_TIMEOUT", "not-a-number")

    config = load_config()

    assert config.base_url == "http://stats.local/api"
    assert config.timeout == 30.0


def test_load_config_defaults(monkeypatch) -> None:
    monkeypatch.delenv("API_BASE_URL", raising=False)
    monkeypatch.delenv("CLI_TIMEOUT", raising=False)

    assert load_config().base_url == DEFAULT_BASE_URL


def test_api_client_upload_raises_api_error_with_detail(sample_file: Path) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/load-data"
        return httpx.Response(500, json={"detail": "Failed to store readings."})

    client = ApiClient(load_config(base_url="http://testserver/api"))
    client.close()
    client._client = httpx.Client(
        base_url="http://testserver/api/", transport=httpx.MockTransport(handler)
    )

    with pytest.raises(ApiError) as excinfo:
        client.upload_file(sample_file)

    assert excinfo.value.status_code == 500
    assert excinfo.value.detail == "Failed to store readings."
    client.close()
