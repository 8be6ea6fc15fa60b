from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import typer

from cli.config import CLIConfig


class ApiError(RuntimeError):
    """The API answered with an error status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"Request failed with status {status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class ApiClient:
    """Minimal HTTP client for the statistics API.

    Transport failures (``httpx.TransportError``) propagate so callers can
    fall back to local parsing. Uploads raise ``ApiError`` on error statuses;
    other requests end the command.
    """

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        # Trailing slash keeps the API prefix when joining relative paths.
        self._client = httpx.Client(base_url=f"{config.base_url}/", timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def upload_file(self, path: Path) -> Dict[str, Any]:
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")

        with path.open("rb") as handle:
            response = self._client.post(
                "load-data",
                files={"file": (path.name, handle, "text/plain")},
            )
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(exc.response.status_code, self._error_detail(exc.response)) from exc
        return response.json()

    def daily_stats(self, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        return self._get("stats/daily", params=self._page_params(page, limit))

    def monthly_stats(self, page: int = 1, limit: Optional[int] = None) -> Dict[str, Any]:
        return self._get("stats/monthly", params=self._page_params(page, limit))

    def month_stats(self, year: int, month: int) -> Dict[str, Any]:
        return self._get(f"stats/month/{year}/{month}")

    def day_stats(self, year: int, month: int, day: int) -> Dict[str, Any]:
        return self._get(f"stats/day/{year}/{month}/{day}")

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._json(self._client.get(path, params=params))

    @staticmethod
    def _page_params(page: int, limit: Optional[int]) -> Dict[str, Any]:
        params: Dict[str, Any] = {"page": page}
        if limit is not None:
            params["limit"] = limit
        return params

    def _json(self, response: httpx.Response) -> Dict[str, Any]:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        detail: Any = None
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = response.text.strip()
        return str(detail) if detail else "no detail provided."

    def _handle_http_error(self, exc: httpx.HTTPStatusError) -> None:
        message = (
            f"Request failed with status {exc.response.status_code}: {self._error_detail(exc.response)}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
