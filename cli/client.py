from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import httpx
import typer

from cli.config import CLIConfig


class ApiClient:
    """Minimal HTTP client for the chart service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_day_chart(self, day: str) -> Dict[str, Any]:
        return self._get_json(f"/charts/day/{day}")

    def get_month_chart(self, year: int, month: int) -> Dict[str, Any]:
        return self._get_json(f"/charts/month/{year}/{month}")

    def get_year_chart(self, year: int) -> Dict[str, Any]:
        return self._get_json(f"/charts/year/{year}")

    def get_current(self) -> Dict[str, Any]:
        return self._get_json("/data/current")

    def import_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise typer.BadParameter(f"File {path} does not exist.")
        if not path.is_file():
            raise typer.BadParameter(f"Path {path} is not a file.")

        try:
            with path.open("rb") as handle:
                response = self._client.post(
                    "/readings",
                    files={"file": (path.name, handle, "text/csv")},
                )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    def _get_json(self, url: str) -> Dict[str, Any]:
        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
