from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import requests

from ..config.loader import ConfigurationError
from ..engine.a1 import RangeSpec
from ..models.cell import Grid
from ..models.config_models import ValueInputMode, ValueRenderMode

logger = logging.getLogger(__name__)

"""Spreadsheet service client (Sheets API v4, values collection).

Thin wrapper over requests:
- bearer access token (SHEETS_ACCESS_TOKEN), resolved before any call
- one HTTP request per operation call, no retries
- timeouts are per request; cancellation is left to requests
"""

BASE_URL = "https://sheets.googleapis.com/v4"
TOKEN_ENV = "SHEETS_ACCESS_TOKEN"


class SheetsApiError(Exception):
    """Request to the spreadsheet service failed."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class SourceUnavailable(SheetsApiError):
    """Grid fetch failed (network error or error response)."""


def _error_message(response: requests.Response) -> str:
    try:
        data = response.json() or {}
        message = (data.get("error") or {}).get("message")
        if message:
            return f"Sheets API error {response.status_code}: {message}"
    except ValueError:
        pass
    return f"Sheets API error {response.status_code}: {response.reason}"


class SheetsApiClient:
    """GridClient backed by the remote spreadsheet service."""

    def __init__(
        self,
        access_token: str,
        *,
        timeout: float = 30.0,
        base_url: str = BASE_URL,
        session: requests.Session | None = None,
    ) -> None:
        if not access_token:
            raise ConfigurationError("spreadsheet access token is empty")
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Authorization": f"Bearer {access_token}", "Content-Type": "application/json"}
        )

    @classmethod
    def from_env(cls, *, timeout: float = 30.0) -> SheetsApiClient:
        token = os.getenv(TOKEN_ENV)
        if not token:
            raise ConfigurationError(f"missing credentials: environment variable {TOKEN_ENV} is not set")
        return cls(token, timeout=timeout)

    def _values_url(self, spreadsheet_id: str, suffix: str = "") -> str:
        return f"{self.base_url}/spreadsheets/{quote(spreadsheet_id, safe='')}/values{suffix}"

    def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
        error_cls: type[SheetsApiError] = SheetsApiError,
    ) -> dict[str, Any]:
        logger.debug(f"{method} {url} params={params}")
        try:
            response = self.session.request(method, url, params=params, json=body, timeout=self.timeout)
        except requests.RequestException as e:
            raise error_cls(f"request failed: {e}") from e
        if not response.ok:
            raise error_cls(_error_message(response), status=response.status_code)
        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise error_cls(f"invalid JSON response: {e}", status=response.status_code) from e

    def fetch_grid(self, range_spec: RangeSpec, value_render_mode: ValueRenderMode) -> Grid | None:
        url = self._values_url(range_spec.spreadsheet_id, "/" + quote(range_spec.address(), safe=""))
        params = {
            "valueRenderOption": value_render_mode.value,
            "dateTimeRenderOption": "FORMATTED_STRING",
            "majorDimension": "ROWS",
        }
        data = self._request("GET", url, params=params, error_cls=SourceUnavailable)
        values = data.get("values")
        if not values:
            return None
        return [list(row) for row in values]

    def write_grid(self, range_spec: RangeSpec, grid: Grid, value_input_mode: ValueInputMode) -> None:
        url = self._values_url(range_spec.spreadsheet_id, "/" + quote(range_spec.address(), safe=""))
        self._request(
            "PUT",
            url,
            params={"valueInputOption": value_input_mode.value},
            body={"range": range_spec.address(), "majorDimension": "ROWS", "values": grid},
        )

    def append_grid(self, range_spec: RangeSpec, grid: Grid, value_input_mode: ValueInputMode) -> None:
        url = self._values_url(range_spec.spreadsheet_id, "/" + quote(range_spec.address(), safe="") + ":append")
        self._request(
            "POST",
            url,
            params={"valueInputOption": value_input_mode.value, "insertDataOption": "INSERT_ROWS"},
            body={"range": range_spec.address(), "majorDimension": "ROWS", "values": grid},
        )

    def clear_range(self, range_spec: RangeSpec) -> None:
        url = self._values_url(range_spec.spreadsheet_id, "/" + quote(range_spec.address(), safe="") + ":clear")
        self._request("POST", url, body={})

    def batch_write(
        self,
        spreadsheet_id: str,
        data: Sequence[tuple[str, Grid]],
        value_input_mode: ValueInputMode,
    ) -> None:
        if not data:
            return
        url = self._values_url(spreadsheet_id, ":batchUpdate")
        body = {
            "valueInputOption": value_input_mode.value,
            "data": [{"range": address, "majorDimension": "ROWS", "values": values} for address, values in data],
        }
        self._request("POST", url, body=body)
