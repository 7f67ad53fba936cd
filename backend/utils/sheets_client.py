import logging
import os
from typing import Dict, List

import httpx

logger = logging.getLogger(__name__)

GOOGLE_SHEETS_API_BASE = os.getenv("GOOGLE_SHEETS_API_BASE", "https://sheets.googleapis.com/v4/spreadsheets")
GOOGLE_API_TIMEOUT = float(os.getenv("GOOGLE_API_TIMEOUT", "20"))


class SheetsAPIError(Exception):
    """A failed call to the Sheets API. status_code is the HTTP status, or None for network errors."""

    def __init__(self, message: str, status_code: int = None, timed_out: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.timed_out = timed_out


class SheetsClient:
    """Minimal Google Sheets v4 client authorised with the user's OAuth access token."""

    def __init__(self, access_token: str, timeout: float = GOOGLE_API_TIMEOUT, transport: httpx.BaseTransport = None):
        self._client = httpx.Client(
            base_url=GOOGLE_SHEETS_API_BASE,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def close(self):
        self._client.close()

    def _get(self, path: str, params=None) -> dict:
        try:
            response = self._client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise SheetsAPIError(f"Google Sheets did not respond: {e}", timed_out=True)
        except httpx.RequestError as e:
            raise SheetsAPIError(f"Network error talking to Google Sheets: {e}")
        if response.status_code != 200:
            logger.warning(f"Sheets API {path} returned {response.status_code}: {response.text[:200]}")
            raise SheetsAPIError(f"Google Sheets request failed ({response.status_code})", response.status_code)
        return response.json()

    def get_tab_titles(self, spreadsheet_id: str) -> List[str]:
        data = self._get(f"/{spreadsheet_id}", params={"fields": "sheets.properties"})
        titles = [sheet.get("properties", {}).get("title") for sheet in data.get("sheets", [])]
        return [title for title in titles if title]

    def batch_get_values(self, spreadsheet_id: str, ranges: List[str]) -> Dict[str, List[List[str]]]:
        """Cell values per requested range. Ranges come back in request order."""
        data = self._get(f"/{spreadsheet_id}/values:batchGet", params=[("ranges", r) for r in ranges])
        value_ranges = data.get("valueRanges", [])
        return {tab: (value_ranges[i].get("values") or []) if i < len(value_ranges) else [] for i, tab in enumerate(ranges)}
