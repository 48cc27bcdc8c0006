import logging
import os
from urllib.parse import urljoin
from typing import Any, Mapping, Optional

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_WINNERS_TABLE = "raffle_winners"
# PostgREST default max-rows.
DEFAULT_PAGE_SIZE = 1000


class SupabaseClient:
    """Thin client for the Supabase REST (PostgREST) endpoint holding winners."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        *,
        winners_table: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: int = 15,
    ):
        load_dotenv()
        url = base_url or os.getenv("SUPABASE_URL")
        if not url:
            raise ValueError("Environment variable 'SUPABASE_URL' is not set")
        key = api_key or os.getenv("SUPABASE_KEY")
        if not key:
            raise ValueError("Environment variable 'SUPABASE_KEY' is not set")

        if not url.startswith(("http://", "https://")):
            url = f"https://{url}"
        self.base_url = url.rstrip("/")
        self.api_key = key
        self.winners_table = (
            winners_table
            or os.getenv("SUPABASE_WINNERS_TABLE")
            or DEFAULT_WINNERS_TABLE
        )
        self.session = session or requests.Session()
        self.timeout = timeout

    # -------- headers --------
    @property
    def auth_headers(self) -> Mapping[str, str]:
        return {
            "Accept": "application/json",
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
        }

    @property
    def write_headers(self) -> Mapping[str, str]:
        return {
            **self.auth_headers,
            "Content-Type": "application/json",
            "Prefer": "return=representation,resolution=ignore-duplicates",
        }

    # -------- core request --------
    def _request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        params: Optional[dict] = None,
        json: Optional[Any] = None,
    ) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        # Never log headers, they carry the API key.
        logger.debug(f"{method.upper()} {url}")
        r = self.session.request(
            method=method.upper(),
            url=url,
            headers=headers or self.auth_headers,
            params=params,
            json=json,
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json() if r.content else None

    # -------- API callers --------
    def fetch_winners(self, page_size: int = DEFAULT_PAGE_SIZE) -> list[dict]:
        """Return every winner row, oldest draw first.

        PostgREST caps each response at its ``max-rows`` setting, so rows are
        requested page by page until an empty page comes back. Stopping on an
        empty page rather than a short one also copes with a server cap
        below ``page_size``.
        """
        if page_size <= 0:
            raise ValueError("page_size must be positive")

        rows: list[dict] = []
        while True:
            page = self._request(
                "GET",
                f"/rest/v1/{self.winners_table}",
                params={
                    "select": "*",
                    "order": "draw_date.asc,id.asc",
                    "limit": page_size,
                    "offset": len(rows),
                },
            )
            if page is None:
                page = []
            if not isinstance(page, list):
                raise RuntimeError(f"Unexpected winners response: {page!r}")
            if not page:
                return rows
            rows.extend(page)

    def insert_winner(self, payload: Mapping[str, Any]) -> dict:
        """Insert one winner row and return the stored representation.

        The insert is keyed on ``name`` and ignores duplicates, so retrying a
        write whose response was lost does not create a second row. An empty
        dict means the row already existed remotely.
        """
        rows = self._request(
            "POST",
            f"/rest/v1/{self.winners_table}",
            headers=self.write_headers,
            params={"on_conflict": "name"},
            json=dict(payload),
        )
        if rows is None:
            return {}
        if isinstance(rows, list):
            return rows[0] if rows else {}
        if isinstance(rows, dict):
            return rows
        raise RuntimeError(f"Unexpected insert response: {rows!r}")


__all__ = ["DEFAULT_PAGE_SIZE", "DEFAULT_WINNERS_TABLE", "SupabaseClient"]
