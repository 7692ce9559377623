"""
Client for the hosted relational backend.

The backend exposes each table as a REST resource (PostgREST style) plus
stored procedures under `/rpc`. This module only performs requests and
turns failures into BackendError; it never retries and never interprets
rows beyond decoding the JSON body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import httpx

from .config import Settings
from .errors import BackendError

logger = logging.getLogger(__name__)

REST_PREFIX = "/rest/v1"


class BackendClient:
    """
    Table-level access to the backend.

    Args:
        base_url: project URL, e.g. https://xyz.example.co
        api_key: key sent as `apikey` and as the bearer token unless
            `access_token` is given.
        access_token: token of the signed-in user, so row-level security
            applies to their rows.
        client: preconfigured httpx.Client (tests pass one with a MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        *,
        access_token: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {access_token or api_key}",
            "Accept": "application/json",
        }
        self._client = client or httpx.Client(timeout=timeout)
        self._client.base_url = base_url.rstrip("/") + REST_PREFIX
        self._client.headers.update(headers)

    @classmethod
    def from_settings(cls, settings: Settings, access_token: str | None = None) -> "BackendClient":
        if not settings.backend_url:
            raise BackendError("backend URL is not configured (BIZDASH_BACKEND_URL)")
        return cls(
            settings.backend_url,
            settings.backend_key,
            access_token=access_token,
            timeout=settings.timeout,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # --- requests ---

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("backend %s %s failed: %s", method, path, e)
            raise BackendError(f"backend unreachable: {e}") from e

        if resp.is_error:
            message = _error_message(resp)
            logger.warning("backend %s %s returned %s: %s", method, path, resp.status_code, message)
            raise BackendError(message, status_code=resp.status_code)
        return resp

    def select(
        self,
        table: str,
        *,
        columns: str = "*",
        order_by: str | None = None,
        descending: bool = False,
        filters: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Rows of `table`; `filters` are equality matches (`column=eq.value`)."""
        params: Dict[str, str] = {"select": columns}
        if order_by:
            params["order"] = f"{order_by}.{'desc' if descending else 'asc'}"
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"

        resp = self._request("GET", f"/{table}", params=params)
        rows = _json(resp)
        logger.debug("selected %d rows from %s", len(rows), table)
        return rows

    def insert(self, table: str, rows: List[Dict[str, Any]]) -> None:
        if not rows:
            return
        self._request("POST", f"/{table}", json=rows, headers={"Prefer": "return=minimal"})
        logger.debug("inserted %d rows into %s", len(rows), table)

    def delete_all(self, table: str) -> None:
        # The REST layer refuses an unfiltered delete; match every row with a non-empty id.
        self._request("DELETE", f"/{table}", params={"id": "neq."})
        logger.debug("cleared %s", table)

    def rpc(self, function: str, params: Mapping[str, Any]) -> Any:
        resp = self._request("POST", f"/rpc/{function}", json=dict(params))
        if not resp.content:
            return None
        return _json(resp)


def _json(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError as e:
        logger.warning("backend returned a non-JSON body (HTTP %s)", resp.status_code)
        raise BackendError("backend returned invalid JSON", status_code=resp.status_code) from e


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return resp.text or f"backend returned HTTP {resp.status_code}"
