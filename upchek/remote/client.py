"""httpx-based client for fetching a peer's published results.

All failures (transport, non-200 status, malformed body) surface as
FetchError.
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from upchek.health.errors import FetchError
from upchek.health.models import TimestampedResult
from upchek.remote.models import results_adapter

logger = logging.getLogger(__name__)

RESULTS_PATH = "/api/v1/results"

# Unbounded pool: with no timeout, a capped pool lets stuck peers starve the rest.
POOL_LIMITS = httpx.Limits(max_connections=None, max_keepalive_connections=20)


class PeerClient:
    """Async client shared by all peer pollers.

    No request timeout is applied; a stuck peer is bounded only by shutdown.
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, limits=POOL_LIMITS, transport=transport)

    @staticmethod
    def results_url(addr: str) -> str:
        if addr.startswith(("http://", "https://")):
            return f"{addr.rstrip('/')}{RESULTS_PATH}"
        return f"http://{addr}{RESULTS_PATH}"

    async def fetch_results(self, addr: str) -> list[TimestampedResult]:
        """GET a peer's /api/v1/results and decode it."""
        try:
            resp = await self._client.get(
                self.results_url(addr),
                headers={"Accept": "application/json"},
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FetchError(addr, f"making request: {type(e).__name__}: {e}") from e

        if resp.status_code != 200:
            raise FetchError(
                addr,
                f"unexpected status {resp.status_code}: {resp.text[:200].strip()}",
                status_code=resp.status_code,
            )

        try:
            payloads = results_adapter.validate_json(resp.content)
        except ValidationError as e:
            raise FetchError(addr, f"unmarshaling response: {e.error_count()} errors") from e

        try:
            return [p.to_result() for p in payloads]
        except (ValueError, OverflowError, OSError) as e:
            raise FetchError(addr, f"unmarshaling response: {type(e).__name__}: {e}") from e

    async def close(self) -> None:
        await self._client.aclose()
