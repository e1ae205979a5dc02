from __future__ import annotations

"""Async HTTP client util with retry.

GET JSON with a bounded timeout and limited retries so the scheduled refresh
can never hang on the upstream provider.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger("app.http")


class HttpError(Exception):
    pass


async def get_json(
    url: str,
    *,
    timeout: float = 10.0,
    retries: int = 2,
    backoff: float = 0.5,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    last_err: Optional[Exception] = None
    async with httpx.AsyncClient(
        timeout=timeout, headers=headers, transport=transport
    ) as client:
        for attempt in range(retries + 1):
            try:
                resp = await client.get(url)
                if resp.status_code >= 400:
                    raise HttpError(f"HTTP {resp.status_code}")
                data = resp.json()
                if not isinstance(data, dict):
                    raise HttpError("response body is not a JSON object")
                return data
            except (
                httpx.HTTPError,
                httpx.InvalidURL,
                HttpError,
                ValueError,
            ) as e:  # ValueError for JSON decode
                last_err = e
                logger.warning(
                    "upstream request failed",
                    extra={"attempt": attempt + 1, "error": str(e)},
                )
                if attempt == retries:
                    break
                await asyncio.sleep(backoff * (2**attempt))
    raise HttpError(f"Failed to fetch JSON from {url}: {last_err}")
