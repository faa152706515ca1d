"""
HTTP helpers for upstream APIs.

Provides retry/backoff for transient errors and rate limits. Only
idempotent reads should go through more than one attempt.
"""

from __future__ import annotations

import asyncio
import random
from typing import Iterable

import httpx
import structlog
from prometheus_client import Counter

logger = structlog.get_logger()

_upstream_http_retries_total = Counter(
    "push_to_notion_upstream_http_retries_total",
    "Total upstream HTTP retries by service/operation and reason",
    ["service", "operation", "reason", "status_code"],
)


RETRY_STATUSES = {429, 500, 502, 503, 504}


def _backoff_delay(attempt: int, base_backoff: float, max_backoff: float) -> float:
    delay = min(max_backoff, base_backoff * (2 ** (attempt - 1)))
    return delay + random.uniform(0, delay / 2)


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    max_attempts: int = 3,
    retry_statuses: Iterable[int] | None = None,
    base_backoff: float = 0.25,
    max_backoff: float = 2.0,
    metrics_service: str | None = None,
    metrics_operation: str | None = None,
    **kwargs,
) -> httpx.Response:
    """
    Make an HTTP request with exponential backoff + jitter.

    `max_attempts=1` disables retries, which is what writes use.
    """
    retry_statuses = set(retry_statuses or RETRY_STATUSES)

    attempt = 0
    while True:
        attempt += 1
        try:
            response = await client.request(method, url, **kwargs)

            if response.status_code in retry_statuses and attempt < max_attempts:
                retry_after = response.headers.get("Retry-After")
                if retry_after:
                    try:
                        delay = min(max_backoff, float(retry_after))
                    except ValueError:
                        delay = base_backoff
                else:
                    delay = _backoff_delay(attempt, base_backoff, max_backoff)

                if metrics_service:
                    _upstream_http_retries_total.labels(
                        service=metrics_service,
                        operation=metrics_operation or "request",
                        reason="status",
                        status_code=str(response.status_code),
                    ).inc()

                logger.warning(
                    "Retrying request due to status",
                    status_code=response.status_code,
                    url=url,
                    attempt=attempt,
                    delay=delay,
                )
                await asyncio.sleep(delay)
                continue

            return response

        except (httpx.TimeoutException, httpx.NetworkError) as e:
            if attempt >= max_attempts:
                raise

            delay = _backoff_delay(attempt, base_backoff, max_backoff)
            if metrics_service:
                _upstream_http_retries_total.labels(
                    service=metrics_service,
                    operation=metrics_operation or "request",
                    reason="network",
                    status_code="0",
                ).inc()
            logger.warning(
                "Retrying request due to network error",
                url=url,
                attempt=attempt,
                delay=delay,
                error=str(e),
            )
            await asyncio.sleep(delay)
