"""Dataverse Web API client.

Thin async wrapper over httpx: OData query options, bearer auth, typed errors
and retry with exponential backoff for transient failures.
"""
from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Awaitable, Callable, Optional, Sequence

import httpx

from ..common.logging import get_logger
from ..core.exceptions import DataFetchError, DataverseError

log = get_logger(__name__)

API_VERSION = "v9.2"

TokenProvider = Callable[[], Awaitable[str]]


@dataclass(frozen=True)
class QueryOptions:
    select: Sequence[str] = ()
    filter: Optional[str] = None
    expand: Sequence[str] = ()
    orderby: Optional[str] = None
    top: Optional[int] = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.select:
            params["$select"] = ",".join(self.select)
        if self.filter:
            params["$filter"] = self.filter
        if self.expand:
            params["$expand"] = ",".join(self.expand)
        if self.orderby:
            params["$orderby"] = self.orderby
        if self.top is not None:
            params["$top"] = str(self.top)
        return params


@dataclass(frozen=True)
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    retryable_statuses: frozenset[int] = field(default_factory=lambda: frozenset({408, 429, 500, 502, 503, 504}))

    def delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        if retry_after is not None:
            return min(retry_after, self.max_delay)
        delay = self.base_delay * (2 ** attempt)
        return min(delay + delay * 0.2 * random.random(), self.max_delay)


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """Retry-After header in seconds (delta-seconds or HTTP date form)."""
    if not value:
        return None
    value = value.strip()
    if value.isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)


def static_token(token: str) -> TokenProvider:
    async def provider() -> str:
        return token

    return provider


class DataverseClient:
    def __init__(
        self,
        base_url: str,
        token_provider: TokenProvider,
        *,
        retry: Optional[RetryConfig] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if not base_url:
            raise ValueError("Dataverse URL is required. Set DATAVERSE_URL.")
        self._base_url = f"{base_url.rstrip('/')}/api/data/{API_VERSION}"
        self._token_provider = token_provider
        self._retry = retry or RetryConfig()
        self._timeout = timeout
        self._transport = transport
        self._sleep = sleep

    async def _headers(self, method: str) -> dict[str, str]:
        token = await self._token_provider()
        headers = {
            "Authorization": f"Bearer {token}",
            "OData-MaxVersion": "4.0",
            "OData-Version": "4.0",
            "Accept": "application/json",
            "Prefer": 'odata.include-annotations="*"',
        }
        if method in ("POST", "PATCH"):
            headers["Content-Type"] = "application/json"
        return headers

    async def _send(self, method: str, path: str, *, params=None, json=None) -> httpx.Response:
        url = f"{self._base_url}/{path}"
        last_error: Optional[Exception] = None

        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            for attempt in range(self._retry.max_retries + 1):
                # token is re-acquired on every attempt in case it expired
                headers = await self._headers(method)
                try:
                    response = await client.request(method, url, params=params, json=json, headers=headers)
                except httpx.TransportError as e:
                    last_error = e
                    if attempt < self._retry.max_retries:
                        delay = self._retry.delay(attempt)
                        log.warning("dataverse.network_error", method=method, path=path, error=str(e), retry_in=delay, attempt=attempt + 1)
                        await self._sleep(delay)
                        continue
                    break

                if response.is_success or response.status_code not in self._retry.retryable_statuses:
                    return response
                if attempt >= self._retry.max_retries:
                    return response

                delay = self._retry.delay(attempt, parse_retry_after(response.headers.get("Retry-After")))
                log.warning("dataverse.retryable_status", method=method, path=path, status=response.status_code, retry_in=delay, attempt=attempt + 1)
                await self._sleep(delay)

        raise DataFetchError(f"{method} {path} failed after {self._retry.max_retries + 1} attempts: {last_error}") from last_error

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            body = response.json()
        except ValueError:
            body = None
        raise DataverseError.from_response(response.status_code, response.reason_phrase, body)

    async def get(self, entity_set: str, options: Optional[QueryOptions] = None) -> list[dict[str, Any]]:
        params = options.to_params() if options else None
        response = await self._send("GET", entity_set, params=params)
        self._raise_for_status(response)
        return list(response.json().get("value") or [])

    async def update(self, entity_set: str, record_id: str, data: dict[str, Any]) -> None:
        response = await self._send("PATCH", f"{entity_set}({record_id})", json=data)
        self._raise_for_status(response)

    async def delete_reference(self, entity_set: str, record_id: str, navigation: str) -> None:
        response = await self._send("DELETE", f"{entity_set}({record_id})/{navigation}/$ref")
        self._raise_for_status(response)
