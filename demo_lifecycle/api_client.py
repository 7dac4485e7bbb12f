"""Async transport for the helpdesk REST API, reusing core authentication and config knobs."""
from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Protocol
from urllib.parse import urlencode

import aiohttp

from helpdesk_core.auth import HelpdeskAuthenticator

from .config import TenantConfig
from .errors import TransportError

logger = logging.getLogger("demo_lifecycle.transport")


@dataclass
class ApiResponse:
    status: int
    reason: str = ""
    text: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        if not self.text:
            return {}
        return json.loads(self.text)

    def safe_json(self) -> Any:
        """Body as JSON, or the raw text wrapped in a dict when it is not JSON."""
        try:
            return self.json()
        except ValueError:
            return {"raw": self.text}


class Transport(Protocol):
    """What the orchestrator needs from an HTTP client."""

    def url_for(self, path: str, **query: Any) -> str:
        ...

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        ...


class ApiClient:
    def __init__(self, tenant: TenantConfig, config_loader=None):
        self.tenant = tenant
        self.base_url = tenant.base_url.rstrip("/")
        self.config_loader = config_loader

        rate_config = config_loader.get("async_config.rate_limiting", {}) if config_loader else {}
        self.rate_limit_per_minute = rate_config.get("rate_limit_per_minute", 200)
        self.burst_size = rate_config.get("burst_size", 10)
        self.retry_429_delay = rate_config.get("retry_429_delay", 10)
        self.backoff_multiplier = rate_config.get("backoff_multiplier", 1.5)
        self.max_retry_delay = rate_config.get("max_retry_delay", 300)
        self.max_429_retries = rate_config.get("max_429_retries", 5)

        concurrency_config = config_loader.get("async_config.concurrency", {}) if config_loader else {}
        self.max_concurrent_api_calls = concurrency_config.get("max_concurrent_api_calls", 5)

        perf_config = config_loader.get("async_config.performance", {}) if config_loader else {}
        self.connection_pool_size = perf_config.get("connection_pool_size", 20)
        self.connection_timeout = perf_config.get("connection_timeout", 10)
        self.read_timeout = perf_config.get("read_timeout", 30)
        self.keep_alive = perf_config.get("keep_alive", True)

        self.session: Optional[aiohttp.ClientSession] = None
        self.authenticator: Optional[HelpdeskAuthenticator] = None
        self.api_semaphore: Optional[asyncio.Semaphore] = None

        self.request_count = 0
        self.start_time = time.time()
        self.rate_limit_lock = asyncio.Lock()

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(
            limit=self.connection_pool_size,
            ttl_dns_cache=300,
            use_dns_cache=True,
            keepalive_timeout=60 if self.keep_alive else 0,
            enable_cleanup_closed=True,
        )
        timeout = aiohttp.ClientTimeout(total=None, connect=self.connection_timeout, sock_read=self.read_timeout)
        self.session = aiohttp.ClientSession(connector=connector, timeout=timeout)
        self.authenticator = HelpdeskAuthenticator(self.base_url)
        if self.tenant.oauth_token:
            self.authenticator.set_oauth_token(self.tenant.oauth_token)
        self.authenticator.set_api_token(self.tenant.agent_email, self.tenant.api_token)
        self.authenticator.setup_authentication()
        self.api_semaphore = asyncio.Semaphore(self.max_concurrent_api_calls)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()

    def url_for(self, path: str, **query: Any) -> str:
        url = f"{self.base_url}{path}"
        if query:
            url = f"{url}?{urlencode(query)}"
        return url

    async def check_rate_limit(self):
        async with self.rate_limit_lock:
            current_time = time.time()
            elapsed = current_time - self.start_time
            if elapsed >= 60:
                self.request_count = 0
                self.start_time = current_time
                elapsed = 0
            accumulated_requests = int((elapsed / 60) * self.rate_limit_per_minute)
            available_requests = self.burst_size + accumulated_requests
            if self.request_count >= available_requests:
                requests_per_second = self.rate_limit_per_minute / 60
                sleep_time = max(1.0 / requests_per_second, 0)
                if sleep_time > 0:
                    await asyncio.sleep(min(sleep_time, 60))
            self.request_count += 1

    def _retry_delay(self, response: ApiResponse, backoff: float) -> float:
        retry_after = response.headers.get("Retry-After")
        try:
            return float(retry_after) if retry_after is not None else backoff
        except (ValueError, TypeError):
            return backoff

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> ApiResponse:
        if not self.session or not self.authenticator or not self.api_semaphore:
            raise RuntimeError("ApiClient not initialized; use async context manager")

        merged = self.authenticator.get_headers()
        merged.update(headers or {})

        async with self.api_semaphore:
            backoff = self.retry_429_delay
            attempts = 0
            while True:
                await self.check_rate_limit()
                try:
                    async with self.session.request(method, url, headers=merged, json=body) as raw:
                        response = ApiResponse(
                            status=raw.status,
                            reason=raw.reason or "",
                            text=await raw.text(),
                            headers=dict(raw.headers),
                        )
                except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                    raise TransportError(method, url, exc) from exc

                logger.debug("%s %s -> Status: %s", method, url, response.status)
                if response.status == 429 and attempts < self.max_429_retries:
                    delay = self._retry_delay(response, backoff)
                    logger.warning("Rate limited (429). Waiting %s seconds...", delay)
                    await asyncio.sleep(delay)
                    backoff = min(backoff * self.backoff_multiplier, self.max_retry_delay)
                    attempts += 1
                    continue
                return response
