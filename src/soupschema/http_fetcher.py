"""HTTP document fetcher with retries, backoff and an optional on-disk cache."""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import httpx

from .config import FetchSettings
from .errors import FetchError

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    url: str
    status_code: int | None
    content: str | None
    elapsed: float
    final_url: str | None
    from_cache: bool
    error: str | None = None

    def raise_for_error(self) -> str:
        """Return the document text, or raise FetchError if none was obtained."""
        if self.error:
            raise FetchError(self.url, self.error)
        if self.status_code is not None and self.status_code >= 400:
            raise FetchError(self.url, f"HTTP {self.status_code}")
        if self.content is None:
            raise FetchError(self.url, "empty response")
        return self.content


def url_hash(url: str) -> str:
    return hashlib.sha256(url.strip().encode("utf-8")).hexdigest()


class DocumentFetcher:
    """Async HTTP fetcher with retry/backoff and a JSON file cache."""

    def __init__(
        self,
        user_agent: str = "soupschema/0.1",
        timeout: float = 20.0,
        max_retries: int = 3,
        backoff_base: float = 0.6,
        cache_dir: Optional[str | Path] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.cache_dir = Path(cache_dir) if cache_dir else None
        if self.cache_dir:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.client = httpx.AsyncClient(
            follow_redirects=True,
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: FetchSettings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "DocumentFetcher":
        return cls(
            user_agent=settings.user_agent,
            timeout=settings.timeout,
            max_retries=settings.max_retries,
            backoff_base=settings.backoff_base,
            cache_dir=settings.cache_dir,
            transport=transport,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "DocumentFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _cache_path(self, url: str) -> Optional[Path]:
        if not self.cache_dir:
            return None
        return self.cache_dir / f"{url_hash(url)}.json"

    def _load_cache(self, url: str, ttl: int) -> Optional[FetchResult]:
        path = self._cache_path(url)
        if path is None or not path.exists():
            return None
        if ttl > 0 and time.time() - path.stat().st_mtime > ttl:
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt cache entry %s", path)
            return None
        return FetchResult(
            url=data["url"],
            status_code=data.get("status_code"),
            content=data.get("content"),
            elapsed=data.get("elapsed", 0.0),
            final_url=data.get("final_url"),
            from_cache=True,
        )

    def _write_cache(self, url: str, result: FetchResult) -> None:
        path = self._cache_path(url)
        if path is None:
            return
        payload = {
            "url": result.url,
            "status_code": result.status_code,
            "content": result.content,
            "elapsed": result.elapsed,
            "final_url": result.final_url,
        }
        path.write_text(json.dumps(payload), encoding="utf-8")

    async def fetch(self, url: str, cache_ttl: int = 3600) -> FetchResult:
        cached = self._load_cache(url, ttl=cache_ttl)
        if cached:
            logger.debug("Cache hit for %s", url)
            return cached

        attempt = 0
        error: str | None = None
        response: httpx.Response | None = None
        start = time.perf_counter()
        while attempt <= self.max_retries:
            try:
                response = await self.client.get(url, timeout=self.timeout)
                break
            except (httpx.TimeoutException, httpx.RequestError) as exc:
                error = str(exc) or type(exc).__name__
                logger.warning("Fetch attempt %d for %s failed: %s", attempt + 1, url, error)
                attempt += 1
                if attempt <= self.max_retries:
                    await asyncio.sleep(self.backoff_base * (2 ** (attempt - 1)))
        elapsed = (time.perf_counter() - start) * 1000

        if response is None:
            return FetchResult(
                url=url,
                status_code=None,
                content=None,
                elapsed=elapsed,
                final_url=None,
                from_cache=False,
                error=error or "request_failed",
            )
        result = FetchResult(
            url=url,
            status_code=response.status_code,
            content=response.text,
            elapsed=elapsed,
            final_url=str(response.url),
            from_cache=False,
        )
        if response.status_code < 400:
            self._write_cache(url, result)
        return result


__all__ = ["DocumentFetcher", "FetchResult", "url_hash"]
