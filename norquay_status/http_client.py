from __future__ import annotations

from typing import Optional

import httpx

from .config import SourceConfig, app_config
from .logging import get_logger

logger = get_logger(__name__)


class UpstreamFetchError(Exception):
    """The conditions page could not be fetched.

    ``status_code`` is the upstream HTTP status, or ``None`` when the request
    never got a response (DNS, connect or read failure).
    """

    def __init__(self, url: str, status_code: Optional[int] = None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"Upstream {status_code} {reason}".rstrip()
        else:
            message = f"Upstream request failed: {reason}".rstrip(": ")
        super().__init__(message)


class HttpFetcher:
    """Thin httpx wrapper that performs exactly one request per fetch.

    Use it as a context manager; a client built here is closed on exit, an
    injected client is left open for its owner.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        *,
        settings: Optional[SourceConfig] = None,
    ) -> None:
        settings = settings or app_config.source
        self._owns_client = client is None
        self.client = client or httpx.Client(
            timeout=settings.timeout,
            follow_redirects=True,
            headers={
                "User-Agent": settings.user_agent,
                "Accept": "text/html,application/xhtml+xml",
            },
        )

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_text(self, url: str, *, trace_id: str | None = None) -> str:
        logger.info("http.fetch", trace_id=trace_id, url=url)
        try:
            response = self.client.get(url)
        except httpx.RequestError as exc:
            logger.warning("http.fetch.failed", trace_id=trace_id, url=url, error=str(exc))
            raise UpstreamFetchError(url, reason=str(exc)) from exc

        if not response.is_success:
            logger.warning(
                "http.fetch.bad_status",
                trace_id=trace_id,
                url=url,
                status_code=response.status_code,
            )
            raise UpstreamFetchError(url, response.status_code, response.reason_phrase)
        return response.text
