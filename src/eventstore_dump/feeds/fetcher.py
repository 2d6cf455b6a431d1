# ABOUTME: Single-shot HTTP GET for feed resources.
# ABOUTME: Uses httpx with optional TLS verification skip; failures raise FetchError.

from urllib.parse import urlsplit

import httpx
import structlog

from eventstore_dump.errors import FetchError

log = structlog.get_logger()


class ResourceFetcher:
    """Fetches raw resource bodies over HTTP(S), one attempt per call."""

    def __init__(
        self,
        timeout: float = 30.0,
        insecure: bool = False,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.insecure = insecure
        self._transport = transport
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            if self.insecure:
                log.warning("tls_verification_disabled")
            self._client = httpx.Client(
                timeout=self.timeout,
                verify=not self.insecure,
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ResourceFetcher":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def fetch(self, url: str) -> bytes:
        """GET a resource and return its body.

        Args:
            url: Absolute http or https URL.

        Returns:
            Raw response body.

        Raises:
            ValueError: If the URL is not absolute http(s).
            FetchError: On transport failure or non-2xx status.
        """
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"Expected an absolute http(s) URL, got {url!r}")

        log.info("fetching_resource", url=url)
        try:
            response = self.client.get(url)
        except httpx.RequestError as e:
            log.error("resource_request_error", url=url, error=str(e))
            raise FetchError(url) from e

        if not response.is_success:
            body = ""
            try:
                body = response.text
            except (httpx.HTTPError, UnicodeDecodeError) as e:
                log.debug("diagnostic_body_unreadable", url=url, error=str(e))
            log.warning(
                "resource_fetch_failed",
                url=url,
                status=response.status_code,
                body=body,
            )
            raise FetchError(url, status=response.status_code, body=body)

        return response.content
