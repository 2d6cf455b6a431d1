# ABOUTME: Feed reader composing fetch, optional envelope decryption and Atom parsing.
# ABOUTME: Exposes the recent page and archive pages by feed id.

import structlog

from eventstore_dump.config import Settings, get_settings
from eventstore_dump.errors import LinkExtractionError, ParseError
from eventstore_dump.feeds.envelope import KeyUnwrap, KmsKeyUnwrapper, decrypt_envelope
from eventstore_dump.feeds.fetcher import ResourceFetcher
from eventstore_dump.feeds.parser import parse_feed
from eventstore_dump.models import Feed

log = structlog.get_logger()


class FeedReader:
    """Reads pages of the notification feed."""

    def __init__(
        self,
        settings: Settings | None = None,
        fetcher: ResourceFetcher | None = None,
        key_unwrap: KeyUnwrap | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        if not self.settings.atomfeed_endpoint:
            raise ValueError("Missing ATOMFEED_ENDPOINT environment variable value")

        self.fetcher = fetcher or ResourceFetcher(
            timeout=self.settings.feed_timeout,
            insecure=self.settings.feed_insecure,
        )
        self._key_unwrap = key_unwrap
        if self.is_encrypted:
            log.info("feed_encryption_enabled", key_alias=self.settings.key_alias)

    @property
    def is_encrypted(self) -> bool:
        """Whether a key alias is configured for decrypting pages."""
        return self.settings.is_encrypted

    @property
    def key_unwrap(self) -> KeyUnwrap:
        """Key unwrap capability, defaulting to AWS KMS."""
        if self._key_unwrap is None:
            self._key_unwrap = KmsKeyUnwrapper(region=self.settings.aws_region)
        return self._key_unwrap

    def close(self) -> None:
        """Close the underlying fetcher."""
        self.fetcher.close()

    def __enter__(self) -> "FeedReader":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def get_recent(self) -> Feed | None:
        """Fetch the most recent page.

        Returns:
            The recent Feed, or None when the feed has nothing to serve yet.
        """
        url = f"{self.settings.feed_base_url}/recent"
        data = self._read(url)
        if not data.strip():
            log.info("recent_feed_empty", url=url)
            return None
        return parse_feed(data)

    def get_feed(self, feed_id: str) -> Feed:
        """Fetch an archive page by its feed id."""
        if not feed_id:
            raise LinkExtractionError("Empty feed id")

        url = f"{self.settings.feed_base_url}/{feed_id}"
        data = self._read(url)
        if not data.strip():
            raise ParseError(f"Archive page {feed_id} is empty")
        return parse_feed(data)

    def _read(self, url: str) -> bytes:
        data = self.fetcher.fetch(url)
        if self.is_encrypted and data.strip():
            data = decrypt_envelope(data, self.key_unwrap)
        return data
