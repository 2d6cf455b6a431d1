# ABOUTME: Pytest fixtures and configuration for eventstore_dump tests.
# ABOUTME: Provides settings, Atom page builders, envelope sealing and a fake feed server.

import base64
import logging
import os
from collections.abc import Callable

import httpx
import pytest
import structlog
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from eventstore_dump.config import Settings
from eventstore_dump.feeds.fetcher import ResourceFetcher

FEED_HOST = "feed.example.com"
BASE_URL = f"http://{FEED_HOST}/notifications"


def atom_page(
    entries: list[tuple[str, str]] | None = None,
    prev: str | None = None,
    next_: str | None = None,
) -> bytes:
    """Build an Atom notifications page.

    Args:
        entries: (id, body) pairs, in document order.
        prev: Feed id of the prev-archive page, if any.
        next_: Feed id of the next-archive page, if any.
    """
    links = [f'<link rel="self" href="{BASE_URL}/current"/>']
    if prev is not None:
        links.append(f'<link rel="prev-archive" href="{BASE_URL}/{prev}"/>')
    if next_ is not None:
        links.append(f'<link rel="next-archive" href="{BASE_URL}/{next_}"/>')

    entry_xml = [
        f"<entry><id>{entry_id}</id><title>event</title>"
        f"<published>2024-03-0{i % 9 + 1}T10:00:00Z</published>"
        f'<content type="text">{body}</content></entry>'
        for i, (entry_id, body) in enumerate(entries or [])
    ]

    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        '<feed xmlns="http://www.w3.org/2005/Atom">'
        "<title>Event store notifications</title>"
        "<id>urn:notifications</id>"
        "<updated>2024-03-01T10:00:00Z</updated>"
        + "".join(links)
        + "".join(entry_xml)
        + "</feed>"
    ).encode("utf-8")


def seal(plaintext: bytes, key: bytes, wrapped_key: bytes | None = None) -> bytes:
    """Build an encrypted envelope around plaintext."""
    nonce = os.urandom(12)
    ciphertext = nonce + AESGCM(key).encrypt(nonce, plaintext, None)
    wrapped = key if wrapped_key is None else wrapped_key
    return base64.b64encode(wrapped) + b"::" + base64.b64encode(ciphertext)


@pytest.fixture(autouse=True)
def quiet_logging():
    """Drop log output so stdout only carries command output."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))
    yield
    structlog.reset_defaults()


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings for a plaintext feed over http."""
    return Settings(
        atomfeed_endpoint=FEED_HOST,
        feed_proto="http",
        feed_insecure=False,
        feed_timeout=5.0,
        key_alias=None,
        log_level="DEBUG",
    )


@pytest.fixture
def encrypted_settings(mock_settings: Settings) -> Settings:
    """Create settings for an encrypted feed."""
    return mock_settings.model_copy(update={"key_alias": "alias/notifications"})


@pytest.fixture
def aes_key() -> bytes:
    """A fixed AES-256 key."""
    return bytes(range(32))


@pytest.fixture
def feed_server() -> Callable[[dict[str, httpx.Response]], tuple[ResourceFetcher, list[str]]]:
    """Create a fetcher backed by canned responses keyed by feed id.

    Returns a factory giving the fetcher and the list of requested URLs.
    Unknown feed ids answer 404.
    """

    def factory(pages: dict[str, httpx.Response]) -> tuple[ResourceFetcher, list[str]]:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(str(request.url))
            feed_id = request.url.path.rsplit("/", 1)[-1]
            canned = pages.get(feed_id)
            if canned is None:
                return httpx.Response(404, text="no such feed")
            return httpx.Response(canned.status_code, content=canned.content)

        fetcher = ResourceFetcher(timeout=5.0, transport=httpx.MockTransport(handler))
        return fetcher, requested

    return factory
