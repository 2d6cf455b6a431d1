# ABOUTME: Feed access module for the event store notification feed.
# ABOUTME: Handles fetching, envelope decryption, parsing and archive traversal.

from eventstore_dump.feeds.envelope import KmsKeyUnwrapper, decrypt_envelope
from eventstore_dump.feeds.fetcher import ResourceFetcher
from eventstore_dump.feeds.parser import parse_feed
from eventstore_dump.feeds.reader import FeedReader
from eventstore_dump.feeds.traversal import ArchiveTraversal, feed_id_from_href

__all__ = [
    "ArchiveTraversal",
    "FeedReader",
    "KmsKeyUnwrapper",
    "ResourceFetcher",
    "decrypt_envelope",
    "feed_id_from_href",
    "parse_feed",
]
