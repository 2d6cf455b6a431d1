# ABOUTME: Main package for dumping an event store notification feed.
# ABOUTME: Exports settings, feed models and the archive traversal entry points.

from eventstore_dump.config import get_settings
from eventstore_dump.feeds import ArchiveTraversal, FeedReader
from eventstore_dump.models import Entry, Feed, Link

__all__ = [
    "get_settings",
    "ArchiveTraversal",
    "Entry",
    "Feed",
    "FeedReader",
    "Link",
]
