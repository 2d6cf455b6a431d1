# ABOUTME: Two-phase walk of the archive chain: back to the oldest page, then forward.
# ABOUTME: Pages and entries are produced lazily, oldest first.

from collections.abc import Iterator
from enum import Enum
from urllib.parse import urlsplit

import structlog

from eventstore_dump.errors import LinkExtractionError
from eventstore_dump.feeds.reader import FeedReader
from eventstore_dump.models import NEXT_ARCHIVE, PREV_ARCHIVE, Entry, Feed

log = structlog.get_logger()


class Phase(str, Enum):
    """Traversal state."""

    SEEK_FIRST = "seek_first"
    FORWARD = "forward"
    DONE = "done"


def feed_id_from_href(href: str) -> str:
    """Extract the feed id as the last path segment of an archive link.

    Raises:
        LinkExtractionError: If the href has no usable last path segment.
    """
    try:
        path = urlsplit(href).path
    except ValueError as e:
        raise LinkExtractionError(f"Unparseable archive link {href!r}") from e

    feed_id = path.rsplit("/", 1)[-1]
    if not feed_id:
        raise LinkExtractionError(f"No feed id in archive link {href!r}")
    return feed_id


class ArchiveTraversal:
    """Walks the archive chain starting from the recent page.

    Seek-first follows prev-archive links until a page has none; that page
    is the oldest. The forward phase then emits it and follows next-archive
    links until a page has none. Only one page is held at a time, and any
    error ends the walk.
    """

    def __init__(self, reader: FeedReader) -> None:
        self.reader = reader
        self.phase = Phase.SEEK_FIRST
        self.current: Feed | None = None
        self._started = False
        self._last_emitted: Feed | None = None

    def _follow(self, rel: str) -> bool:
        href = self.current.link(rel) if self.current else None
        if href is None:
            return False

        feed_id = feed_id_from_href(href)
        log.info("archive_link_found", rel=rel, feed_id=feed_id)
        self.current = self.reader.get_feed(feed_id)
        return True

    def _seek_step(self) -> Feed | None:
        if not self._started:
            self._started = True
            log.info("seeking_first_feed")
            self.current = self.reader.get_recent()
            if self.current is None:
                log.info("feed_has_no_entries")
                self.phase = Phase.DONE
            return None

        if self._follow(PREV_ARCHIVE):
            return None

        self.phase = Phase.FORWARD
        return self.current

    def _forward_step(self) -> Feed | None:
        if self._follow(NEXT_ARCHIVE):
            return self.current

        self.phase = Phase.DONE
        return None

    def step(self) -> Feed | None:
        """Advance one transition; return a page when it is ready to emit.

        Any exception ends the traversal before it propagates.
        """
        try:
            if self.phase is Phase.SEEK_FIRST:
                return self._seek_step()
            if self.phase is Phase.FORWARD:
                return self._forward_step()
            return None
        except Exception:
            self.phase = Phase.DONE
            self.current = None
            raise

    def seek_first(self) -> Feed | None:
        """Run the seek-first phase and return the oldest page, or None for an empty feed."""
        while self.phase is Phase.SEEK_FIRST:
            first = self.step()
            if first is not None:
                return first
        return None

    def pages(self) -> Iterator[Feed]:
        """Yield pages oldest first, fetching each only when requested.

        After a separate seek_first() call the walk resumes from the page it
        found, which is yielded first.
        """
        if self.phase is Phase.SEEK_FIRST:
            self.seek_first()

        if self.phase is Phase.FORWARD and self.current is not self._last_emitted:
            self._last_emitted = self.current
            yield self.current

        while self.phase is not Phase.DONE:
            page = self.step()
            if page is not None:
                self._last_emitted = page
                yield page

    def entries(self) -> Iterator[Entry]:
        """Yield entries oldest page first, in the order each page lists them."""
        for page in self.pages():
            yield from page.entries
