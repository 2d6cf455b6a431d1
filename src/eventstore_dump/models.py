# ABOUTME: Pydantic models for the notification feed.
# ABOUTME: Defines Feed, Entry and Link as parsed from one Atom page.

from pydantic import BaseModel

PREV_ARCHIVE = "prev-archive"
NEXT_ARCHIVE = "next-archive"


class Link(BaseModel):
    """Feed-level link relation."""

    rel: str
    href: str


class Entry(BaseModel):
    """Single notification from a feed page."""

    id: str = ""
    body: str = ""
    content_type: str = ""
    published: str = ""

    def dump_line(self) -> str:
        """Render the entry as one dump line."""
        return f"{self.id} {self.body} {self.published} {self.content_type}"


class Feed(BaseModel):
    """One page of the notification feed."""

    entries: list[Entry] = []
    links: list[Link] = []

    def link(self, rel: str) -> str | None:
        """Return the href of the first link with the given relation."""
        for link in self.links:
            if link.rel == rel:
                return link.href
        return None
