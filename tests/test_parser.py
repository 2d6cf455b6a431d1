# ABOUTME: Tests for Atom page parsing.
# ABOUTME: Verifies links, entries and malformed document handling.

import pytest
from conftest import atom_page

from eventstore_dump.errors import ParseError
from eventstore_dump.feeds.parser import parse_feed
from eventstore_dump.models import NEXT_ARCHIVE, PREV_ARCHIVE, Feed, Link


class TestParseFeed:
    """Tests for parse_feed."""

    def test_entries_in_document_order(self) -> None:
        """Entries keep the order of the document."""
        feed = parse_feed(atom_page([("e3", "third"), ("e1", "first"), ("e2", "second")]))

        assert [entry.id for entry in feed.entries] == ["e3", "e1", "e2"]
        assert [entry.body for entry in feed.entries] == ["third", "first", "second"]

    def test_entry_metadata(self) -> None:
        """Published timestamp and content type are carried through."""
        feed = parse_feed(atom_page([("e1", "body")]))
        entry = feed.entries[0]

        assert entry.published == "2024-03-01T10:00:00Z"
        assert entry.content_type == "text"

    def test_archive_links(self) -> None:
        """prev-archive and next-archive links are exposed by relation."""
        feed = parse_feed(atom_page(prev="p1", next_="p3"))

        assert feed.link(PREV_ARCHIVE) == "http://feed.example.com/notifications/p1"
        assert feed.link(NEXT_ARCHIVE) == "http://feed.example.com/notifications/p3"

    def test_missing_fields_are_empty(self) -> None:
        """Entries without id, content or timestamp are passed through."""
        doc = (
            b'<?xml version="1.0" encoding="utf-8"?>'
            b'<feed xmlns="http://www.w3.org/2005/Atom"><title>t</title>'
            b"<entry><title>bare</title></entry></feed>"
        )
        feed = parse_feed(doc)

        assert len(feed.entries) == 1
        assert feed.entries[0].id == ""
        assert feed.entries[0].body == ""
        assert feed.entries[0].published == ""

    def test_no_entries(self) -> None:
        """A page without entries parses to an empty entry list."""
        feed = parse_feed(atom_page())
        assert feed.entries == []
        assert feed.link(PREV_ARCHIVE) is None

    @pytest.mark.parametrize(
        "doc",
        [
            b"<feed xmlns='http://www.w3.org/2005/Atom'><entry></feed>",
            b"not xml at all",
        ],
    )
    def test_malformed_xml(self, doc: bytes) -> None:
        """Documents that are not well-formed raise ParseError."""
        with pytest.raises(ParseError):
            parse_feed(doc)


class TestContentVerbatim:
    """Content bodies and types come through exactly as the document carries them."""

    @staticmethod
    def _single_entry(content_xml: str) -> bytes:
        return (
            '<?xml version="1.0" encoding="utf-8"?>'
            '<feed xmlns="http://www.w3.org/2005/Atom"><title>t</title>'
            f"<entry><id>evt-1</id>{content_xml}</entry></feed>"
        ).encode("utf-8")

    def test_type_code_with_base64_looking_body(self) -> None:
        """An event type code does not trigger base64 decoding of the body."""
        feed = parse_feed(
            self._single_entry('<content type="OrderCreated">eyJhIjoxfQ==</content>')
        )
        entry = feed.entries[0]

        assert entry.id == "evt-1"
        assert entry.body == "eyJhIjoxfQ=="
        assert entry.content_type == "OrderCreated"

    def test_html_body_not_sanitized(self) -> None:
        """Escaped html is unescaped once and otherwise left alone."""
        feed = parse_feed(
            self._single_entry(
                '<content type="html">&lt;script&gt;x&lt;/script&gt;&lt;b&gt;y&lt;/b&gt;</content>'
            )
        )
        entry = feed.entries[0]

        assert entry.body == "<script>x</script><b>y</b>"
        assert entry.content_type == "html"

    def test_json_body(self) -> None:
        """A JSON payload keeps its exact text."""
        feed = parse_feed(
            self._single_entry('<content type="application/json">{"event": "created"}</content>')
        )
        assert feed.entries[0].body == '{"event": "created"}'
        assert feed.entries[0].content_type == "application/json"

    def test_content_without_type(self) -> None:
        """A missing type attribute is an empty content type."""
        feed = parse_feed(self._single_entry("<content>plain</content>"))
        assert feed.entries[0].body == "plain"
        assert feed.entries[0].content_type == ""


class TestFeedModel:
    """Tests for Feed.link."""

    def test_first_link_wins(self) -> None:
        """When a relation repeats, the first href is used."""
        feed = Feed(
            links=[
                Link(rel="next-archive", href="http://x/notifications/a"),
                Link(rel="next-archive", href="http://x/notifications/b"),
            ]
        )
        assert feed.link(NEXT_ARCHIVE) == "http://x/notifications/a"
