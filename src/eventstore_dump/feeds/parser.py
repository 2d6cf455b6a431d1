# ABOUTME: Atom parsing of feed pages into Feed models.
# ABOUTME: Uses a strict lxml parser; content bodies and types are taken verbatim.

import structlog
from lxml import etree

from eventstore_dump.errors import ParseError
from eventstore_dump.models import Entry, Feed, Link

log = structlog.get_logger()

ATOM_NS = "http://www.w3.org/2005/Atom"
NS = {"atom": ATOM_NS}

_PARSER = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)


def _text(element: etree._Element, path: str) -> str:
    found = element.find(path, NS)
    if found is None or found.text is None:
        return ""
    return found.text


def _parse_entry(element: etree._Element) -> Entry:
    body = ""
    content_type = ""
    content = element.find("atom:content", NS)
    if content is not None:
        body = "".join(content.itertext())
        content_type = content.get("type", "")

    return Entry(
        id=_text(element, "atom:id"),
        body=body,
        content_type=content_type,
        published=_text(element, "atom:published"),
    )


def parse_feed(data: bytes) -> Feed:
    """Parse an Atom document.

    Only structure is checked; entries missing ids, content or timestamps
    come through with empty values. Content is not decoded or sanitized.

    Args:
        data: Plaintext feed document.

    Returns:
        Parsed Feed.

    Raises:
        ParseError: If the document is not well-formed XML.
    """
    try:
        root = etree.fromstring(data, parser=_PARSER)
    except etree.XMLSyntaxError as e:
        log.error("feed_parse_error", error=str(e))
        raise ParseError(f"Malformed feed document: {e}") from e

    links = [
        Link(rel=link.get("rel", ""), href=link.get("href", ""))
        for link in root.findall("atom:link", NS)
    ]
    entries = [_parse_entry(entry) for entry in root.findall("atom:entry", NS)]

    log.debug("feed_parsed", entries=len(entries), links=len(links))
    return Feed(entries=entries, links=links)
