# ABOUTME: Exception taxonomy for feed fetching, decryption, parsing and traversal.
# ABOUTME: Every error is terminal for a run; recovery means restarting from the recent page.


class FeedError(Exception):
    """Base class for all failures while reading the notification feed."""


class FetchError(FeedError):
    """HTTP request failed at the transport level or returned a non-2xx status.

    Attributes:
        url: The requested URL.
        status: HTTP status code, or None for transport failures.
        body: Best-effort diagnostic body of a non-2xx response.
    """

    def __init__(self, url: str, status: int | None = None, body: str = "") -> None:
        self.url = url
        self.status = status
        self.body = body
        if status is None:
            message = f"Error retrieving resource {url}"
        else:
            message = f"Error retrieving resource {url}: {status}"
        super().__init__(message)


class EnvelopeFormatError(FeedError):
    """Payload is not a two-part encrypted envelope."""


class EncodingError(FeedError):
    """An envelope segment is not valid base64."""


class KeyUnwrapError(FeedError):
    """The wrapped data key could not be turned into a usable AES-256 key."""


class MalformedCiphertextError(FeedError):
    """Ciphertext is too short to hold a nonce."""


class AuthenticationError(FeedError):
    """AES-GCM tag verification failed."""


class ParseError(FeedError):
    """Feed document is not well-formed XML."""


class LinkExtractionError(FeedError):
    """An archive link href does not yield a feed id."""
