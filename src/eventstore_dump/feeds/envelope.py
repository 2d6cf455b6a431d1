# ABOUTME: Decryption of encrypted feed envelopes (wrapped key + AES-256-GCM payload).
# ABOUTME: Key unwrapping is injected; a KMS-backed unwrapper is provided for production use.

import base64
import binascii
from collections.abc import Callable
from typing import Any

import structlog
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from eventstore_dump.errors import (
    AuthenticationError,
    EncodingError,
    EnvelopeFormatError,
    KeyUnwrapError,
    MalformedCiphertextError,
)

log = structlog.get_logger()

ENVELOPE_SEPARATOR = "::"
KEY_SIZE = 32
NONCE_SIZE = 12

KeyUnwrap = Callable[[bytes], bytes]


def _b64decode(segment: str, name: str) -> bytes:
    try:
        return base64.b64decode(segment, validate=True)
    except (binascii.Error, ValueError) as e:
        raise EncodingError(f"Envelope {name} is not valid base64") from e


def decrypt_payload(ciphertext: bytes, key: bytes) -> bytes:
    """Open an AES-256-GCM payload laid out as nonce || ciphertext || tag."""
    if len(ciphertext) < NONCE_SIZE:
        raise MalformedCiphertextError(
            f"Ciphertext is {len(ciphertext)} bytes, shorter than the {NONCE_SIZE} byte nonce"
        )

    try:
        return AESGCM(key).decrypt(ciphertext[:NONCE_SIZE], ciphertext[NONCE_SIZE:], None)
    except InvalidTag as e:
        raise AuthenticationError("Envelope payload failed authentication") from e


def decrypt_envelope(raw: bytes, key_unwrap: KeyUnwrap) -> bytes:
    """Decrypt an envelope of the form base64(wrapped key)::base64(nonce || ciphertext || tag).

    Args:
        raw: Response body as received.
        key_unwrap: Turns the wrapped data key into raw key material.

    Returns:
        Decrypted plaintext.
    """
    try:
        text = raw.decode("utf-8").strip()
    except UnicodeDecodeError as e:
        raise EnvelopeFormatError("Envelope is not UTF-8 text") from e

    parts = text.split(ENVELOPE_SEPARATOR)
    if len(parts) != 2:
        raise EnvelopeFormatError(f"Expected two parts, got {len(parts)}")

    wrapped_key = _b64decode(parts[0], "key")
    ciphertext = _b64decode(parts[1], "message")

    try:
        key_material = key_unwrap(wrapped_key)
    except KeyUnwrapError:
        raise
    except Exception as e:
        raise KeyUnwrapError(f"Unable to unwrap data key: {e}") from e

    if len(key_material) < KEY_SIZE:
        raise KeyUnwrapError(
            f"Unwrapped key is {len(key_material)} bytes, need at least {KEY_SIZE}"
        )

    log.debug("envelope_key_unwrapped", ciphertext_bytes=len(ciphertext))
    return decrypt_payload(ciphertext, bytes(key_material[:KEY_SIZE]))


class KmsKeyUnwrapper:
    """Unwraps data keys with the AWS KMS Decrypt operation."""

    def __init__(self, region: str | None = None, client: Any | None = None) -> None:
        self.region = region
        self._client = client

    @property
    def client(self) -> Any:
        """Lazy-initialized KMS client."""
        if self._client is None:
            import boto3

            self._client = boto3.client("kms", region_name=self.region)
        return self._client

    def __call__(self, wrapped_key: bytes) -> bytes:
        response = self.client.decrypt(CiphertextBlob=wrapped_key)
        return response["Plaintext"]
