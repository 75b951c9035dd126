"""
Signature header parsing and lookup.
"""

from __future__ import annotations

from typing import Mapping

from .errors import MalformedHeaderError
from .models import SignedHeader


# Default HTTP header carrying the signature
SIGNATURE_HEADER = "webhook-signature"

# Current signature scheme
EXPECTED_SCHEME = "v1"

# Deprecated scheme, parsed but never verified
LEGACY_SCHEME = "v0"

TIMESTAMP_KEY = "t"

# Longest accepted timestamp; epoch seconds stay far below this
MAX_TIMESTAMP_DIGITS = 15

FIELD_SEPARATOR = ","
VALUE_SEPARATOR = "="


def parse_header(
    header: str | bytes,
    scheme: str = EXPECTED_SCHEME,
) -> SignedHeader:
    """
    Parse a signature header into its timestamp and signatures.

    Header format:
      t=1614556800,v1=5257a869...,v1=9f2c...,v0=6ffbb59b...

    Every ``scheme`` entry is kept, in order, so that a sender signing with
    both an old and a new secret during rotation verifies against either.
    Unknown keys are ignored.

    Args:
        header: The signature header value
        scheme: Signature scheme to collect (default: "v1")

    Returns:
        SignedHeader with the timestamp and candidate signatures

    Raises:
        MalformedHeaderError: If the header is empty, not a string, has no
            valid timestamp or has no signature for ``scheme``

    Examples:
        >>> parse_header("t=123,v1=abc,v1=def")
        SignedHeader(timestamp=123, signatures=['abc', 'def'], legacy_signature=None, scheme='v1')
    """
    if isinstance(header, bytes):
        try:
            header = header.decode("utf-8")
        except UnicodeDecodeError:
            raise MalformedHeaderError(
                "Unable to decode signature header as UTF-8",
                header=header,
            ) from None

    if not isinstance(header, str):
        raise MalformedHeaderError(
            f"Signature header must be a string, got {type(header).__name__}. "
            "Pass a single header value, not a list of headers.",
            header=None,
        )

    if not header.strip():
        raise MalformedHeaderError("Signature header is empty", header=header)

    timestamp: str | None = None
    legacy_signature: str | None = None
    signatures: list[str] = []

    for item in header.split(FIELD_SEPARATOR):
        key, sep, value = item.strip().partition(VALUE_SEPARATOR)
        if not sep:
            continue
        key = key.strip()
        value = value.strip()

        if key == TIMESTAMP_KEY:
            timestamp = value
        elif key == scheme:
            signatures.append(value)
        elif key == LEGACY_SCHEME:
            legacy_signature = value

    if (
        timestamp is None
        or not (timestamp.isascii() and timestamp.isdigit())
        or len(timestamp) > MAX_TIMESTAMP_DIGITS
    ):
        raise MalformedHeaderError(
            "Unable to extract timestamp and signatures from header",
            header=header,
        )

    if not signatures:
        raise MalformedHeaderError(
            f"No signatures found with expected scheme '{scheme}'",
            header=header,
        )

    return SignedHeader(
        timestamp=int(timestamp),
        signatures=signatures,
        legacy_signature=legacy_signature,
        scheme=scheme,
    )


def extract_signature_header(
    headers: Mapping[str, str],
    name: str = SIGNATURE_HEADER,
) -> str | None:
    """
    Look up the signature header in a request header mapping.

    Header names are compared case-insensitively.

    Args:
        headers: Request headers
        name: Signature header name (default: "webhook-signature")

    Returns:
        The header value, or None if absent

    Examples:
        >>> extract_signature_header({"Webhook-Signature": "t=1,v1=abc"})
        't=1,v1=abc'
    """
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


def has_signature_header(
    headers: Mapping[str, str],
    name: str = SIGNATURE_HEADER,
) -> bool:
    """Check if the request carries a signature header."""
    return extract_signature_header(headers, name) is not None
