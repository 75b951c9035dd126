"""
Data models for webhook verification.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator


@dataclass(frozen=True)
class SignedHeader:
    """
    Parsed signature header.

    Attributes:
        timestamp: Timestamp claimed by the sender (Unix epoch, unauthenticated)
        signatures: Candidate signatures for the requested scheme, in header order
        legacy_signature: Deprecated ``v0`` value, never used for verification
        scheme: Scheme the signatures were collected for
    """
    timestamp: int
    signatures: list[str]
    legacy_signature: str | None = None
    scheme: str = "v1"


@dataclass(frozen=True)
class VerificationContext:
    """
    Inputs of a single verification call.

    Attributes:
        payload: Raw request body, exactly as received
        secret: Shared signing secret (hidden from repr)
        tolerance: Maximum accepted age in seconds, or None to skip the check
    """
    payload: str | bytes
    secret: str = field(repr=False)
    tolerance: float | None = None


@dataclass(frozen=True)
class Event:
    """
    A verified webhook event.

    The event shape is open-ended: every field of the decoded JSON object is
    kept in ``raw`` and reachable with ``event["field"]``. The common envelope
    fields are copied onto attributes when present.

    Attributes:
        raw: The decoded JSON object
        id: Event identifier (e.g. ``evt_...``)
        object: Object kind, usually ``"event"``
        type: Event type (e.g. ``"charge.succeeded"``)
        created: Creation timestamp (Unix epoch)
        livemode: Whether the event came from live mode
        api_version: API version the payload was rendered with
        data: Event data object
    """
    raw: dict[str, Any]
    id: str | None = None
    object: str | None = None
    type: str | None = None
    created: int | None = None
    livemode: bool | None = None
    api_version: str | None = None
    data: dict[str, Any] | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Event:
        return cls(
            raw=raw,
            id=raw.get("id"),
            object=raw.get("object"),
            type=raw.get("type"),
            created=raw.get("created"),
            livemode=raw.get("livemode"),
            api_version=raw.get("api_version"),
            data=raw.get("data"),
        )

    def __getitem__(self, key: str) -> Any:
        return self.raw[key]

    def __contains__(self, key: object) -> bool:
        return key in self.raw

    def __iter__(self) -> Iterator[str]:
        return iter(self.raw)

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        return dict(self.raw)


@dataclass
class VerificationResult:
    """
    Outcome of verifying one webhook request.

    Attributes:
        verified: Whether the signature was valid and the payload decoded
        event: The verified event if verified
        error: Error message if verification failed
        error_kind: Name of the error class if verification failed
        timestamp: Timestamp claimed by the signature header, when verified
    """
    verified: bool
    event: Event | None = None
    error: str | None = None
    error_kind: str | None = None
    timestamp: int | None = None


@dataclass
class WebhookState:
    """
    Webhook state attached to requests by the middleware.

    Attributes:
        signed: Whether the request carried a signature header
        result: Verification result if signed
    """
    signed: bool
    result: VerificationResult | None = None
