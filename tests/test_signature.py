"""Tests for signature computation and header verification."""

import logging

import pytest
from webhook_verifier import generate_test_header_string
from webhook_verifier.headers import parse_header
from webhook_verifier.errors import (
    InvalidPayloadError,
    MalformedHeaderError,
    SignatureMismatchError,
    SignatureVerificationError,
    TimestampExpiredError,
)
from webhook_verifier.signature import (
    WebhookSignature,
    compute_signature,
    signed_message,
    verify_header,
    verify_signed_header,
)

NOW = 1614556800
SECRET = "whsec_test"
PAYLOAD = '{"id":"evt_1","object":"event"}'
GOLDEN_SIGNATURE = "47015ab257d644fb7a3b6eaadb2cf61b99e0c2a050d98dbf7d1e71f3d9ecf181"
OLD_SECRET_SIGNATURE = "2ee53e7568658e392569548be399cff2e518c31f32a37be6ab8c2fd620299c59"


def header_for(payload=PAYLOAD, secret=SECRET, timestamp=NOW):
    return generate_test_header_string(payload=payload, secret=secret, timestamp=timestamp)


class TestComputeSignature:
    """Tests for compute_signature and signed_message."""

    def test_golden_value(self):
        """Known payload, secret and timestamp give a fixed digest."""
        assert compute_signature(PAYLOAD, SECRET, NOW) == GOLDEN_SIGNATURE

    def test_bytes_payload_matches_str(self):
        """A bytes payload signs the same as its UTF-8 string."""
        assert compute_signature(PAYLOAD.encode("utf-8"), SECRET, NOW) == GOLDEN_SIGNATURE

    def test_lowercase_hex(self):
        """Digest is 64 lowercase hex characters."""
        sig = compute_signature("{}", SECRET, NOW)
        assert len(sig) == 64
        assert sig == sig.lower()
        int(sig, 16)

    def test_timestamp_is_bound(self):
        """Changing the timestamp changes the signature."""
        assert compute_signature(PAYLOAD, SECRET, NOW) != compute_signature(PAYLOAD, SECRET, NOW + 1)

    def test_signed_message_format(self):
        """Signed message is '<timestamp>.<payload>' with no extra whitespace."""
        assert signed_message(123, "body\n") == b"123.body\n"
        assert signed_message(123, b"\x00raw") == b"123.\x00raw"

    def test_non_ascii_payload(self):
        """Non-ASCII payloads are signed as UTF-8."""
        payload = '{"name":"café"}'
        assert compute_signature(payload, SECRET, NOW) == compute_signature(
            payload.encode("utf-8"), SECRET, NOW
        )


class TestVerifyHeader:
    """Tests for verify_header function."""

    def test_round_trip(self, frozen_time):
        """A generated header verifies."""
        header = generate_test_header_string(payload=PAYLOAD, secret=SECRET)
        assert verify_header(PAYLOAD, header, SECRET) is None

    def test_round_trip_with_tolerance(self, frozen_time):
        """A fresh header verifies under a tolerance."""
        verify_header(PAYLOAD, header_for(), SECRET, tolerance=300)

    def test_tampered_payload(self):
        """A single changed character fails with SignatureMismatchError."""
        tampered = PAYLOAD.replace("evt_1", "evt_2")
        with pytest.raises(SignatureMismatchError):
            verify_header(tampered, header_for(), SECRET)

    def test_appended_whitespace(self):
        """Re-encoded bodies (extra whitespace) fail verification."""
        with pytest.raises(SignatureMismatchError):
            verify_header(PAYLOAD + "\n", header_for(), SECRET)

    def test_wrong_secret(self):
        """Signing and verifying with different secrets fails."""
        header = header_for(secret="whsec_a")
        with pytest.raises(SignatureMismatchError):
            verify_header(PAYLOAD, header, "whsec_b")

    def test_wrong_timestamp(self):
        """A valid signature moved to another timestamp fails."""
        header = f"t={NOW + 10},v1={GOLDEN_SIGNATURE}"
        with pytest.raises(SignatureMismatchError):
            verify_header(PAYLOAD, header, SECRET)

    def test_rotation_current_secret_second(self):
        """Two v1 entries: the one matching the current secret is found."""
        header = f"t={NOW},v1={OLD_SECRET_SIGNATURE},v1={GOLDEN_SIGNATURE}"
        verify_header(PAYLOAD, header, SECRET)

    def test_rotation_current_secret_first(self):
        """Match is order-independent."""
        header = f"t={NOW},v1={GOLDEN_SIGNATURE},v1={OLD_SECRET_SIGNATURE}"
        verify_header(PAYLOAD, header, SECRET)

    def test_rotation_old_secret(self):
        """The old secret also verifies during rotation."""
        header = f"t={NOW},v1={GOLDEN_SIGNATURE},v1={OLD_SECRET_SIGNATURE}"
        verify_header(PAYLOAD, header, "whsec_old")

    def test_legacy_signature_ignored(self):
        """A correct v0 value does not rescue a bad v1."""
        header = f"t={NOW},v1=bad,v0={GOLDEN_SIGNATURE}"
        with pytest.raises(SignatureMismatchError):
            verify_header(PAYLOAD, header, SECRET)

    def test_non_ascii_candidate(self):
        """Non-ASCII signature values fail cleanly."""
        with pytest.raises(SignatureMismatchError):
            verify_header(PAYLOAD, f"t={NOW},v1=café", SECRET)

    def test_custom_scheme(self):
        """Verification can target another scheme key."""
        header = f"t={NOW},v2={GOLDEN_SIGNATURE}"
        verify_header(PAYLOAD, header, SECRET, scheme="v2")
        with pytest.raises(MalformedHeaderError):
            verify_header(PAYLOAD, header, SECRET)

    def test_bytes_payload_and_header(self):
        """Raw bytes as received from a framework verify."""
        verify_header(PAYLOAD.encode("utf-8"), header_for().encode("utf-8"), SECRET)

    def test_malformed_headers(self):
        """Missing t=, missing v1= and empty headers fail with MalformedHeaderError."""
        for header in ("", f"v1={GOLDEN_SIGNATURE}", f"t={NOW}", f"t={NOW},v0=abc"):
            with pytest.raises(MalformedHeaderError):
                verify_header(PAYLOAD, header, SECRET)

    def test_parsed_payload_rejected(self):
        """An already parsed JSON object is rejected with a hint."""
        with pytest.raises(InvalidPayloadError, match="raw request body"):
            verify_header({"id": "evt_1"}, header_for(), SECRET)

    def test_all_failures_are_verification_errors(self):
        """Every verification failure shares one base class."""
        cases = [
            ("", SECRET),
            (header_for(), "whsec_wrong"),
        ]
        for header, secret in cases:
            with pytest.raises(SignatureVerificationError):
                verify_header(PAYLOAD, header, secret)

    def test_mismatch_error_hides_secret_and_digest(self):
        """Error text never contains the secret or the expected digest."""
        header = f"t={NOW},v1=deadbeef"
        with pytest.raises(SignatureMismatchError) as exc_info:
            verify_header(PAYLOAD, header, SECRET)
        message = str(exc_info.value)
        assert SECRET not in message
        assert GOLDEN_SIGNATURE not in message
        assert exc_info.value.header == header
        assert exc_info.value.payload == PAYLOAD

    def test_failure_logs_hide_secret(self, caplog):
        """Debug logs on failure contain neither secret nor digest."""
        with caplog.at_level(logging.DEBUG, logger="webhook_verifier"):
            with pytest.raises(SignatureMismatchError):
                verify_header(PAYLOAD, f"t={NOW},v1=deadbeef", SECRET)
        assert "mismatch" in caplog.text
        assert SECRET not in caplog.text
        assert GOLDEN_SIGNATURE not in caplog.text

    def test_idempotent(self, frozen_time):
        """Identical arguments give identical verdicts."""
        header = header_for()
        assert verify_header(PAYLOAD, header, SECRET, tolerance=10) is None
        assert verify_header(PAYLOAD, header, SECRET, tolerance=10) is None

        for _ in range(2):
            with pytest.raises(SignatureMismatchError):
                verify_header(PAYLOAD, header, "whsec_other", tolerance=10)


    def test_verify_signed_header(self, frozen_time):
        """A pre-parsed header goes through the same checks."""
        header = header_for()
        signed = parse_header(header)
        assert verify_signed_header(PAYLOAD, signed, SECRET, tolerance=300) is None

        with pytest.raises(SignatureMismatchError) as exc_info:
            verify_signed_header(PAYLOAD, signed, "whsec_other", header=header)
        assert exc_info.value.header == header

        with pytest.raises(ValueError, match="finite"):
            verify_signed_header(PAYLOAD, signed, SECRET, tolerance=float("nan"))


class TestTolerance:
    """Tests for the timestamp freshness check."""

    def test_exactly_tolerance_old(self, frozen_time):
        """A timestamp exactly T seconds old is accepted."""
        frozen_time(NOW + 300)
        verify_header(PAYLOAD, header_for(), SECRET, tolerance=300)

    def test_one_second_past_tolerance(self, frozen_time):
        """A timestamp T + 1 seconds old is rejected."""
        frozen_time(NOW + 301)
        with pytest.raises(TimestampExpiredError) as exc_info:
            verify_header(PAYLOAD, header_for(), SECRET, tolerance=300)
        assert exc_info.value.timestamp == NOW
        assert exc_info.value.tolerance == 300

    def test_no_tolerance_never_expires(self, frozen_time):
        """Without a tolerance, age alone never fails."""
        frozen_time(NOW + 10 * 365 * 24 * 3600)
        verify_header(PAYLOAD, header_for(), SECRET)

    def test_future_timestamp_accepted(self, frozen_time):
        """Clock skew in the sender's favour is accepted."""
        frozen_time(NOW - 3600)
        verify_header(PAYLOAD, header_for(), SECRET, tolerance=5)

    def test_zero_tolerance_same_second(self, frozen_time):
        """Zero tolerance accepts a timestamp from the current second."""
        frozen_time(NOW + 0.9)
        verify_header(PAYLOAD, header_for(), SECRET, tolerance=0)

    def test_zero_tolerance_previous_second(self, frozen_time):
        """Zero tolerance rejects a timestamp one second old."""
        frozen_time(NOW + 1)
        with pytest.raises(TimestampExpiredError):
            verify_header(PAYLOAD, header_for(), SECRET, tolerance=0)

    def test_negative_tolerance(self):
        """Negative tolerance is a programming error."""
        with pytest.raises(ValueError, match="tolerance"):
            verify_header(PAYLOAD, header_for(), SECRET, tolerance=-1)

    def test_non_finite_tolerance(self, frozen_time):
        """NaN and infinity cannot switch the freshness check off."""
        header = header_for(timestamp=1)
        for tolerance in (float("nan"), float("inf")):
            with pytest.raises(ValueError, match="finite"):
                verify_header(PAYLOAD, header, SECRET, tolerance=tolerance)

    def test_signature_checked_before_timestamp(self, frozen_time):
        """A forged, stale header reports the mismatch, not the expiry."""
        frozen_time(NOW + 1000)
        with pytest.raises(SignatureMismatchError):
            verify_header(PAYLOAD, header_for(secret="whsec_other"), SECRET, tolerance=10)


class TestWebhookSignature:
    """Tests for the WebhookSignature namespace."""

    def test_expected_scheme(self):
        assert WebhookSignature.EXPECTED_SCHEME == "v1"

    def test_methods(self):
        assert WebhookSignature.compute_signature(PAYLOAD, SECRET, NOW) == GOLDEN_SIGNATURE
        parsed = WebhookSignature.parse_header(header_for())
        assert parsed.signatures == [GOLDEN_SIGNATURE]
        WebhookSignature.verify_header(PAYLOAD, header_for(), SECRET)
