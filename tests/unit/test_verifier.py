import json

import pytest

from src.errors import ConfigurationError
from src.models.delivery import VerificationKind
from src.utils.crypto import hmac_sha256_hex
from src.webhook_auth.verifier import WebhookSignatureVerifier, parse_signature_header


BODY = '{"id":"evt_1","type":"checkout.session.completed"}'
TS = 1700000000


def header_for(secret: str, body: str, ts: int = TS) -> str:
    return f"t={ts},v1={hmac_sha256_hex(secret, f'{ts}.{body}')}"


class TestParseHeader:

    @pytest.mark.unit
    def test_extracts_pairs(self):
        assert parse_signature_header("t=1700000000,v1=abc123") == {"t": "1700000000", "v1": "abc123"}

    @pytest.mark.unit
    def test_ignores_unknown_keys_and_whitespace(self):
        parts = parse_signature_header(" t=1 , v1=aa, v0=bb ,junk")
        assert parts["t"] == "1"
        assert parts["v1"] == "aa"
        assert "junk" not in parts

    @pytest.mark.unit
    def test_none_and_empty(self):
        assert parse_signature_header(None) == {}
        assert parse_signature_header("") == {}


class TestVerify:

    @pytest.mark.unit
    def test_valid_signature_accepted(self, verifier, webhook_secret):
        assert verifier.verify(header_for(webhook_secret, BODY), BODY) is True

    @pytest.mark.unit
    def test_bytes_body_accepted(self, verifier, webhook_secret):
        assert verifier.verify(header_for(webhook_secret, BODY), BODY.encode()) is True

    @pytest.mark.unit
    def test_body_mutated_by_one_byte_rejected(self, verifier, webhook_secret):
        header = header_for(webhook_secret, BODY)
        assert verifier.verify(header, BODY[:-1] + " ") is False

    @pytest.mark.unit
    def test_reserialized_body_rejected(self, verifier, webhook_secret):
        header = header_for(webhook_secret, BODY)
        reserialized = json.dumps(json.loads(BODY), indent=2)
        assert verifier.verify(header, reserialized) is False

    @pytest.mark.unit
    def test_missing_v1_rejected_without_raising(self, verifier):
        assert verifier.verify("t=1700000000", BODY) is False

    @pytest.mark.unit
    def test_missing_t_rejected(self, verifier, webhook_secret):
        sig = hmac_sha256_hex(webhook_secret, f"{TS}.{BODY}")
        assert verifier.verify(f"v1={sig}", BODY) is False

    @pytest.mark.unit
    @pytest.mark.parametrize("header", [None, "", "garbage", "t=,v1=", "t=abc,v1=00"])
    def test_malformed_header_rejected(self, verifier, header):
        assert verifier.verify(header, BODY) is False

    @pytest.mark.unit
    def test_length_mismatch_rejected(self, verifier):
        assert verifier.verify(f"t={TS},v1=abc123", BODY) is False

    @pytest.mark.unit
    def test_wrong_secret_rejected(self, verifier):
        assert verifier.verify(header_for("some-other-secret", BODY), BODY) is False

    @pytest.mark.unit
    def test_timestamp_is_part_of_signature(self, verifier, webhook_secret):
        sig = hmac_sha256_hex(webhook_secret, f"{TS}.{BODY}")
        assert verifier.verify(f"t={TS + 1},v1={sig}", BODY) is False

    @pytest.mark.unit
    def test_v0_entries_ignored(self, verifier, webhook_secret):
        header = header_for(webhook_secret, BODY) + ",v0=deadbeef"
        assert verifier.verify(header, BODY) is True

    @pytest.mark.unit
    def test_old_timestamp_accepted_without_tolerance(self, verifier, webhook_secret):
        assert verifier.tolerance_seconds is None
        assert verifier.verify(header_for(webhook_secret, BODY, ts=1), BODY) is True


class TestTolerance:

    @pytest.mark.unit
    def test_within_tolerance_accepted(self, webhook_secret, clock):
        v = WebhookSignatureVerifier(webhook_secret, tolerance_seconds=300, clock=clock)
        ts = int(clock.now) - 120
        assert v.verify(header_for(webhook_secret, BODY, ts), BODY) is True

    @pytest.mark.unit
    def test_stale_timestamp_rejected(self, webhook_secret, clock):
        v = WebhookSignatureVerifier(webhook_secret, tolerance_seconds=300, clock=clock)
        ts = int(clock.now) - 301
        assert v.verify(header_for(webhook_secret, BODY, ts), BODY) is False

    @pytest.mark.unit
    def test_future_timestamp_rejected(self, webhook_secret, clock):
        v = WebhookSignatureVerifier(webhook_secret, tolerance_seconds=300, clock=clock)
        ts = int(clock.now) + 600
        assert v.verify(header_for(webhook_secret, BODY, ts), BODY) is False


class TestConfiguration:

    @pytest.mark.unit
    @pytest.mark.parametrize("secret", ["", None])
    def test_missing_secret_is_configuration_error(self, secret):
        with pytest.raises(ConfigurationError):
            WebhookSignatureVerifier(secret)


class TestAuditing:

    @pytest.mark.unit
    def test_outcomes_recorded_with_reason(self, verifier, webhook_secret, audit, metrics):
        verifier.verify(header_for(webhook_secret, BODY), BODY)
        verifier.verify("t=1700000000", BODY)
        verifier.verify(header_for("wrong", BODY), BODY)

        reasons = [a.reason for a in audit.get_attempts(VerificationKind.WEBHOOK)]
        assert reasons == ["ok", "malformed_header", "bad_signature"]
        assert metrics.accepted_count_in_window(VerificationKind.WEBHOOK) == 1
        assert metrics.rejected_count_in_window(VerificationKind.WEBHOOK) == 2
