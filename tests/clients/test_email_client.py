"""
Tests for EmailGatewayClient.

Tests verify the client's contract with calling code.
Focus on observable behavior, not implementation details.
"""

import hashlib
import hmac
import json

import pytest
import requests
import responses

from clients.email_client import EmailGatewayClient, EmailGatewayError, PickupNotice


class TestEmailGatewayClientInit:
    """Test client initialization - fail-fast on invalid config."""

    def test_init_with_valid_credentials(self):
        """Client initializes with all required credentials."""
        client = EmailGatewayClient(
            gateway_url="https://gateway.example.com/send",
            api_key="test-api-key",
            hmac_secret="test-hmac-secret",
        )
        assert client is not None

    @pytest.mark.parametrize("missing", ["gateway_url", "api_key", "hmac_secret"])
    def test_init_rejects_empty_credential(self, missing):
        """Each empty credential raises ValueError naming it."""
        kwargs = {
            "gateway_url": "https://gateway.example.com/send",
            "api_key": "test-api-key",
            "hmac_secret": "test-hmac-secret",
        }
        kwargs[missing] = ""

        with pytest.raises(ValueError, match=missing):
            EmailGatewayClient(**kwargs)


class TestSendEmail:
    """Test send_email - uses responses library for HTTP mocking."""

    GATEWAY_URL = "https://gateway.example.com/send"

    @pytest.fixture
    def client(self):
        """Create client with test credentials."""
        return EmailGatewayClient(
            gateway_url=self.GATEWAY_URL,
            api_key="test-api-key",
            hmac_secret="test-hmac-secret",
        )

    @responses.activate
    def test_successful_send(self, client):
        """Successful send completes without exception."""
        responses.add(
            responses.POST,
            self.GATEWAY_URL,
            json={"success": True},
            status=200,
        )

        result = client.send_email(
            to="donor@example.com",
            subject="Pickup scheduled",
            body="See you Monday",
        )
        assert result is None

    @responses.activate
    def test_request_is_signed(self, client):
        """X-Signature is the HMAC-SHA256 of the exact request body."""
        responses.add(responses.POST, self.GATEWAY_URL, json={"success": True}, status=200)

        client.send_email(to="donor@example.com", subject="Hi", body="Body")

        request = responses.calls[0].request
        body = request.body.encode("utf-8") if isinstance(request.body, str) else request.body
        expected = hmac.new(b"test-hmac-secret", body, hashlib.sha256).hexdigest()
        assert request.headers["X-Signature"] == expected
        assert request.headers["X-API-Key"] == "test-api-key"
        assert json.loads(body)["email"] == "donor@example.com"

    def test_empty_recipient_raises_value_error(self, client):
        """Missing recipient raises ValueError before any HTTP call."""
        with pytest.raises(ValueError, match="Recipient"):
            client.send_email(to="", subject="Test", body="Body")

    @responses.activate
    def test_gateway_500_raises_error(self, client):
        """Server error from gateway raises EmailGatewayError."""
        responses.add(
            responses.POST,
            self.GATEWAY_URL,
            json={"success": False, "message": "Internal error"},
            status=500,
        )

        with pytest.raises(EmailGatewayError):
            client.send_email(to="donor@example.com", subject="Test", body="Body")

    @responses.activate
    def test_gateway_success_false_raises_error(self, client):
        """Gateway returns 200 but success=false raises EmailGatewayError."""
        responses.add(
            responses.POST,
            self.GATEWAY_URL,
            json={"success": False, "message": "Invalid email"},
            status=200,
        )

        with pytest.raises(EmailGatewayError, match="Invalid email"):
            client.send_email(to="invalid", subject="Test", body="Body")

    @responses.activate
    def test_connection_failure_raises_error(self, client):
        """Network failure raises EmailGatewayError."""
        responses.add(
            responses.POST,
            self.GATEWAY_URL,
            body=requests.exceptions.ConnectionError("Network unreachable"),
        )

        with pytest.raises(EmailGatewayError):
            client.send_email(to="donor@example.com", subject="Test", body="Body")

    @responses.activate
    def test_invalid_json_response_raises_error(self, client):
        """Non-JSON response raises EmailGatewayError."""
        responses.add(
            responses.POST,
            self.GATEWAY_URL,
            body="not json",
            status=200,
        )

        with pytest.raises(EmailGatewayError):
            client.send_email(to="donor@example.com", subject="Test", body="Body")


class TestSendPickupNotice:
    """Test send_pickup_notice - typed notices about one ticket."""

    GATEWAY_URL = "https://gateway.example.com/send"

    @pytest.fixture
    def client(self):
        return EmailGatewayClient(
            gateway_url=self.GATEWAY_URL,
            api_key="test-api-key",
            hmac_secret="test-hmac-secret",
            sender="Thrift Pickups",
        )

    @responses.activate
    def test_payload_carries_notice_and_ticket(self, client):
        responses.add(responses.POST, self.GATEWAY_URL, json={"success": True}, status=200)

        client.send_pickup_notice(
            PickupNotice.RESCHEDULED,
            to="donor@example.com",
            ticket_id=12,
            subject="Pickup #12 rescheduled",
            body="New window",
        )

        request = responses.calls[0].request
        body = request.body.encode("utf-8") if isinstance(request.body, str) else request.body
        payload = json.loads(body)
        assert payload["type"] == "pickup_notice"
        assert payload["notice"] == "rescheduled"
        assert payload["ticket_id"] == 12
        assert payload["sender"] == "Thrift Pickups"
        assert request.headers["X-Signature"] == hmac.new(
            b"test-hmac-secret", body, hashlib.sha256
        ).hexdigest()

    @responses.activate
    def test_notice_accepts_plain_string_kind(self, client):
        responses.add(responses.POST, self.GATEWAY_URL, json={"success": True}, status=200)

        client.send_pickup_notice("scheduled", to="donor@example.com", ticket_id=3, subject="S", body="B")

        assert json.loads(responses.calls[0].request.body)["notice"] == "scheduled"

    def test_unknown_notice_kind_raises_value_error(self, client):
        with pytest.raises(ValueError):
            client.send_pickup_notice("birthday", to="donor@example.com", ticket_id=3, subject="S", body="B")

    def test_empty_recipient_raises_value_error(self, client):
        with pytest.raises(ValueError, match="Recipient"):
            client.send_pickup_notice(PickupNotice.SCHEDULED, to="", ticket_id=3, subject="S", body="B")

    @responses.activate
    def test_gateway_rejection_raises_error(self, client):
        responses.add(
            responses.POST,
            self.GATEWAY_URL,
            json={"success": False, "message": "Mailbox full"},
            status=200,
        )

        with pytest.raises(EmailGatewayError, match="Mailbox full"):
            client.send_pickup_notice(
                PickupNotice.SCHEDULED, to="donor@example.com", ticket_id=3, subject="S", body="B"
            )
