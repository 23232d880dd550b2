"""
Email gateway client for donor and staff pickup notifications.

Requests are JSON bodies signed with HMAC-SHA256 over the exact bytes sent.
Pickup notices carry the notice kind and ticket number so the gateway can
thread and template them; free-form mail goes through send_email.
"""

import hashlib
import hmac
import json
import logging
from enum import Enum

import requests

logger = logging.getLogger(__name__)


class EmailGatewayError(Exception):
    """Raised when email gateway request fails."""


class PickupNotice(str, Enum):
    """Kinds of pickup mail the gateway knows how to template."""
    STAFF_ALERT = "staff_alert"
    REQUEST_RECEIVED = "request_received"
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"


class EmailGatewayClient:
    """Send pickup mail via HTTP gateway with HMAC signature verification."""

    def __init__(
        self,
        gateway_url: str,
        api_key: str,
        hmac_secret: str,
        sender: str = "pickups",
        timeout: int = 10,
    ):
        """
        Initialize with gateway credentials.

        Args:
            gateway_url: Full URL to the email gateway endpoint
            api_key: API key for X-API-Key header
            hmac_secret: Secret for HMAC-SHA256 signature
            sender: Gateway sender profile for outgoing mail
            timeout: Request timeout in seconds

        Raises:
            ValueError: If any credential is empty
        """
        for name, value in (("gateway_url", gateway_url), ("api_key", api_key), ("hmac_secret", hmac_secret)):
            if not value:
                raise ValueError(f"{name} is required")

        self.gateway_url = gateway_url
        self.api_key = api_key
        self.hmac_secret = hmac_secret
        self.sender = sender
        self.timeout = timeout

    def _signature(self, body: bytes) -> str:
        return hmac.new(self.hmac_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()

    def _post(self, payload: dict) -> None:
        """
        Sign payload and deliver it to the gateway.

        Raises:
            EmailGatewayError: On connection failure, bad JSON, or a rejected send
        """
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")

        try:
            response = requests.post(
                self.gateway_url,
                data=body,
                headers={
                    "Content-Type": "application/json",
                    "X-API-Key": self.api_key,
                    "X-Signature": self._signature(body),
                },
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Email gateway unreachable: {e}")
            raise EmailGatewayError(f"Connection failed: {e}")

        try:
            result = response.json()
        except ValueError:
            logger.error(f"Email gateway returned non-JSON ({response.status_code}): {response.text}")
            raise EmailGatewayError("Invalid response from gateway")

        if response.status_code != 200 or not result.get("success"):
            message = result.get("message", "Unknown error")
            logger.error(f"Email gateway rejected {payload.get('type')} mail to {payload.get('email')}: {message}")
            raise EmailGatewayError(f"Gateway error: {message}")

    def send_email(self, to: str, subject: str, body: str) -> None:
        """
        Send a free-form plain-text email.

        Raises:
            ValueError: If recipient is empty
            EmailGatewayError: On gateway failure
        """
        if not to:
            raise ValueError("Recipient address is required")

        self._post({
            "type": "custom",
            "email": to,
            "subject": subject,
            "body": body,
            "sender": self.sender,
        })
        logger.info(f"Email sent to {to}: {subject}")

    def send_pickup_notice(
        self,
        notice: PickupNotice,
        to: str,
        ticket_id: int,
        subject: str,
        body: str,
    ) -> None:
        """
        Send a notice about one pickup ticket.

        Args:
            notice: Which pickup notice this is
            to: Recipient email address
            ticket_id: Ticket the notice is about
            subject: Email subject line
            body: Plain text email body

        Raises:
            ValueError: If recipient is empty
            EmailGatewayError: On gateway failure
        """
        if not to:
            raise ValueError("Recipient address is required")

        notice = PickupNotice(notice)
        self._post({
            "type": "pickup_notice",
            "notice": notice.value,
            "ticket_id": ticket_id,
            "email": to,
            "subject": subject,
            "body": body,
            "sender": self.sender,
        })
        logger.info(f"Pickup notice '{notice.value}' for ticket {ticket_id} sent to {to}")
