"""EmailSender - Delivers report HTML through the Resend HTTP API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sprintlens.config import DEFAULT_EMAIL_API_URL, DEFAULT_EMAIL_FROM
from sprintlens.logging import sanitize_for_log, truncate_output
from sprintlens.mailer.exceptions import EmailDeliveryError

logger = logging.getLogger("sprintlens.mailer")


class EmailSender:
    """Sends HTML emails.

    Without an API key the sender runs in development mode: messages are
    logged and reported as sent, nothing leaves the process.
    """

    def __init__(
        self,
        api_key: str = "",
        sender: str = DEFAULT_EMAIL_FROM,
        base_url: str = DEFAULT_EMAIL_API_URL,
    ) -> None:
        """Initialize the sender.

        Args:
            api_key: Resend API key. Empty enables development mode.
            sender: From address.
            base_url: Email API base URL (for testing/self-hosted relays).
        """
        self.api_key = api_key
        self.sender = sender
        self.base_url = base_url.rstrip("/")
        self._client: httpx.Client | None = None

    @property
    def enabled(self) -> bool:
        """Whether messages are actually sent."""
        return bool(self.api_key)

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the email API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def send(self, to: str, subject: str, html: str) -> str | None:
        """Send one email.

        Args:
            to: Recipient address
            subject: Subject line
            html: HTML body

        Returns:
            The provider message ID, or None in development mode

        Raises:
            EmailDeliveryError: If the request fails or is rejected
        """
        if not self.enabled:
            logger.info("[email:dev] -> %s: %s", to, subject)
            return None

        payload: dict[str, Any] = {
            "from": self.sender,
            "to": [to],
            "subject": subject,
            "html": html,
        }
        try:
            response = self.client.post("/emails", json=payload)
        except httpx.HTTPError as e:
            raise EmailDeliveryError(f"Email request failed: {sanitize_for_log(str(e))}") from e

        if response.status_code >= 300:
            detail = sanitize_for_log(truncate_output(response.text, 500))
            raise EmailDeliveryError(f"Email rejected: {response.status_code} - {detail}")

        message_id = _message_id(response)
        logger.info("Sent report email to %s (id=%s)", to, message_id)
        return message_id


def _message_id(response: httpx.Response) -> str | None:
    """Extract the message ID from an accepted response.

    Relays may answer 2xx with an empty or non-JSON body; the email was still
    accepted, so a missing ID is not an error.
    """
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    message_id = body.get("id")
    return str(message_id) if message_id is not None else None
