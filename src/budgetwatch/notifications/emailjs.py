"""EmailJS transport for budget alert emails."""

import logging
from typing import Optional

import requests

from budgetwatch.domain.entities import SendResult, SendStatus
from budgetwatch.notifications.transport import NotificationTransport

logger = logging.getLogger(__name__)

EMAILJS_SEND_URL = "https://api.emailjs.com/api/v1.0/email/send"
PLACEHOLDER_VALUES = {"", "YOUR_SERVICE_ID", "YOUR_TEMPLATE_ID", "YOUR_PUBLIC_KEY"}


class EmailJSTransport(NotificationTransport):
    """Send emails through the EmailJS REST API.

    The EmailJS template is expected to use the ``to_email``, ``subject`` and
    ``message`` parameters.
    """

    def __init__(
        self,
        service_id: Optional[str],
        template_id: Optional[str],
        public_key: Optional[str],
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
        url: str = EMAILJS_SEND_URL,
    ):
        """Initialize EmailJS transport.

        Args:
            service_id: EmailJS service ID
            template_id: EmailJS template ID
            public_key: EmailJS public key (sent as ``user_id``)
            timeout: Request timeout in seconds
            session: Optional requests session, mainly for tests
            url: Send endpoint
        """
        self.service_id = service_id
        self.template_id = template_id
        self.public_key = public_key
        self.timeout = timeout
        self.session = session or requests.Session()
        self.url = url

    @property
    def is_configured(self) -> bool:
        return all(
            value is not None and value not in PLACEHOLDER_VALUES
            for value in (self.service_id, self.template_id, self.public_key)
        )

    def send(self, destination: str, subject: str, body: str) -> SendResult:
        if not self.is_configured:
            logger.warning("EmailJS not configured - skipping email send")
            return SendResult(SendStatus.SKIPPED_UNCONFIGURED, "EmailJS not configured")

        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.public_key,
            "template_params": {
                "to_email": destination,
                "subject": subject,
                "message": body,
            },
        }

        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Error sending email '%s': %s", subject, e)
            return SendResult(SendStatus.FAILED_TRANSIENT, str(e))

        logger.info("Email sent: %s", subject)
        return SendResult(SendStatus.SENT)
