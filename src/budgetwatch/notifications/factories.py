"""Factory functions for notification transports."""

import os
from typing import Optional

from budgetwatch.notifications.emailjs import EmailJSTransport

DEFAULT_EMAIL_TIMEOUT = 10.0


def create_email_transport(timeout: Optional[float] = None) -> EmailJSTransport:
    """Create an EmailJS transport from the environment.

    Reads BUDGETWATCH_EMAILJS_SERVICE_ID, BUDGETWATCH_EMAILJS_TEMPLATE_ID,
    BUDGETWATCH_EMAILJS_PUBLIC_KEY and BUDGETWATCH_EMAIL_TIMEOUT. Missing
    values produce an unconfigured transport that never sends.

    Args:
        timeout: Request timeout in seconds, overrides the environment

    Returns:
        EmailJSTransport instance
    """
    if timeout is None:
        raw_timeout = os.environ.get("BUDGETWATCH_EMAIL_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_EMAIL_TIMEOUT
        except ValueError:
            raise ValueError(f"Invalid BUDGETWATCH_EMAIL_TIMEOUT value '{raw_timeout}'")

    return EmailJSTransport(
        service_id=os.environ.get("BUDGETWATCH_EMAILJS_SERVICE_ID"),
        template_id=os.environ.get("BUDGETWATCH_EMAILJS_TEMPLATE_ID"),
        public_key=os.environ.get("BUDGETWATCH_EMAILJS_PUBLIC_KEY"),
        timeout=timeout,
    )
