"""Notification transports for budgetwatch."""

from budgetwatch.notifications.transport import NotificationTransport, NullTransport
from budgetwatch.notifications.emailjs import EmailJSTransport
from budgetwatch.notifications.factories import create_email_transport

__all__ = [
    "NotificationTransport",
    "NullTransport",
    "EmailJSTransport",
    "create_email_transport",
]
