"""Notification transport interface."""

from abc import ABC, abstractmethod

from budgetwatch.domain.entities import SendResult, SendStatus


class NotificationTransport(ABC):
    """Delivers a formatted message to a destination address."""

    @abstractmethod
    def send(self, destination: str, subject: str, body: str) -> SendResult:
        """Send a message.

        Implementations return ``SKIPPED_UNCONFIGURED`` when they cannot send at
        all and ``FAILED_TRANSIENT`` when a send was attempted and failed. They
        may also raise; callers treat an exception as a transient failure.
        """
        pass


class NullTransport(NotificationTransport):
    """Transport used when notifications are disabled."""

    def send(self, destination: str, subject: str, body: str) -> SendResult:
        return SendResult(SendStatus.SKIPPED_UNCONFIGURED, "notifications disabled")
