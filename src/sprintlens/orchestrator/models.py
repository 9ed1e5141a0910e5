"""Data models for the Orchestrator module."""

from __future__ import annotations

from dataclasses import dataclass, field

from sprintlens.state_store import DeliveryStatus, ReportDelivery


@dataclass
class DeliveryResult:
    """Outcome of emailing a report run to a list of recipients.

    Attributes:
        run_id: The delivered report run.
        deliveries: One delivery record per recipient, in request order.
    """

    run_id: str
    deliveries: list[ReportDelivery] = field(default_factory=list)

    @property
    def sent(self) -> int:
        """Number of successful deliveries."""
        return sum(1 for d in self.deliveries if d.status == DeliveryStatus.SENT.value)

    @property
    def failed(self) -> int:
        """Number of failed deliveries."""
        return len(self.deliveries) - self.sent
