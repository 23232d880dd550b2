"""
Ticket service for the donation pickup lifecycle.

Handles intake, staff status overrides, and triage: crew suggestion,
distance refresh and cost estimation. Booking (which moves a ticket to
SCHEDULED) lives in SchedulingService.
"""

import logging

from clients.distance_client import DistanceLookupError, DistanceMatrixClient
from core.config import OperatingConfig
from core.cost_estimator import CostEstimate, estimate_cost
from core.crew_advisor import suggest_crew_size
from core.event_bus import EventBus
from core.events import TicketCreated, TicketStatusChanged
from core.models import Ticket, TicketCreate, TicketStatus, TicketTimesUpdate
from core.stores.base import TicketStore
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


def _non_negative(value: float | None) -> float:
    return max(float(value or 0), 0.0)


class TicketService:
    """Service for ticket operations."""

    def __init__(
        self,
        tickets: TicketStore,
        config: OperatingConfig,
        distance: DistanceMatrixClient | None = None,
        event_bus: EventBus | None = None,
    ):
        self.tickets = tickets
        self.config = config
        self.distance = distance
        self.event_bus = event_bus

    def _publish(self, event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def _get_or_raise(self, ticket_id: int) -> Ticket:
        ticket = self.tickets.get(ticket_id)
        if ticket is None:
            raise ValueError(f"Ticket {ticket_id} not found")
        return ticket

    def create(self, data: TicketCreate) -> Ticket:
        """
        Persist a donor's pickup request.

        Args:
            data: Validated intake fields

        Returns:
            Created ticket in NEW status, crew of 1, zero cost fields
        """
        ticket = self.tickets.insert(
            data,
            fuel_cost_per_mile=self.config.fuel_cost_per_mile,
            created_at=now_utc(),
        )
        logger.info(f"Ticket {ticket.id} created for {ticket.donor_name}")

        self._publish(TicketCreated.create(ticket=ticket))
        return ticket

    def get_by_id(self, ticket_id: int) -> Ticket | None:
        """Get ticket by ID, or None."""
        return self.tickets.get(ticket_id)

    def list_all(self) -> list[Ticket]:
        """All tickets, newest first."""
        return self.tickets.list_all()

    def update_status(self, ticket_id: int, status: TicketStatus | str) -> Ticket:
        """
        Set status by hand. Any known status is allowed from any state.

        Raises:
            ValueError: If status is unknown or ticket not found
        """
        new_status = TicketStatus.parse(status)
        current = self._get_or_raise(ticket_id)

        updated = self.tickets.update_status(ticket_id, new_status)
        if updated is None:
            raise ValueError(f"Ticket {ticket_id} not found")

        if current.status != new_status:
            logger.info(
                f"Ticket {ticket_id} status {current.status.value} -> {new_status.value}"
            )
            self._publish(TicketStatusChanged.create(ticket=updated, previous_status=current.status))

        return updated

    def suggest_crew(self, ticket_id: int) -> int:
        """Crew size suggested by the ticket's declared items. Not persisted."""
        ticket = self._get_or_raise(ticket_id)
        return suggest_crew_size(
            bags=ticket.bags_count,
            furniture=ticket.furniture_count,
            small_donation=ticket.small_donation,
        )

    def _estimate(self, ticket: Ticket) -> CostEstimate:
        return estimate_cost(
            drive_minutes=ticket.drive_minutes,
            onsite_minutes=ticket.onsite_minutes,
            hourly_rate=self.config.hourly_rate,
            crew_size=ticket.crew_size,
            fuel_cost_per_mile=ticket.fuel_cost_per_mile,
            miles=ticket.estimated_miles,
        )

    def recalculate_cost(self, ticket_id: int) -> CostEstimate:
        """
        Recompute the estimate from the ticket's stored trip fields and save it.

        Returns:
            CostEstimate (labor, fuel, rounded total)
        """
        ticket = self._get_or_raise(ticket_id)
        estimate = self._estimate(ticket)
        self.tickets.update_fields(ticket_id, estimated_cost=estimate.total)
        return estimate

    def update_times_and_cost(self, ticket_id: int, data: TicketTimesUpdate) -> Ticket:
        """
        Apply staff triage inputs and recompute the estimate.

        Omitted fields keep their current values. Negative minutes and rates
        are stored as zero.
        """
        current = self._get_or_raise(ticket_id)

        fields = {
            "drive_minutes": _non_negative(
                current.drive_minutes if data.drive_minutes is None else data.drive_minutes
            ),
            "onsite_minutes": _non_negative(
                current.onsite_minutes if data.onsite_minutes is None else data.onsite_minutes
            ),
            "fuel_cost_per_mile": _non_negative(
                current.fuel_cost_per_mile if data.fuel_cost_per_mile is None else data.fuel_cost_per_mile
            ),
            "crew_size": data.crew_size or current.crew_size,
        }
        estimate = self._estimate(current.model_copy(update=fields))
        fields["estimated_cost"] = estimate.total

        updated = self.tickets.update_fields(ticket_id, **fields)
        logger.info(f"Ticket {ticket_id} estimate updated: ${estimate.total:.2f}")
        return updated

    def refresh_distance(self, ticket_id: int) -> Ticket:
        """
        Look up depot-to-pickup distance and store round-trip miles and minutes.

        Lookup failures are logged and swallowed; the ticket keeps its prior
        distance fields.
        """
        ticket = self._get_or_raise(ticket_id)

        if self.distance is None:
            logger.warning(f"No distance client configured; ticket {ticket_id} distance unchanged")
            return ticket

        try:
            one_way = self.distance.lookup(self.config.depot_address, ticket.destination)
        except DistanceLookupError as e:
            logger.warning(f"Distance lookup failed for ticket {ticket_id}: {e}")
            return ticket

        return self.tickets.update_fields(
            ticket_id,
            estimated_miles=round(one_way.miles * 2, 1),
            drive_minutes=round(one_way.minutes * 2, 1),
        )

    def refresh_estimate(self, ticket_id: int) -> Ticket:
        """
        Full triage refresh: distance lookup, suggested crew, new estimate.

        The suggested crew replaces any staff override; staff can set it
        again with update_times_and_cost.
        """
        self.refresh_distance(ticket_id)
        crew = self.suggest_crew(ticket_id)
        self.tickets.update_fields(ticket_id, crew_size=crew)
        self.recalculate_cost(ticket_id)
        return self._get_or_raise(ticket_id)

    def delete(self, ticket_id: int) -> bool:
        """
        Delete a ticket and its schedule entries.

        Returns:
            True if deleted, False if not found
        """
        deleted = self.tickets.delete(ticket_id)
        if deleted:
            logger.info(f"Ticket {ticket_id} deleted")
        return deleted
