"""
Scheduling engine: admits, moves or rejects pickup windows.

A proposed window [start, end) is legal when, in the operating zone:
- the start's civil date is not a blackout date,
- start is at or after the opening time (09:30),
- end is at or before the closing time (17:00),
- it overlaps no other booked window (touching boundaries are fine).

Times of day are compared at minute precision. Rejections come back as
BookingResult values, never exceptions. The conflict check and the write
that follows run inside ScheduleStore.atomic(), so two overlapping
requests cannot both succeed.
"""

import logging
from datetime import datetime, timedelta

from core.config import OperatingConfig
from core.event_bus import EventBus
from core.events import PickupMoved, PickupScheduled
from core.models import BookingRejection, BookingResult, ScheduleEntry
from core.services.blackout_service import BlackoutService
from core.stores.base import ScheduleStore, TicketStore
from utils.timezone import local_date, local_time_of_day, to_utc

logger = logging.getLogger(__name__)


class SchedulingService:
    """Service for calendar booking operations."""

    def __init__(
        self,
        schedule: ScheduleStore,
        tickets: TicketStore,
        blackouts: BlackoutService,
        config: OperatingConfig,
        event_bus: EventBus | None = None,
    ):
        self.schedule = schedule
        self.tickets = tickets
        self.blackouts = blackouts
        self.config = config
        self.event_bus = event_bus

    def _publish(self, event) -> None:
        if self.event_bus is not None:
            self.event_bus.publish(event)

    def business_hours_violation(self, start: datetime, end: datetime) -> str | None:
        """
        Reason the window breaks business rules, or None if it is allowed.

        Raises:
            ValueError: If either datetime is naive
        """
        tz = self.config.timezone
        start_day = local_date(start, tz)

        if self.blackouts.is_blackout(start_day):
            return f"Closed on {start_day.isoformat()}"

        if local_time_of_day(start, tz) < self.config.open_time:
            return f"Start must be at or after {self.config.open_time.strftime('%H:%M')} ({tz})."

        if local_time_of_day(end, tz) > self.config.close_time:
            return f"End must be at or before {self.config.close_time.strftime('%H:%M')} ({tz})."

        return None

    def validate_and_book(
        self,
        ticket_id: int,
        start: datetime,
        end: datetime,
        is_move: bool = False,
        exclude_entry_id: int | None = None,
    ) -> BookingResult:
        """
        Validate a window and book it (or move an existing entry to it).

        Args:
            ticket_id: Ticket the window belongs to
            start: Window start (timezone-aware)
            end: Window end (timezone-aware, after start)
            is_move: Update entry `exclude_entry_id` instead of inserting
            exclude_entry_id: Entry ignored by the conflict check (the one being moved)

        Returns:
            BookingResult with the booked entry, or the rejection reason

        Raises:
            ValueError: Naive datetimes, unknown ticket, or a move without an entry id
        """
        start = to_utc(start)
        end = to_utc(end)

        if is_move and exclude_entry_id is None:
            raise ValueError("A move requires the id of the entry being moved")

        if not is_move and self.tickets.get(ticket_id) is None:
            raise ValueError(f"Ticket {ticket_id} not found")

        reason = self.business_hours_violation(start, end)
        if reason is not None:
            logger.info(f"Booking for ticket {ticket_id} rejected: {reason}")
            return BookingResult.rejected(BookingRejection.BUSINESS_HOURS_VIOLATION, reason)

        with self.schedule.atomic() as schedule:
            conflicts = schedule.find_conflicts(start, end, exclude_id=exclude_entry_id)
            if conflicts:
                logger.info(
                    f"Booking for ticket {ticket_id} conflicts with entries "
                    f"{[c.id for c in conflicts]}"
                )
                return BookingResult.rejected(
                    BookingRejection.SCHEDULING_CONFLICT,
                    "Conflict with existing schedule.",
                    conflicts,
                )

            if is_move:
                entry = schedule.update(exclude_entry_id, start, end)
                if entry is None:
                    raise ValueError(f"Schedule entry {exclude_entry_id} not found")
            else:
                entry = schedule.insert(ticket_id, start, end)

        logger.info(
            f"Ticket {ticket_id} {'moved' if is_move else 'booked'}: "
            f"{start.isoformat()} - {end.isoformat()} (entry {entry.id})"
        )
        return BookingResult.booked(entry)

    def book(self, ticket_id: int, start: datetime, end: datetime) -> BookingResult:
        """Book a new window; the ticket becomes SCHEDULED on success."""
        result = self.validate_and_book(ticket_id, start, end)
        if result.success:
            self._publish(PickupScheduled.create(ticket=self.tickets.get(ticket_id), entry=result.entry))
        return result

    def book_for_duration(
        self,
        ticket_id: int,
        start: datetime,
        duration_hours: float | None = None,
    ) -> BookingResult:
        """Book [start, start + duration). Duration defaults to the configured pickup length."""
        hours = duration_hours if duration_hours and duration_hours > 0 else self.config.default_duration_hours
        return self.book(ticket_id, start, start + timedelta(hours=hours))

    def move(self, entry_id: int, start: datetime, end: datetime) -> BookingResult:
        """
        Move or resize a booked window. Ticket status is unchanged.

        Raises:
            ValueError: If the entry does not exist
        """
        current = self.schedule.get(entry_id)
        if current is None:
            raise ValueError(f"Schedule entry {entry_id} not found")

        result = self.validate_and_book(
            current.ticket_id, start, end, is_move=True, exclude_entry_id=entry_id
        )
        if result.success:
            self._publish(PickupMoved.create(
                ticket=self.tickets.get(current.ticket_id),
                entry=result.entry,
                previous_start=current.start_at,
                previous_end=current.end_at,
            ))
        return result

    def get_entry(self, entry_id: int) -> ScheduleEntry | None:
        """Get schedule entry by ID, or None."""
        return self.schedule.get(entry_id)

    def list_schedule(self) -> list[ScheduleEntry]:
        """All booked windows, earliest first."""
        return self.schedule.list_all()
