"""Crew size suggestion from declared donation volume."""

# Bag count at which a second crew member is suggested
LARGE_BAG_COUNT = 8


def suggest_crew_size(bags: int = 0, furniture: int = 0, small_donation: bool = False) -> int:
    """
    Suggest how many crew members a pickup needs.

    Priority order: a small donation always gets one person; any furniture
    needs two; a large bag count needs two; everything else gets one.
    Advisory only. Staff may override the value on the ticket.
    """
    if small_donation:
        return 1
    if (furniture or 0) >= 1:
        return 2
    if (bags or 0) >= LARGE_BAG_COUNT:
        return 2
    return 1
