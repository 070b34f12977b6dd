"""
Expands the sheets of a family into individual ticket records
"""
from typing import Iterable, List

from ticketwise.core.ticket_codes import format_ticket_code
from ticketwise.models.family import Family
from ticketwise.models.sheet import Sheet
from ticketwise.models.ticket import Ticket


def materialize_tickets(family: Family, sheets: Iterable[Sheet]) -> List[Ticket]:
    """
    One unused Ticket per serial of every sheet listed in family.sheet_ids,
    sorted by id. The objects are not added to any session.

    The ticket year comes from the sheet's generation date, so ids match the
    codes printed on the paper even when a pack is opened in a later year.

    IMPORTANT: not idempotent by itself. Callers only pass the sheets that
    have no ticket persisted yet for the family.
    """
    owned = set(family.sheet_ids or [])
    tickets = []

    for sheet in sheets:
        if sheet.id not in owned:
            continue
        for serial in range(sheet.start_number, sheet.end_number + 1):
            tickets.append(Ticket(
                id=format_ticket_code(sheet.level, sheet.generation_date.year, serial),
                level=sheet.level,
                sheet_id=sheet.id,
                family_id=family.id,
                is_used=False,
            ))

    return sorted(tickets, key=lambda t: t.id)
