# API Utilities - DRY Helpers
from ticketwise.api.utils.db_helpers import get_by_id, validate_unique, bulk_get
from ticketwise.api.utils.pagination import paginate_query, apply_search_filter
from ticketwise.api.utils.sequencers import allocate_serials, peek_next_serial
from ticketwise.api.utils.updates import update_entity
from ticketwise.api.utils.assignments import release_sheets, assign_sheets, attach_sheet, detach_sheet

__all__ = [
    # db_helpers
    "get_by_id",
    "validate_unique",
    "bulk_get",
    # pagination
    "paginate_query",
    "apply_search_filter",
    # sequencers
    "allocate_serials",
    "peek_next_serial",
    # updates
    "update_entity",
    # assignments
    "release_sheets",
    "assign_sheets",
    "attach_sheet",
    "detach_sheet",
]
