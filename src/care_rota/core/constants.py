"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ROTA_WINDOW_DAYS = 7
DEFAULT_LATE_GRACE_MINUTES = 0

NIGHT_START_HOUR = 20
NIGHT_END_HOUR = 6
MISSING_START_HOUR = 8

DEFAULT_REFRESH_INTERVAL_SECONDS = 60
DEFAULT_TEXT_INTERVAL_SECONDS = 30
DEFAULT_STALE_AFTER_SECONDS = 120

FILTER_ALL = "all"
GENERAL_DEPARTMENT = "General"

UNASSIGNED_GROUP_ID = "unassigned-shifts"
UNASSIGNED_GROUP_NAME = "Unassigned Shifts"
AGENCY_GROUP_ID = "agency-workers"
AGENCY_GROUP_NAME = "Agency Workers"
OTHER_LOCATIONS_GROUP_ID = "other-locations"
OTHER_LOCATIONS_GROUP_NAME = "Shifts From Other Locations"

SENSITIVE_LEAVE_LABEL = "Sensitive Leave"
DEFAULT_LEAVE_LABEL = "Leave"
NEVER_UPDATED_TEXT = "Never"
