"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

DEFAULT_IDLE_THRESHOLD_SECONDS = 5 * 60
DEFAULT_ACTIVE_WINDOW_SECONDS = 10 * 60

# Page views shorter than this are navigation noise
MIN_PAGE_VIEW_MS = 2000

DOCUMENT_NUMBER_WIDTH = 4
TICKET_NUMBER_WIDTH = 4

# MySQL duplicate key error (ER_DUP_ENTRY)
MYSQL_DUPLICATE_ENTRY = 1062
