"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

DEFAULT_LATE_THRESHOLD = time(9, 30)
DEFAULT_HALF_DAY_HOURS = 4
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LIST_LIMIT = 200
DEFAULT_NOTIFICATION_LIMIT = 50
DASHBOARD_RECENT_DAYS = 7
UNASSIGNED_DEPARTMENT = "Unassigned"

# Broadcast target groups and the department names each one covers.
BROADCAST_ALL = "all"
BROADCAST_GROUPS = {
    "dev": ("Development", "Developer", "Dev"),
    "test": ("Testing", "QA", "Test", "Quality Assurance"),
    "support": ("Support", "Customer Support"),
    "design": ("Design", "UI/UX", "Graphics"),
    "management": ("Management", "Manager"),
}
DEFAULT_BROADCAST_TITLE = "Team Notice"
