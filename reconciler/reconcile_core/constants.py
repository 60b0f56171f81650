"""
Constants, endpoints, paging sizes and retry budgets.
"""

RECONCILER_VERSION = "1.2.0"

# ─── Device (ISAPI) ──────────────────────────────────────────────
DEVICE_INFO_PATH = "/ISAPI/System/deviceInfo"
ACS_EVENT_PATH = "/ISAPI/AccessControl/AcsEvent?format=json"
DEFAULT_DEVICE_NAME = "Unknown Device"
EVENT_PAGE_SIZE = 24           # Events per ACS search page
DIGEST_MAX_ATTEMPTS = 8        # Shared budget: 401 challenges + connection resets

# ─── Attendance API ──────────────────────────────────────────────
ATTENDANCE_PER_PAGE = 100

# ─── Network ─────────────────────────────────────────────────────
API_TIMEOUT_DEVICE = 30        # Seconds; picture downloads can be slow
API_TIMEOUT_ATTENDANCE = 30
API_TIMEOUT_TOKEN = 15

# ─── Digest ──────────────────────────────────────────────────────
CNONCE_BYTES = 8
DEFAULT_QOP = "auth"

# ─── Photo placeholder (1x1 transparent PNG) ─────────────────────
# Submitted when a device event carries no picture URL.
BASE64_1X1_PNG = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)
