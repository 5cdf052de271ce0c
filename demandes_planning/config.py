import os

from dotenv import load_dotenv

load_dotenv()


def _hours(value: str) -> tuple[int, int]:
    first, _, last = value.partition("-")
    return int(first), int(last)


# Persistence collaborator
BASE_URL = os.getenv("PLANNING_BASE_URL", "http://localhost:3000/api")
TOKEN_URL = os.getenv("PLANNING_TOKEN_URL", f"{BASE_URL}/oauth2/token")
CLIENT_ID = os.getenv("PLANNING_CLIENT_ID")
CLIENT_SECRET = os.getenv("PLANNING_CLIENT_SECRET")
HTTP_TIMEOUT = float(os.getenv("PLANNING_HTTP_TIMEOUT", "15"))

# Service
API_KEY = os.getenv("PLANNING_API_KEY", "")
OFFLINE_MODE = os.getenv("OFFLINE_MODE", "0") == "1"

# Hour grids, inclusive bounds
WEEK_HOURS = _hours(os.getenv("PLANNING_WEEK_HOURS", "5-20"))
COMPACT_HOURS = _hours(os.getenv("PLANNING_COMPACT_HOURS", "8-19"))

# Drag activation
DRAG_DISTANCE = float(os.getenv("PLANNING_DRAG_DISTANCE", "5"))
TOUCH_DELAY_MS = int(os.getenv("PLANNING_TOUCH_DELAY_MS", "0"))
TOUCH_TOLERANCE = float(os.getenv("PLANNING_TOUCH_TOLERANCE", "0"))

MONTH_PREVIEW = int(os.getenv("PLANNING_MONTH_PREVIEW", "3"))

# Empty means the host's local time
TIMEZONE = os.getenv("PLANNING_TZ") or None

# JSON list of demandes loaded by the service at start-up
SEED_FILE = os.getenv("PLANNING_SEED_FILE")
