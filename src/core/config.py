"""
Configuration constants and environment setup.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(os.environ.get("HQL_DB_PATH", PROJECT_ROOT / "data" / "db" / "harvest-hql.db"))
OUTPUT_DIR = PROJECT_ROOT / "output"
VAULT_DIR = Path(os.environ.get("HQL_VAULT_DIR", PROJECT_ROOT / "vault"))

# =============================================================================
# HARVEST API (from environment)
# =============================================================================

HARVEST_ACCESS_TOKEN = os.environ.get("HARVEST_ACCESS_TOKEN", "")
HARVEST_ACCOUNT_ID = os.environ.get("HARVEST_ACCOUNT_ID", "")
HARVEST_API_URL = os.environ.get("HARVEST_API_URL", "https://api.harvestapp.com/v2")
HARVEST_USER_AGENT = "Harvest HQL Integration"
HARVEST_TIMEOUT_SECONDS = float(os.environ.get("HARVEST_TIMEOUT_SECONDS", "30"))
HARVEST_PER_PAGE = 2000  # API maximum for /time_entries

# =============================================================================
# TIMER CONFIGURATION
# =============================================================================

DEFAULT_POLLING_INTERVAL_MINUTES = 5
_polling = os.environ.get("POLLING_INTERVAL_MINUTES", "").strip()
POLLING_INTERVAL_MINUTES = (
    int(_polling) if _polling.isdigit() and int(_polling) > 0 else DEFAULT_POLLING_INTERVAL_MINUTES
)

RECENT_PROJECT_DAYS = 30  # Look-back window for "recently tracked" projects

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

QUERY_BLOCK_LANGUAGE = "harvest"
STATIC_FLAG = "--static"

LIST_HEADERS = ["Project", "Task", "Date", "Hours"]
SUMMARY_HEADING = "Time Summary"

# Bar chart colours, cycled by rank
CHART_PALETTE = [
    "#84b65a",
    "#c25956",
    "#59a7c2",
    "#c29b59",
    "#8e59c2",
    "#c2598e",
    "#5ac28a",
]

LOADING_MESSAGE = "Loading Harvest report..."
NO_ENTRIES_MESSAGE = "No time entries found for the selected period."
FETCH_FAILED_MESSAGE = "Failed to fetch Harvest report."
PARSE_ERROR_PREFIX = "Error processing Harvest query: "
REWRITE_ERROR_PREFIX = "Failed to freeze Harvest report: "

# =============================================================================
# API CONFIGURATION
# =============================================================================

HQL_API_KEY = os.environ.get("HQL_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
API_VERSION = "1.0.0"
