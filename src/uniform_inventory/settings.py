import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Snapshot Filenames ---
ITEMS_FILENAME = os.getenv("ITEMS_FILENAME", "items.json")
ORDERS_FILENAME = os.getenv("ORDERS_FILENAME", "orders.json")

# --- Stock Bands ---
# Reorder point band is [REORDER_POINT_MIN, REORDER_POINT_MAX).
# Anything between 1 and REORDER_POINT_MIN - 1 is critical.
REORDER_POINT_MIN = int(os.getenv("REORDER_POINT_MIN", "20"))
REORDER_POINT_MAX = int(os.getenv("REORDER_POINT_MAX", "50"))

# --- Reporting Window ---
DEFAULT_WINDOW_DAYS = int(os.getenv("DEFAULT_WINDOW_DAYS", "30"))

# --- Grouping Defaults ---
DEFAULT_ITEM_NAME = "Unknown Item"
DEFAULT_ITEM_TYPE = "Uniform"
DEFAULT_EDUCATION_LEVEL = "General"
DEFAULT_CATEGORY = "General"
UNSIZED_LABEL = "N/A"

# Education level that matches every level filter.
ALL_EDUCATION_LEVELS = "All Education Levels"
