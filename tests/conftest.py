import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv


# ---------------------------------------------------------
# Load .env from project root (same folder as app.py)
# ---------------------------------------------------------
ROOT = Path(__file__).resolve().parents[1]  # project root
load_dotenv(ROOT / ".env", override=True)

# ---------------------------------------------------------
# Make tests deterministic (no real AI / sensor calls).
# We do NOT override if user already set it explicitly.
# ---------------------------------------------------------
if os.getenv("AI_ENABLED") is None:
    os.environ["AI_ENABLED"] = "false"

if os.getenv("SENSORS_ENABLED") is None:
    os.environ["SENSORS_ENABLED"] = "false"

# Keep app.py's create_all away from the developer's app.db.
# Each API test still swaps get_db() for its own temp sqlite file.
if not os.getenv("DATABASE_URL"):
    _db_dir = tempfile.mkdtemp(prefix="compliance-tests-")
    os.environ["DATABASE_URL"] = f"sqlite:///{Path(_db_dir) / 'app.db'}"
