import os

from dotenv import load_dotenv

# Path: project_root/.env
BASE_DIR = os.path.dirname(os.path.dirname(__file__))
load_dotenv(os.path.join(BASE_DIR, ".env"))

DEFAULT_DB_PATH = os.path.join(BASE_DIR, "data", "ehr.db")


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", "off", ""}


DATABASE_URL = os.getenv("EHR_DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}")
LOG_LEVEL = os.getenv("EHR_LOG_LEVEL", "INFO").upper()
SESSION_TTL_HOURS = int(os.getenv("EHR_SESSION_TTL_HOURS", "12"))
SEED_DEMO_DATA = _flag("EHR_SEED_DEMO_DATA", "1")
DEMO_PASSWORD = os.getenv("EHR_DEMO_PASSWORD", "pass123")
