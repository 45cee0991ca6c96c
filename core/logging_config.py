import logging

from core.config import LOG_LEVEL

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str | None = None):
    """Install the root handler once; Streamlit re-runs app.py on every interaction."""
    global _configured
    if _configured:
        return
    logging.basicConfig(level=(level or LOG_LEVEL), format=LOG_FORMAT)
    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    _configured = True
