import logging
import sys

from revieworder.config.settings import settings


def setup_logging(level: str | None = None):
    """
    Configures the application's logging settings.
    """
    logging.basicConfig(
        level=getattr(logging, (level or settings.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )
    # keep the HTTP client quiet unless explicitly debugging
    logging.getLogger("httpx").setLevel(logging.WARNING)
