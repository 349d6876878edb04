import logging
from typing import Optional


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the application."""

    numeric_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
        force=True,
    )

    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


__all__ = ["setup_logging"]
