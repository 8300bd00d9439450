import logging

from procurement_engine.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure root logging from settings. Safe to call more than once."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    logging.getLogger("procurement").setLevel(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    )
