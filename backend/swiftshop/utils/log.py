import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level_name: str = "INFO") -> None:
    """Attach one stdout handler to the swiftshop logger tree."""
    level = getattr(logging, (level_name or "INFO").upper(), logging.INFO)
    log = logging.getLogger("swiftshop")
    log.setLevel(level)
    if not log.handlers:
        h = logging.StreamHandler(sys.stdout)
        h.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(h)
    # apscheduler logs every job run at INFO
    logging.getLogger("apscheduler").setLevel(max(level, logging.WARNING))
