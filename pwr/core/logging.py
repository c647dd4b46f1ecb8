import logging
import os
import sys

def setup_logging(level: str | None = None) -> None:
    lvl_name = (level or os.getenv("PWR_LOG_LEVEL", "WARNING")).upper()
    lvl = getattr(logging, lvl_name, logging.WARNING)

    # stdout belongs to `query` output
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )
    logging.getLogger("pwr").setLevel(lvl)
