"""Settings for budgetcycle, read once from the environment at import."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dateutil import tz


# Local calendar used for every date computation
TZ_NAME = os.getenv("BUDGETCYCLE_TZ", "")

SAVES_DIR = Path(os.getenv("BUDGETCYCLE_SAVES_DIR", "saves"))

LOG_LEVEL = os.getenv("BUDGETCYCLE_LOG_LEVEL", "WARNING").upper()


def _resolve_zone(name: str):
    if not name:
        return tz.tzlocal()
    zone = tz.gettz(name)
    if zone is None:
        logging.getLogger(__name__).warning("Unknown time zone %r, using local time", name)
        return tz.tzlocal()
    return zone


LOCAL_TZ = _resolve_zone(TZ_NAME)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=level or LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
