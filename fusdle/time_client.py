"""
- HTTP call with clear fallback
Get today's date in the puzzle timezone from a public time API, so a wrong
server clock can't serve tomorrow's puzzle early. If anything goes wrong (no
internet, timeout, bad response), we fall back to the local clock.
"""

import logging
from datetime import date, datetime
from zoneinfo import ZoneInfo

import requests

from . import config

logger = logging.getLogger(__name__)


def local_today(timezone: str = config.PUZZLE_TIMEZONE) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


def today(
    url: str = config.TIME_API_URL,
    timezone: str = config.PUZZLE_TIMEZONE,
    timeout_seconds: float = config.TIME_API_TIMEOUT,
) -> date:
    try:
        response = requests.get(
            url,
            timeout=timeout_seconds,
            headers={"Cache-Control": "no-cache", "Pragma": "no-cache"},
        )
        response.raise_for_status()

        # The body looks like:
        #   {"datetime": "2025-05-22T09:14:03.123456-04:00", "timezone": "America/New_York", ...}
        stamp = response.json()["datetime"]
        current = datetime.fromisoformat(stamp)
        if current.tzinfo is not None:
            current = current.astimezone(ZoneInfo(timezone))
        return current.date()

    except Exception as exc:
        logger.warning("Time API unavailable (%s); using local clock", exc)
        return local_today(timezone)
