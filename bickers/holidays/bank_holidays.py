"""UK bank holidays from the GOV.UK feed.

The feed (``https://www.gov.uk/bank-holidays.json``) is keyed by region:
``{"england-and-wales": {"division": ..., "events": [{"title", "date", ...}]}}``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date
from typing import Any, Optional

import httpx

from bickers.common.coercion import to_date
from bickers.common.constants import (
    DEFAULT_BANK_HOLIDAY_REGION,
    GOV_UK_BANK_HOLIDAYS_URL,
    UK_BANK_HOLIDAY_REGIONS,
)
from bickers.common.exceptions import BankHolidayFeedError, ValidationException

logger = logging.getLogger(__name__)


def parse_bank_holidays(
    payload: Any,
    region: str = DEFAULT_BANK_HOLIDAY_REGION,
    year: Optional[int] = None,
) -> dict[date, str]:
    """Map of date → title for one region, optionally limited to one year.

    Malformed events are skipped.
    """
    if not isinstance(payload, Mapping):
        return {}
    division = payload.get(region)
    events = division.get("events") if isinstance(division, Mapping) else None
    if not isinstance(events, list):
        return {}

    holidays: dict[date, str] = {}
    for event in events:
        if not isinstance(event, Mapping):
            continue
        day = to_date(event.get("date"))
        if day is None or (year is not None and day.year != year):
            continue
        holidays[day] = str(event.get("title") or "Bank holiday")
    return dict(sorted(holidays.items()))


async def fetch_bank_holidays(
    region: str = DEFAULT_BANK_HOLIDAY_REGION,
    year: Optional[int] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    url: str = GOV_UK_BANK_HOLIDAYS_URL,
    timeout: float = 10.0,
) -> dict[date, str]:
    """Download and parse the feed. Raises ``BankHolidayFeedError`` on failure."""
    if region not in UK_BANK_HOLIDAY_REGIONS:
        raise ValidationException.for_field(
            "region", f"Unknown region '{region}'. Expected one of {', '.join(UK_BANK_HOLIDAY_REGIONS)}."
        )

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout) as own_client:
                response = await own_client.get(url)
        else:
            response = await client.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise BankHolidayFeedError(f"Could not load bank holidays from {url}: {exc}") from exc

    holidays = parse_bank_holidays(payload, region, year)
    logger.info("Loaded %d bank holidays for %s (%s)", len(holidays), region, year or "all years")
    return holidays


async def load_bank_holidays(
    region: str = DEFAULT_BANK_HOLIDAY_REGION,
    year: Optional[int] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    url: str = GOV_UK_BANK_HOLIDAYS_URL,
    timeout: float = 10.0,
) -> dict[date, str]:
    """Like ``fetch_bank_holidays`` but an unavailable feed yields no holidays."""
    try:
        return await fetch_bank_holidays(region, year, client=client, url=url, timeout=timeout)
    except BankHolidayFeedError as exc:
        logger.warning("Bank holidays unavailable: %s", exc.detail)
        return {}
