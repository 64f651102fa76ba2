"""Tolerant readers for loosely typed document values.

Leave and employee documents come straight from the document store, so the
same field may hold a bool, a "yes"/"1" string, an ISO date, a Firestore
timestamp or epoch milliseconds. These helpers never raise on bad data:
anything they cannot interpret comes back as ``None`` / ``False``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Optional
from zoneinfo import ZoneInfo

from bickers.common.constants import HALF_PERIOD_TOKENS, TIMEZONE, HalfPeriod

_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TRUE_TOKENS = frozenset({"true", "1", "yes", "y"})
_FALSE_TOKENS = frozenset({"false", "0", "no", "n"})
_LOCAL_TZ = ZoneInfo(TIMEZONE)


def norm_text(value: Any) -> str:
    """Trimmed, lower-cased string form; ``None`` becomes ``""``."""
    if value is None:
        return ""
    return str(value).strip().lower()


def first_present(doc: Mapping[str, Any], fields: Iterable[str]) -> Any:
    """Value of the first field that is set (not None / not blank)."""
    for name in fields:
        value = doc.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def is_truthy_flag(value: Any) -> bool:
    if value is True:
        return True
    if value is False or value is None:
        return False
    if isinstance(value, (int, float)):
        return value == 1
    return norm_text(value) in _TRUE_TOKENS


def is_explicit_false(value: Any) -> bool:
    """True only for an explicit negative (``False``, ``"false"``, ``"no"``, ``0``)."""
    if value is False:
        return True
    if value is True or value is None:
        return False
    if isinstance(value, (int, float)):
        return value == 0
    return norm_text(value) in _FALSE_TOKENS


def to_half_period(value: Any) -> Optional[HalfPeriod]:
    if value is None or isinstance(value, bool):
        return None
    return HALF_PERIOD_TOKENS.get(str(value).strip().upper())


def _local_date(dt: datetime) -> Optional[date]:
    if dt.tzinfo is not None:
        try:
            dt = dt.astimezone(_LOCAL_TZ)
        except (OverflowError, ValueError):
            # Shifting to UK time would leave the supported date range.
            return None
    return dt.date()


def _from_epoch(seconds: float) -> Optional[date]:
    try:
        return _local_date(datetime.fromtimestamp(seconds, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None


def to_date(value: Any) -> Optional[date]:
    """Parse a document date; strict ``YYYY-MM-DD`` wins over anything looser.

    Accepts ``date``/``datetime`` objects (Firestore client timestamps are
    ``datetime`` subclasses), ISO strings, epoch milliseconds and exported
    timestamp maps (``{"_seconds": ...}``).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        match = _YMD_RE.match(text)
        if match:
            year, month, day = (int(part) for part in match.groups())
            try:
                return date(year, month, day)
            except ValueError:
                return None
        try:
            return _local_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
        except ValueError:
            return None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return _from_epoch(value / 1000)
    if isinstance(value, Mapping):
        seconds = value.get("_seconds", value.get("seconds"))
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return _from_epoch(seconds)
    return None


def to_decimal(value: Any) -> Optional[Decimal]:
    """Finite ``Decimal`` or ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number
