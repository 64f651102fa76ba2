"""Common module — shared constants, coercion helpers and exceptions."""

from bickers.common.coercion import (
    first_present,
    is_explicit_false,
    is_truthy_flag,
    norm_text,
    to_date,
    to_decimal,
    to_half_period,
)
from bickers.common.constants import (
    DATE_LABEL_FORMAT,
    DEFAULT_ANNUAL_ALLOWANCE,
    HALF_DAY,
    TIMEZONE,
    HalfDaySide,
    HalfPeriod,
    LeaveCategory,
    LeaveStatus,
)
from bickers.common.exceptions import (
    AppException,
    BankHolidayFeedError,
    ValidationException,
    register_exception_handlers,
)

__all__ = [
    # Coercion
    "first_present",
    "is_explicit_false",
    "is_truthy_flag",
    "norm_text",
    "to_date",
    "to_decimal",
    "to_half_period",
    # Constants / Enums
    "HalfDaySide",
    "HalfPeriod",
    "LeaveCategory",
    "LeaveStatus",
    "DATE_LABEL_FORMAT",
    "DEFAULT_ANNUAL_ALLOWANCE",
    "HALF_DAY",
    "TIMEZONE",
    # Exceptions
    "AppException",
    "BankHolidayFeedError",
    "ValidationException",
    "register_exception_handlers",
]
