"""Holiday engine — the functions the app screens call."""

from bickers.holidays.dates import count_business_days_inclusive, is_weekend
from bickers.holidays.schemas import (
    BalanceEntry,
    BalanceSummary,
    EmployeeAllowance,
    HalfDayDescriptor,
    HolidaySnapshot,
    LeaveRecord,
)
from bickers.holidays.service import (
    HolidayService,
    classify_leave_type,
    compute_balance,
    compute_duration,
    compute_snapshot,
    resolve_half_day,
)

__all__ = [
    "is_weekend",
    "count_business_days_inclusive",
    "resolve_half_day",
    "compute_duration",
    "classify_leave_type",
    "compute_balance",
    "compute_snapshot",
    "HolidayService",
    "BalanceEntry",
    "BalanceSummary",
    "EmployeeAllowance",
    "HalfDayDescriptor",
    "HolidaySnapshot",
    "LeaveRecord",
]
