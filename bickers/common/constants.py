"""Enums and policy constants for the Bickers holiday engine."""

from __future__ import annotations

import enum
from decimal import Decimal


# ── Leave ───────────────────────────────────────────────────────────

class LeaveStatus(str, enum.Enum):
    requested = "requested"
    approved = "approved"
    other = "other"


class LeaveCategory(str, enum.Enum):
    paid = "Paid"
    unpaid = "Unpaid"
    accrued = "Accrued"


class HalfPeriod(str, enum.Enum):
    am = "AM"
    pm = "PM"


class HalfDaySide(str, enum.Enum):
    start = "start"
    end = "end"


# ── Document field names ────────────────────────────────────────────
# Leave documents arrive from several historical input paths, so one
# concept can live under several keys. Order matters: first match wins.

START_HALF_FIELDS = ("startHalf", "startHalfDay", "startHalfday", "startAMPM", "startPeriod")
END_HALF_FIELDS = ("endHalf", "endHalfDay", "endHalfday", "endAMPM", "endPeriod")
HALF_SIDE_FIELDS = ("halfDayAt", "halfDaySide")
GENERIC_HALF_TYPE_FIELDS = ("halfDayType", "halfDayPeriod")
GENERIC_HALF_FLAG_FIELDS = ("halfDay", "isHalfDay", "isHalf", "half")

LEAVE_TYPE_TEXT_FIELDS = ("leaveType", "leave_type", "paidStatus", "payType", "pay_type", "type")
ACCRUED_FLAG_FIELDS = ("isAccrued", "accrued", "isToil")
UNPAID_FLAG_FIELDS = ("isUnpaid", "unpaid")
PAID_FLAG_FIELDS = ("paid", "isPaid")

NOTES_FIELDS = ("holidayReason", "notes", "reason")
START_DATE_FIELDS = ("startDate", "from")
END_DATE_FIELDS = ("endDate", "to")
EMPLOYEE_NAME_FIELDS = ("employee", "employeeName")
EMPLOYEE_CODE_FIELDS = ("employeeCode", "userCode")

ALLOWANCE_BY_YEAR_FIELDS = ("holidayAllowances", "holidayAllowanceByYear")
ALLOWANCE_FLAT_FIELDS = ("holidayAllowance",)
CARRY_OVER_BY_YEAR_FIELDS = ("carryoverByYear", "carryOverByYear", "carriedOverByYear")
CARRY_OVER_FLAT_FIELDS = ("carriedOverDays", "carryOverDays")

# ── Tokens ──────────────────────────────────────────────────────────

HALF_PERIOD_TOKENS: dict[str, HalfPeriod] = {
    "AM": HalfPeriod.am,
    "A.M.": HalfPeriod.am,
    "MORNING": HalfPeriod.am,
    "PM": HalfPeriod.pm,
    "P.M.": HalfPeriod.pm,
    "AFTERNOON": HalfPeriod.pm,
}

REQUESTED_STATUSES = frozenset({"", "requested", "pending"})
ACCRUED_KEYWORDS = ("accrued", "toil")
UNPAID_KEYWORDS = ("unpaid",)

# ── Policy ──────────────────────────────────────────────────────────

DEFAULT_ANNUAL_ALLOWANCE = Decimal("25")
HALF_DAY = Decimal("0.5")
MAX_HALF_DAY_REDUCTION = Decimal("1.0")
DAYS_QUANTUM = Decimal("0.1")

WEEKEND_DAYS = frozenset({5, 6})  # Saturday, Sunday

DATE_LABEL_FORMAT = "%a %d %b"     # UK format: Mon 03 Jun
TIMEZONE = "Europe/London"
UK_BANK_HOLIDAY_REGIONS = ("england-and-wales", "scotland", "northern-ireland")
GOV_UK_BANK_HOLIDAYS_URL = "https://www.gov.uk/bank-holidays.json"
DEFAULT_BANK_HOLIDAY_REGION = "england-and-wales"
