"""Holiday Pydantic v2 schemas — canonical records, summaries, API bodies.

Naming conventions:
  - *Record          → canonical form of a raw leave document
  - *Request / *Body → request bodies for the HTTP API
  - *Out / *Summary  → computed, never persisted
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from bickers.common.coercion import to_decimal
from bickers.common.constants import (
    ALLOWANCE_BY_YEAR_FIELDS,
    ALLOWANCE_FLAT_FIELDS,
    CARRY_OVER_BY_YEAR_FIELDS,
    CARRY_OVER_FLAT_FIELDS,
    DEFAULT_ANNUAL_ALLOWANCE,
    DEFAULT_BANK_HOLIDAY_REGION,
    HalfPeriod,
    LeaveCategory,
    LeaveStatus,
)


# ═════════════════════════════════════════════════════════════════════
# Half-day descriptor
# ═════════════════════════════════════════════════════════════════════


class HalfDayDescriptor(BaseModel):
    """Canonical half-day annotation of one leave request.

    ``start_half``/``end_half`` carry an AM/PM hint when one was given;
    ``start_flag``/``end_flag`` record a per-side boolean flag without one.
    ``single_day_half`` is set whenever any boolean half-day flag is set.
    """

    model_config = ConfigDict(frozen=True)

    single_day_half: bool = False
    start_half: Optional[HalfPeriod] = None
    end_half: Optional[HalfPeriod] = None
    start_flag: bool = False
    end_flag: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def start_is_half(self) -> bool:
        return self.start_half is not None or self.start_flag

    @computed_field  # type: ignore[prop-decorator]
    @property
    def end_is_half(self) -> bool:
        return self.end_half is not None or self.end_flag

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_half(self) -> bool:
        return self.single_day_half or self.start_is_half or self.end_is_half


# ═════════════════════════════════════════════════════════════════════
# Leave record
# ═════════════════════════════════════════════════════════════════════


class LeaveRecord(BaseModel):
    """A leave document after boundary normalization.

    Dates are parsed, ``end_date`` never precedes ``start_date``, and the
    half-day and pay-type metadata are resolved exactly once.
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    employee_ref: Optional[str] = None
    employee_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: LeaveStatus = LeaveStatus.requested
    raw_status: str = ""
    half_day: HalfDayDescriptor = Field(default_factory=HalfDayDescriptor)
    category: LeaveCategory = LeaveCategory.paid
    notes: str = ""

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None

    @property
    def is_single_day(self) -> bool:
        return self.has_dates and self.start_date == self.end_date

    @property
    def is_approved(self) -> bool:
        return self.status == LeaveStatus.approved

    @property
    def is_requested(self) -> bool:
        return self.status == LeaveStatus.requested


# ═════════════════════════════════════════════════════════════════════
# Allowance
# ═════════════════════════════════════════════════════════════════════


def _first_map(doc: Mapping[str, Any], fields: tuple[str, ...]) -> Mapping[str, Any]:
    for name in fields:
        value = doc.get(name)
        if isinstance(value, Mapping):
            return value
    return {}


def _first_nonzero(candidates: list[Optional[Decimal]]) -> Optional[Decimal]:
    """First non-zero candidate; an explicit zero only wins if nothing else is set."""
    present = [c for c in candidates if c is not None]
    for value in present:
        if value != 0:
            return value
    return present[0] if present else None


class EmployeeAllowance(BaseModel):
    """Yearly entitlement: base allowance plus carried-over days."""

    model_config = ConfigDict(frozen=True)

    allowance: Decimal = DEFAULT_ANNUAL_ALLOWANCE
    carry_over: Decimal = Decimal("0")

    @field_validator("allowance", mode="before")
    @classmethod
    def _allowance_or_policy_default(cls, v: Any) -> Decimal:
        number = to_decimal(v)
        if number is None or number < 0:
            return DEFAULT_ANNUAL_ALLOWANCE
        return number

    @field_validator("carry_over", mode="before")
    @classmethod
    def _carry_over_or_zero(cls, v: Any) -> Decimal:
        number = to_decimal(v)
        if number is None or number < 0:
            return Decimal("0")
        return number

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_allowance(self) -> Decimal:
        return self.allowance + self.carry_over

    @classmethod
    def from_employee(
        cls,
        employee: Mapping[str, Any],
        year: int,
        *,
        default_allowance: Decimal = DEFAULT_ANNUAL_ALLOWANCE,
    ) -> "EmployeeAllowance":
        """Read the entitlement for ``year`` from an employee document.

        Per-year maps (keyed by ``"2024"``) win over the flat fields; a zero
        in the per-year map falls through to the flat value.
        """
        key = str(year)
        allowance_by_year = _first_map(employee, ALLOWANCE_BY_YEAR_FIELDS)
        carry_by_year = _first_map(employee, CARRY_OVER_BY_YEAR_FIELDS)

        allowance = _first_nonzero(
            [to_decimal(allowance_by_year.get(key))]
            + [to_decimal(employee.get(f)) for f in ALLOWANCE_FLAT_FIELDS]
        )
        carry_over = _first_nonzero(
            [to_decimal(carry_by_year.get(key))]
            + [to_decimal(employee.get(f)) for f in CARRY_OVER_FLAT_FIELDS]
        )
        if allowance is None or allowance < 0:
            allowance = default_allowance
        return cls(allowance=allowance, carry_over=carry_over)


# ═════════════════════════════════════════════════════════════════════
# Balance output
# ═════════════════════════════════════════════════════════════════════


class BalanceEntry(BaseModel):
    """One leave request as shown in a holiday table."""

    id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_label: str = "-"
    end_label: str = "-"
    days: Decimal
    category: LeaveCategory
    status: LeaveStatus
    notes: str = ""
    balance_after: Optional[Decimal] = Field(
        default=None,
        description="Paid allowance left after this booking (running for past, projected for upcoming).",
    )


class BalanceSummary(BaseModel):
    """Totals and per-request balances for one employee."""

    paid_used: Decimal
    unpaid_used: Decimal
    accrued_taken: Decimal
    accrued_earned: Decimal
    accrued_balance: Decimal
    allowance: Decimal
    carry_over: Decimal
    total_allowance: Decimal
    allowance_remaining: Decimal

    past: list[BalanceEntry] = Field(default_factory=list)
    upcoming: list[BalanceEntry] = Field(default_factory=list)
    requested: list[BalanceEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def per_request_projected_balance(self) -> list[Decimal]:
        return [
            e.balance_after
            for e in (*self.past, *self.upcoming)
            if e.balance_after is not None
        ]


class HolidaySnapshot(BaseModel):
    """Dashboard figures for the current year, rounded to half days."""

    year: int
    total_allowance: Decimal
    used: Decimal
    remaining: Decimal
    pending_count: int = 0
    next_holiday: Optional[BalanceEntry] = None


# ═════════════════════════════════════════════════════════════════════
# HTTP request / response bodies
# ═════════════════════════════════════════════════════════════════════


class LeaveDocumentBody(BaseModel):
    """A single raw leave document."""

    request: dict[str, Any]
    bank_holidays: list[date] = Field(default_factory=list)


class DurationOut(BaseModel):
    days: Decimal


class CategoryOut(BaseModel):
    category: LeaveCategory


class _EmployeeLeaveBody(BaseModel):
    requests: list[dict[str, Any]] = Field(default_factory=list)
    allowance: Optional[EmployeeAllowance] = None
    employee: Optional[dict[str, Any]] = Field(
        default=None,
        description="Employee document; read for per-year allowance when 'allowance' is absent.",
    )
    employee_name: Optional[str] = None
    employee_code: Optional[str] = None
    reference_date: date = Field(..., description="'Today' for past/upcoming partitioning")
    year: Optional[int] = Field(None, ge=1970, le=2100)
    bank_holidays: list[date] = Field(default_factory=list)
    include_uk_bank_holidays: bool = False
    region: str = DEFAULT_BANK_HOLIDAY_REGION


class BalanceRequest(_EmployeeLeaveBody):
    """Payload for computing a balance summary."""

    accrued_earned: Optional[Decimal] = Decimal("0")


class SnapshotRequest(_EmployeeLeaveBody):
    """Payload for the dashboard snapshot."""


class BankHolidayOut(BaseModel):
    day: date
    title: str
