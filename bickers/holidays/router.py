"""Holiday router — half-day, duration, pay category, balance, dashboard, bank holidays.

Stateless: every endpoint computes from the leave snapshot in the request body.
"""

from datetime import date
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query

from bickers.config import settings
from bickers.dependencies import get_http_client
from bickers.holidays.bank_holidays import fetch_bank_holidays, load_bank_holidays
from bickers.holidays.schemas import (
    BalanceRequest,
    BalanceSummary,
    BankHolidayOut,
    CategoryOut,
    DurationOut,
    EmployeeAllowance,
    HalfDayDescriptor,
    HolidaySnapshot,
    LeaveDocumentBody,
    SnapshotRequest,
)
from bickers.holidays.service import HolidayService

router = APIRouter(prefix="", tags=["holidays"])


def _entitlement(body: SnapshotRequest | BalanceRequest) -> EmployeeAllowance:
    if body.allowance is not None:
        return body.allowance
    if body.employee is not None:
        return EmployeeAllowance.from_employee(
            body.employee,
            body.year or body.reference_date.year,
            default_allowance=settings.DEFAULT_ANNUAL_ALLOWANCE,
        )
    return EmployeeAllowance(allowance=settings.DEFAULT_ANNUAL_ALLOWANCE)


async def _non_working_days(
    body: SnapshotRequest | BalanceRequest,
    client: httpx.AsyncClient,
) -> set[date]:
    days = set(body.bank_holidays)
    if body.include_uk_bank_holidays:
        days |= set(
            await load_bank_holidays(
                body.region,
                body.year,
                client=client,
                url=settings.BANK_HOLIDAYS_URL,
                timeout=settings.BANK_HOLIDAYS_TIMEOUT_SECONDS,
            )
        )
    return days


# ── POST /half-day ──────────────────────────────────────────────────

@router.post("/half-day", response_model=HalfDayDescriptor)
async def resolve_half_day(body: LeaveDocumentBody):
    """Canonical half-day descriptor for one leave document."""
    return HolidayService.resolve_half_day(body.request)


# ── POST /duration ──────────────────────────────────────────────────

@router.post("/duration", response_model=DurationOut)
async def compute_duration(body: LeaveDocumentBody):
    """Chargeable business days for one leave document."""
    days = HolidayService.compute_duration(body.request, bank_holidays=set(body.bank_holidays))
    return DurationOut(days=days)


# ── POST /classify ──────────────────────────────────────────────────

@router.post("/classify", response_model=CategoryOut)
async def classify_leave(body: LeaveDocumentBody):
    """Paid / Unpaid / Accrued for one leave document."""
    return CategoryOut(category=HolidayService.classify_leave_type(body.request))


# ── POST /balance ───────────────────────────────────────────────────

@router.post("/balance", response_model=BalanceSummary)
async def compute_balance(
    body: BalanceRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Holiday page: totals, past running balance, upcoming projected balance."""
    requests = HolidayService.filter_for_employee(
        body.requests, name=body.employee_name, code=body.employee_code,
    )
    return HolidayService.compute_balance(
        requests,
        _entitlement(body),
        body.reference_date,
        body.accrued_earned,
        year=body.year,
        bank_holidays=await _non_working_days(body, client),
    )


# ── POST /snapshot ──────────────────────────────────────────────────

@router.post("/snapshot", response_model=HolidaySnapshot)
async def compute_snapshot(
    body: SnapshotRequest,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Personal dashboard: used / remaining this year, pending count, next holiday."""
    requests = HolidayService.filter_for_employee(
        body.requests, name=body.employee_name, code=body.employee_code,
    )
    return HolidayService.compute_snapshot(
        requests,
        _entitlement(body),
        body.reference_date,
        year=body.year,
        bank_holidays=await _non_working_days(body, client),
    )


# ── GET /bank-holidays ──────────────────────────────────────────────

@router.get("/bank-holidays", response_model=list[BankHolidayOut])
async def list_bank_holidays(
    year: Optional[int] = Query(None, ge=1970, le=2100),
    region: str = Query(settings.BANK_HOLIDAY_REGION),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """UK bank holidays for a region. 503 if the GOV.UK feed is unavailable."""
    holidays = await fetch_bank_holidays(
        region,
        year,
        client=client,
        url=settings.BANK_HOLIDAYS_URL,
        timeout=settings.BANK_HOLIDAYS_TIMEOUT_SECONDS,
    )
    return [BankHolidayOut(day=day, title=title) for day, title in holidays.items()]
