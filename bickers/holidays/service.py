"""Holiday service layer — half-day resolution, durations, pay categories, balances.

Business logic:
  - Boundary normalization of raw leave documents into ``LeaveRecord``
  - Half-day resolution across the historical field spellings
  - Business-day durations with weekend, bank holiday and half-day rules
  - Paid / Unpaid / Accrued classification
  - Running (past) and projected (upcoming) allowance balances
  - Dashboard snapshot: used / remaining / pending / next holiday

Every method is pure: callers pass the leave snapshot, the allowance and the
reference date, and get a fresh result back.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Mapping
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Union

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
    ACCRUED_FLAG_FIELDS,
    ACCRUED_KEYWORDS,
    DATE_LABEL_FORMAT,
    DAYS_QUANTUM,
    EMPLOYEE_CODE_FIELDS,
    EMPLOYEE_NAME_FIELDS,
    END_DATE_FIELDS,
    END_HALF_FIELDS,
    GENERIC_HALF_FLAG_FIELDS,
    GENERIC_HALF_TYPE_FIELDS,
    HALF_DAY,
    HALF_SIDE_FIELDS,
    LEAVE_TYPE_TEXT_FIELDS,
    MAX_HALF_DAY_REDUCTION,
    NOTES_FIELDS,
    PAID_FLAG_FIELDS,
    REQUESTED_STATUSES,
    START_DATE_FIELDS,
    START_HALF_FIELDS,
    UNPAID_FLAG_FIELDS,
    UNPAID_KEYWORDS,
    HalfDaySide,
    HalfPeriod,
    LeaveCategory,
    LeaveStatus,
)
from bickers.common.exceptions import ValidationException
from bickers.holidays.dates import (
    clamp_range,
    count_business_days_inclusive,
    is_working_day,
    year_bounds,
)
from bickers.holidays.schemas import (
    BalanceEntry,
    BalanceSummary,
    EmployeeAllowance,
    HalfDayDescriptor,
    HolidaySnapshot,
    LeaveRecord,
)

logger = logging.getLogger(__name__)

LeaveInput = Union[Mapping[str, Any], LeaveRecord]

ZERO = Decimal("0")


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(DAYS_QUANTUM, rounding=ROUND_HALF_UP)


def _round_to_half(value: Decimal) -> Decimal:
    return _quantize((value * 2).quantize(Decimal("1"), rounding=ROUND_HALF_UP) / 2)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# ═════════════════════════════════════════════════════════════════════
# HolidayService
# ═════════════════════════════════════════════════════════════════════


class HolidayService:
    """Pure holiday computations over snapshots of leave documents."""

    # ─────────────────────────────────────────────────────────────────
    # Normalization
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _require_mapping(doc: Any, field: str = "request") -> Mapping[str, Any]:
        if not isinstance(doc, Mapping):
            raise ValidationException.for_field(
                field, f"Expected a leave document, got {type(doc).__name__}."
            )
        return doc

    @staticmethod
    def normalize_status(value: Any) -> LeaveStatus:
        text = norm_text(value)
        if text in REQUESTED_STATUSES:
            return LeaveStatus.requested
        if text == LeaveStatus.approved.value:
            return LeaveStatus.approved
        return LeaveStatus.other

    @staticmethod
    def normalize(doc: LeaveInput) -> LeaveRecord:
        """Build the canonical record for a raw leave document.

        A missing or unparseable start date leaves the record dateless; an
        end date before the start collapses to a single day at the start.
        """
        if isinstance(doc, LeaveRecord):
            return doc
        doc = HolidayService._require_mapping(doc)

        start = to_date(first_present(doc, START_DATE_FIELDS))
        end = to_date(first_present(doc, END_DATE_FIELDS)) if start else None
        if start is not None and (end is None or end < start):
            end = start

        return LeaveRecord(
            id=_optional_str(doc.get("id")),
            employee_ref=_optional_str(first_present(doc, EMPLOYEE_NAME_FIELDS)),
            employee_code=_optional_str(first_present(doc, EMPLOYEE_CODE_FIELDS)),
            start_date=start,
            end_date=end,
            status=HolidayService.normalize_status(doc.get("status")),
            raw_status=norm_text(doc.get("status")),
            half_day=HolidayService.resolve_half_day(doc),
            category=HolidayService.classify_leave_type(doc),
            notes=str(first_present(doc, NOTES_FIELDS) or "").strip(),
        )

    # ─────────────────────────────────────────────────────────────────
    # Half days
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _side_hints(
        doc: Mapping[str, Any],
        fields: tuple[str, ...],
    ) -> tuple[Optional[HalfPeriod], bool]:
        period: Optional[HalfPeriod] = None
        flag = False
        for name in fields:
            value = doc.get(name)
            if period is None:
                period = to_half_period(value)
            flag = flag or is_truthy_flag(value)
        return period, flag

    @staticmethod
    def resolve_half_day(doc: LeaveInput) -> HalfDayDescriptor:
        """Resolve the half-day annotations of a leave document.

        Per side, first match wins:
          1. Explicit per-side hints (``startHalf``, ``startAMPM`` ...).
          2. ``halfDayAt`` = start|end paired with the generic type/flag.
          3. A generic AM/PM type with no side falls on the start side.
        ``single_day_half`` is true if any boolean half-day flag is set.
        """
        if isinstance(doc, LeaveRecord):
            return doc.half_day
        doc = HolidayService._require_mapping(doc)

        start_half, start_flag = HolidayService._side_hints(doc, START_HALF_FIELDS)
        end_half, end_flag = HolidayService._side_hints(doc, END_HALF_FIELDS)

        generic_period, generic_flag = HolidayService._side_hints(
            doc, GENERIC_HALF_TYPE_FIELDS + GENERIC_HALF_FLAG_FIELDS
        )
        side = norm_text(first_present(doc, HALF_SIDE_FIELDS))

        if side == HalfDaySide.start.value:
            start_half = start_half or generic_period
            start_flag = start_flag or generic_flag
        elif side == HalfDaySide.end.value:
            end_half = end_half or generic_period
            end_flag = end_flag or generic_flag
        elif start_half is None and end_half is None and not (start_flag or end_flag):
            start_half = generic_period

        return HalfDayDescriptor(
            single_day_half=generic_flag or start_flag or end_flag,
            start_half=start_half,
            end_half=end_half,
            start_flag=start_flag,
            end_flag=end_flag,
        )

    # ─────────────────────────────────────────────────────────────────
    # Durations
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def compute_duration(
        request: LeaveInput,
        *,
        bank_holidays: Collection[date] = (),
        window_start: Optional[date] = None,
        window_end: Optional[date] = None,
    ) -> Decimal:
        """Chargeable business days for one request, in half-day steps.

        Weekends and ``bank_holidays`` are free. A half-day reduction only
        applies on a working boundary day. With a window (e.g. one calendar
        year) the request is clamped first, and half-day reductions only
        apply where the clamped boundary is the request's own boundary.
        """
        record = HolidayService.normalize(request)
        if not record.has_dates:
            return ZERO

        clamped = clamp_range(record.start_date, record.end_date, window_start, window_end)
        if clamped is None:
            return ZERO
        lo, hi = clamped
        half = record.half_day
        on_start = lo == record.start_date
        on_end = hi == record.end_date

        if lo == hi:
            if not is_working_day(lo, bank_holidays):
                return ZERO
            if record.is_single_day:
                return HALF_DAY if half.has_half else _quantize(Decimal("1"))
            if (on_start and half.start_is_half) or (on_end and half.end_is_half):
                return HALF_DAY
            return _quantize(Decimal("1"))

        days = count_business_days_inclusive(lo, hi, bank_holidays)
        if days == 0:
            return _quantize(ZERO)

        reduction = ZERO
        if on_start and half.start_is_half and is_working_day(lo, bank_holidays):
            reduction += HALF_DAY
        if on_end and half.end_is_half and is_working_day(hi, bank_holidays):
            reduction += HALF_DAY
        # Bare "halfDay" flag with no side: one half day off the start.
        if not (half.start_is_half or half.end_is_half) and half.single_day_half and on_start:
            reduction += HALF_DAY

        reduction = min(reduction, MAX_HALF_DAY_REDUCTION)
        return _quantize(max(ZERO, Decimal(days) - reduction))

    # ─────────────────────────────────────────────────────────────────
    # Classification
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def classify_leave_type(doc: LeaveInput) -> LeaveCategory:
        """Paid, Unpaid or Accrued — never anything else.

        Accrued (TOIL) wins over Unpaid when both signals are present, and
        a document with no pay signals at all is Paid.
        """
        if isinstance(doc, LeaveRecord):
            return doc.category
        doc = HolidayService._require_mapping(doc)

        type_text = " ".join(
            norm_text(doc.get(name)) for name in LEAVE_TYPE_TEXT_FIELDS if doc.get(name) is not None
        )

        if any(is_truthy_flag(doc.get(name)) for name in ACCRUED_FLAG_FIELDS) or any(
            keyword in type_text for keyword in ACCRUED_KEYWORDS
        ):
            return LeaveCategory.accrued

        if (
            any(is_truthy_flag(doc.get(name)) for name in UNPAID_FLAG_FIELDS)
            or any(is_explicit_false(doc.get(name)) for name in PAID_FLAG_FIELDS)
            or any(keyword in type_text for keyword in UNPAID_KEYWORDS)
        ):
            return LeaveCategory.unpaid

        return LeaveCategory.paid

    # ─────────────────────────────────────────────────────────────────
    # Display helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def describe_boundary(request: LeaveInput, which: HalfDaySide) -> str:
        """Date cell text such as ``Mon 03 Jun (AM)`` or ``Mon 03 Jun (Half)``."""
        record = HolidayService.normalize(request)
        day = record.start_date if which == HalfDaySide.start else record.end_date
        if day is None:
            return "-"
        text = day.strftime(DATE_LABEL_FORMAT)
        half = record.half_day

        if which == HalfDaySide.start:
            if half.start_half:
                return f"{text} ({half.start_half.value})"
            if record.is_single_day and (half.start_flag or half.single_day_half):
                return f"{text} (Half)"
        else:
            if half.end_half:
                return f"{text} ({half.end_half.value})"
            if record.is_single_day and half.end_flag:
                return f"{text} (Half)"
        return text

    @staticmethod
    def _build_entry(
        record: LeaveRecord,
        days: Decimal,
        balance_after: Optional[Decimal] = None,
    ) -> BalanceEntry:
        return BalanceEntry(
            id=record.id,
            start_date=record.start_date,
            end_date=record.end_date,
            start_label=HolidayService.describe_boundary(record, HalfDaySide.start),
            end_label=HolidayService.describe_boundary(record, HalfDaySide.end),
            days=days,
            category=record.category,
            status=record.status,
            notes=record.notes,
            balance_after=balance_after,
        )

    # ─────────────────────────────────────────────────────────────────
    # Ownership
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def belongs_to(
        doc: LeaveInput,
        *,
        name: Optional[str] = None,
        code: Optional[str] = None,
    ) -> bool:
        """Leave documents reference their owner by name or by user code."""
        record = HolidayService.normalize(doc)
        if name and record.employee_ref == name:
            return True
        return bool(code and record.employee_code == code)

    @staticmethod
    def filter_for_employee(
        requests: Iterable[Any],
        *,
        name: Optional[str] = None,
        code: Optional[str] = None,
    ) -> list[Any]:
        if not name and not code:
            return list(requests)
        return [
            doc
            for doc in requests
            if isinstance(doc, (Mapping, LeaveRecord))
            and HolidayService.belongs_to(doc, name=name, code=code)
        ]

    # ─────────────────────────────────────────────────────────────────
    # Balances
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def _check_reference_date(reference_date: Any) -> date:
        if reference_date is None:
            raise ValidationException.for_field(
                "reference_date", "A reference date is required."
            )
        if isinstance(reference_date, datetime):
            return reference_date.date()
        if not isinstance(reference_date, date):
            raise ValidationException.for_field(
                "reference_date",
                f"Expected a date, got {type(reference_date).__name__}.",
            )
        return reference_date

    @staticmethod
    def _coerce_allowance(allowance: Any) -> EmployeeAllowance:
        if isinstance(allowance, EmployeeAllowance):
            return allowance
        if allowance is None:
            return EmployeeAllowance()
        if isinstance(allowance, Mapping):
            return EmployeeAllowance.model_validate(dict(allowance))
        raise ValidationException.for_field(
            "allowance", f"Expected an allowance, got {type(allowance).__name__}."
        )

    @staticmethod
    def _normalize_all(requests: Any) -> list[LeaveRecord]:
        """Normalize a snapshot, skipping entries that are not documents."""
        if requests is None:
            return []
        if isinstance(requests, (str, bytes, Mapping)) or not isinstance(requests, Iterable):
            raise ValidationException.for_field(
                "requests", "Expected a list of leave documents."
            )
        records: list[LeaveRecord] = []
        for index, doc in enumerate(requests):
            if not isinstance(doc, (Mapping, LeaveRecord)):
                logger.warning("Skipping leave entry %d: not a document (%s)", index, type(doc).__name__)
                continue
            records.append(HolidayService.normalize(doc))
        return records

    @staticmethod
    def _touches(record: LeaveRecord, window: tuple[Optional[date], Optional[date]]) -> bool:
        if not record.has_dates:
            return False
        return clamp_range(record.start_date, record.end_date, *window) is not None

    @staticmethod
    def _by_start(record: LeaveRecord) -> tuple[bool, date]:
        return record.start_date is None, record.start_date or date.min

    @staticmethod
    def compute_balance(
        requests: Iterable[LeaveInput],
        allowance: Union[EmployeeAllowance, Mapping[str, Any], None],
        reference_date: date,
        accrued_earned: Any = ZERO,
        *,
        year: Optional[int] = None,
        bank_holidays: Collection[date] = (),
    ) -> BalanceSummary:
        """Totals plus running/projected balances for one employee.

        Only approved requests count. Past means the request ended before
        ``reference_date``; the running balance walks past bookings from the
        total allowance, and the projected balance walks upcoming bookings
        from whatever the past left over. Unpaid and accrued bookings are
        listed but leave both balances untouched.
        """
        reference_date = HolidayService._check_reference_date(reference_date)
        entitlement = HolidayService._coerce_allowance(allowance)
        earned = ZERO if accrued_earned is None else to_decimal(accrued_earned)
        if earned is None:
            raise ValidationException.for_field("accrued_earned", "Expected a number of days.")

        records = HolidayService._normalize_all(requests)
        window: tuple[Optional[date], Optional[date]] = (None, None)
        if year is not None:
            window = year_bounds(year)
            records = [r for r in records if HolidayService._touches(r, window)]

        holidays = frozenset(bank_holidays)

        def duration(record: LeaveRecord) -> Decimal:
            return HolidayService.compute_duration(
                record,
                bank_holidays=holidays,
                window_start=window[0],
                window_end=window[1],
            )

        totals = {category: ZERO for category in LeaveCategory}
        past: list[tuple[LeaveRecord, Decimal]] = []
        upcoming: list[tuple[LeaveRecord, Decimal]] = []
        pending: list[tuple[LeaveRecord, Decimal]] = []

        for record in records:
            if record.is_requested:
                pending.append((record, duration(record)))
                continue
            if not record.is_approved:
                continue

            days = duration(record)
            totals[record.category] += days

            if not record.has_dates:
                logger.debug("Approved leave %s has no usable start date", record.id)
                continue
            if record.end_date < reference_date:
                past.append((record, days))
            else:
                upcoming.append((record, days))

        past.sort(key=lambda item: HolidayService._by_start(item[0]))
        upcoming.sort(key=lambda item: HolidayService._by_start(item[0]))
        pending.sort(key=lambda item: HolidayService._by_start(item[0]))

        total_allowance = entitlement.total_allowance

        past_entries: list[BalanceEntry] = []
        running = total_allowance
        for record, days in past:
            if record.category == LeaveCategory.paid:
                running -= days
            past_entries.append(HolidayService._build_entry(record, days, _quantize(running)))

        upcoming_entries: list[BalanceEntry] = []
        projected = running
        for record, days in upcoming:
            if record.category == LeaveCategory.paid:
                projected -= days
            upcoming_entries.append(HolidayService._build_entry(record, days, _quantize(projected)))

        paid_used = totals[LeaveCategory.paid]
        accrued_taken = totals[LeaveCategory.accrued]

        return BalanceSummary(
            paid_used=_quantize(paid_used),
            unpaid_used=_quantize(totals[LeaveCategory.unpaid]),
            accrued_taken=_quantize(accrued_taken),
            accrued_earned=_quantize(earned),
            accrued_balance=_quantize(earned - accrued_taken),
            allowance=entitlement.allowance,
            carry_over=entitlement.carry_over,
            total_allowance=total_allowance,
            allowance_remaining=_quantize(total_allowance - paid_used),
            past=past_entries,
            upcoming=upcoming_entries,
            requested=[HolidayService._build_entry(r, d) for r, d in pending],
        )

    @staticmethod
    def compute_snapshot(
        requests: Iterable[LeaveInput],
        allowance: Union[EmployeeAllowance, Mapping[str, Any], None],
        reference_date: date,
        *,
        year: Optional[int] = None,
        bank_holidays: Collection[date] = (),
    ) -> HolidaySnapshot:
        """Personal dashboard figures: approved paid days used this year,
        what is left (never below zero), pending requests, next holiday."""
        reference_date = HolidayService._check_reference_date(reference_date)
        entitlement = HolidayService._coerce_allowance(allowance)
        year = year if year is not None else reference_date.year
        window_start, window_end = year_bounds(year)
        holidays = frozenset(bank_holidays)

        records = HolidayService._normalize_all(requests)

        used = ZERO
        for record in records:
            if record.is_approved and record.category == LeaveCategory.paid:
                used += HolidayService.compute_duration(
                    record,
                    bank_holidays=holidays,
                    window_start=window_start,
                    window_end=window_end,
                )

        upcoming = sorted(
            (r for r in records if r.is_approved and r.has_dates and r.end_date >= reference_date),
            key=HolidayService._by_start,
        )
        next_holiday = None
        if upcoming:
            first = upcoming[0]
            next_holiday = HolidayService._build_entry(
                first, HolidayService.compute_duration(first, bank_holidays=holidays)
            )

        total = entitlement.total_allowance
        return HolidaySnapshot(
            year=year,
            total_allowance=_round_to_half(total),
            used=_round_to_half(used),
            remaining=_round_to_half(max(ZERO, total - used)),
            pending_count=sum(1 for r in records if r.is_requested),
            next_holiday=next_holiday,
        )


# ── Module-level API ────────────────────────────────────────────────

resolve_half_day = HolidayService.resolve_half_day
compute_duration = HolidayService.compute_duration
classify_leave_type = HolidayService.classify_leave_type
compute_balance = HolidayService.compute_balance
compute_snapshot = HolidayService.compute_snapshot

