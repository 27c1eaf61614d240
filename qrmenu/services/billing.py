"""
Subscription billing for tenants: prorated first payments, due dates,
invoice numbers and human readable billing periods.

Everything here is a pure function over value inputs. Money is handled as
Decimal and only rounded (2 dp, half-up) on the final figure.
"""
import calendar
import logging
import time
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Sequence

from qrmenu.errors import InvalidArgument
from qrmenu.schemas.billing import TenantBilling

logger = logging.getLogger(__name__)

ENGLISH_MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

CENT = Decimal("0.01")
# Numeric(12, 2) columns
MAX_AMOUNT = Decimal("9999999999.99")


def _money(x) -> Decimal:
    return Decimal(x).quantize(CENT, rounding=ROUND_HALF_UP)


def as_amount(value) -> Decimal:
    """Coerce a fee to Decimal, rejecting negatives and non-finite values."""
    if isinstance(value, bool):
        raise InvalidArgument(f"amount must be numeric, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise InvalidArgument(f"amount must be numeric, got {value!r}")
    if not amount.is_finite():
        raise InvalidArgument(f"amount must be finite, got {value!r}")
    if amount < 0:
        raise InvalidArgument(f"amount must not be negative, got {value!r}")
    if amount > MAX_AMOUNT:
        raise InvalidArgument(f"amount must not exceed {MAX_AMOUNT}, got {value!r}")
    return amount


def as_date(value) -> date:
    """Accept a date, a datetime (time of day dropped) or an ISO YYYY-MM-DD string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise InvalidArgument(f"not a valid calendar date: {value!r}")
    raise InvalidArgument(f"expected a date, got {type(value).__name__}")


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise InvalidArgument(f"month out of range: {month}")
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def parse_month(value: str) -> tuple[int, int]:
    """'2025-03' -> (2025, 3)"""
    try:
        y, m = value.strip().split("-")
        year, month = int(y), int(m)
    except (AttributeError, ValueError):
        raise InvalidArgument(f"month must look like YYYY-MM, got {value!r}")
    if not 1 <= month <= 12 or year < 1:
        raise InvalidArgument(f"month must look like YYYY-MM, got {value!r}")
    return year, month


def _add_months(d: date, months: int) -> date:
    # clamps the day to the end of the target month (Jan 31 + 1 -> Feb 28/29)
    idx = d.year * 12 + (d.month - 1) + months
    year, month = divmod(idx, 12)
    month += 1
    if not 1 <= year <= 9999:
        raise InvalidArgument(f"date out of range: {d} + {months} months")
    return date(year, month, min(d.day, days_in_month(year, month)))


def calculate_prorated_amount(monthly_amount, join_date) -> Decimal:
    """Fee owed from the join day (inclusive) to the end of the join month."""
    monthly = as_amount(monthly_amount)
    d = as_date(join_date)
    total_days = days_in_month(d.year, d.month)
    remaining_days = total_days - d.day + 1
    # daily rate times remaining days, multiplied before dividing so a full month is exact
    return _money(monthly * remaining_days / total_days)


def needs_prorated_payment(join_date) -> bool:
    return as_date(join_date).day > 1


def calculate_next_payment_date(current_date, is_first_payment: bool = False) -> date:
    """
    First payment: the 1st of the month after current_date.
    Renewal: one calendar month later, clamped to the last day of the target month.
    """
    d = as_date(current_date)
    if is_first_payment:
        return _add_months(d.replace(day=1), 1)
    return _add_months(d, 1)


def generate_invoice_number(tenant_id: str, on, timestamp_ms: int | None = None) -> str:
    """
    INV-{YYYY}{MM}-{TENANT8}-{TS4}

    TS4 is the tail of the wall clock in milliseconds. It only disambiguates,
    it does not make numbers unique (see services.invoices for that).
    """
    d = as_date(on)
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    short_tenant = (tenant_id or "")[:8].upper()
    tail = f"{timestamp_ms % 10_000:04d}"
    return f"INV-{d.year:04d}{d.month:02d}-{short_tenant}-{tail}"


def get_payment_period_description(start_date, end_date, is_prorated: bool = False,
                                   month_names: Sequence[str] = ENGLISH_MONTHS) -> str:
    if len(month_names) != 12:
        raise InvalidArgument("month_names needs exactly 12 entries")
    start, end = as_date(start_date), as_date(end_date)
    start_month = month_names[start.month - 1]
    end_month = month_names[end.month - 1]
    year = start.year
    same_month = (start.year, start.month) == (end.year, end.month)

    if is_prorated:
        if same_month:
            return f"{start_month} {start.day}-{end.day}, {year} (Prorated)"
        return f"{start_month} {start.day} - {end_month} {end.day}, {year} (Prorated)"

    if same_month:
        return f"{start_month} {year}"
    return f"{start_month} - {end_month} {year}"


def calculate_tenant_billing(monthly_fee, join_date) -> TenantBilling:
    fee = as_amount(monthly_fee)
    d = as_date(join_date)
    _, end_of_month = month_bounds(d.year, d.month)

    # Joining on the 1st is billed as a full month by policy.
    if not needs_prorated_payment(d):
        return TenantBilling(
            first_payment_amount=_money(fee),
            first_payment_prorated=False,
            next_payment_amount=_money(fee),
            next_payment_date=calculate_next_payment_date(d, False),
            first_payment_period=get_payment_period_description(d, end_of_month, False),
        )

    billing = TenantBilling(
        first_payment_amount=calculate_prorated_amount(fee, d),
        first_payment_prorated=True,
        next_payment_amount=_money(fee),
        next_payment_date=calculate_next_payment_date(d, True),
        first_payment_period=get_payment_period_description(d, end_of_month, True),
        days_in_first_period=end_of_month.day - d.day + 1,
        total_days_in_month=end_of_month.day,
    )
    logger.debug("Prorated first payment %s for %s (%s/%s days)", billing.first_payment_amount,
                 d, billing.days_in_first_period, billing.total_days_in_month)
    return billing


def first_payment_description(billing: TenantBilling) -> str:
    if billing.first_payment_prorated:
        return f"Initial prorated payment for {billing.first_payment_period}"
    return f"Monthly subscription fee for {billing.first_payment_period}"


def first_payment_notes(billing: TenantBilling) -> str:
    if billing.first_payment_prorated:
        return (f"Prorated for {billing.days_in_first_period} days of "
                f"{billing.total_days_in_month} days in month")
    return "Regular monthly subscription fee"


def revenue_growth(current, previous) -> Decimal:
    """Month-over-month growth in percent, 2 dp. No previous revenue counts as 100% when there is any now."""
    current, previous = Decimal(current or 0), Decimal(previous or 0)
    if previous > 0:
        return _money((current - previous) / previous * 100)
    if current > 0:
        return Decimal("100.00")
    return Decimal("0.00")
