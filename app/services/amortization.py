from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
RESIDUE_TOLERANCE = Decimal("0.01")
WORKING_PRECISION = 40


class InvalidScheduleParameters(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class ScheduleEntry:
    month_index: int
    principal_component: Decimal
    interest_component: Decimal
    installment_amount: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True, slots=True)
class Schedule:
    principal: Decimal
    annual_rate_percent: Decimal
    tenure_months: int
    installment_amount: Decimal
    total_payment: Decimal
    total_interest: Decimal
    entries: list[ScheduleEntry] = field(default_factory=list)


def _round2(value: Decimal) -> Decimal:
    return value.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _as_decimal(value, name: str) -> Decimal:
    if isinstance(value, bool):
        raise InvalidScheduleParameters(f"{name} must be a number")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidScheduleParameters(f"{name} must be a number") from exc
    if not result.is_finite():
        raise InvalidScheduleParameters(f"{name} must be finite")
    return result


def _validate(principal, annual_rate_percent, tenure_months) -> tuple[Decimal, Decimal, int]:
    principal_dec = _as_decimal(principal, "principal")
    rate_dec = _as_decimal(annual_rate_percent, "annual_rate_percent")
    if isinstance(tenure_months, bool) or not isinstance(tenure_months, int):
        raise InvalidScheduleParameters("tenure_months must be an integer")
    if principal_dec <= 0:
        raise InvalidScheduleParameters("principal must be greater than zero")
    if rate_dec <= 0:
        raise InvalidScheduleParameters("annual_rate_percent must be greater than zero")
    if tenure_months <= 0:
        raise InvalidScheduleParameters("tenure_months must be at least 1")
    return principal_dec, rate_dec, tenure_months


def monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    return annual_rate_percent / Decimal("1200")


def installment_for(principal: Decimal, rate: Decimal, tenure_months: int) -> Decimal:
    """Fixed monthly installment (EMI) for a reducing-balance loan, unrounded."""
    factor = (Decimal("1") + rate) ** tenure_months
    if factor == Decimal("1"):
        raise InvalidScheduleParameters("annual_rate_percent is too small to amortize")
    return principal * rate * factor / (factor - Decimal("1"))


def compute_schedule(principal, annual_rate_percent, tenure_months: int) -> Schedule:
    """Build the month-by-month repayment plan for a fixed-installment loan.

    Arithmetic runs on unrounded ``Decimal`` values; amounts are rounded to
    cents only when an entry is emitted. The final month absorbs the residual
    balance, and its principal component is emitted as whatever is left of the
    principal after the rounded components of earlier months, so the rounded
    components add up to the principal exactly.
    """
    principal_dec, rate_percent, tenure = _validate(principal, annual_rate_percent, tenure_months)

    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        rate = monthly_rate(rate_percent)
        installment = installment_for(principal_dec, rate, tenure)
        installment_rounded = _round2(installment)

        balance = principal_dec
        principal_emitted = Decimal("0.00")
        entries: list[ScheduleEntry] = []
        for month in range(1, tenure + 1):
            interest = balance * rate
            principal_part = installment - interest
            balance = balance - principal_part

            if month == tenure:
                if abs(balance) >= RESIDUE_TOLERANCE:
                    logger.warning(
                        "Amortization residue %s exceeds tolerance for principal=%s rate=%s tenure=%s",
                        balance,
                        principal_dec,
                        rate_percent,
                        tenure,
                    )
                balance = Decimal("0")
                principal_out = _round2(principal_dec) - principal_emitted
            else:
                principal_out = _round2(principal_part)
            principal_emitted += principal_out

            entries.append(
                ScheduleEntry(
                    month_index=month,
                    principal_component=principal_out,
                    interest_component=_round2(interest),
                    installment_amount=installment_rounded,
                    remaining_balance=_round2(balance),
                )
            )

        # Sum of the installments as billed, not the unrounded EMI times tenure.
        total_payment = installment_rounded * tenure
        total_interest = total_payment - _round2(principal_dec)

    return Schedule(
        principal=_round2(principal_dec),
        annual_rate_percent=rate_percent,
        tenure_months=tenure,
        installment_amount=installment_rounded,
        total_payment=_round2(total_payment),
        total_interest=_round2(total_interest),
        entries=entries,
    )


__all__ = [
    "InvalidScheduleParameters",
    "Schedule",
    "ScheduleEntry",
    "compute_schedule",
    "installment_for",
    "monthly_rate",
]
