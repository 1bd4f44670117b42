# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Illustrative rating engine.

Premiums are linear adjustments of a per-coverage base price, not an
actuarial model. All money leaves this module as whole currency units,
rounded half up toward positive infinity (``-2.5`` rounds to ``-2``).
"""

import calendar
from datetime import date
from decimal import ROUND_FLOOR, Decimal
from typing import Final

from beartype import beartype
from pydantic import Field

from ..models.base import Amount, BaseModelConfig
from ..models.quote import PremiumBreakdown
from .id_generator import seeded_value
from .reference_data import base_price

LIMIT_UNIT: Final = Decimal(1_000_000)
REVENUE_UNIT: Final = Decimal(5_000_000)
NOISE_MODULUS: Final = 1000
NOISE_FLOOR: Final = Decimal("0.9")
NOISE_SPAN: Final = Decimal("0.2")

PAY_IN_FULL_RATE: Final = Decimal("0.05")
PACKAGE_DISCOUNT_PERCENTAGE: Final = 5

RENEWAL_REVENUE_RATE: Final = Decimal("0.10")
RENEWAL_EMPLOYEE_RATE: Final = Decimal("0.05")
RENEWAL_LIMIT_RATE: Final = Decimal("0.15")
LOYALTY_DISCOUNT_RATE: Final = Decimal("0.05")

ENDORSEMENT_FEE: Final = 25
ENDORSEMENT_PRO_RATA: Final = Decimal("0.92")

CANCELLATION_FEE: Final = 50
DAYS_PER_TERM: Final = 365

_HALF: Final = Decimal("0.5")


@beartype
def round_currency(value: Decimal | Amount) -> int:
    """Round to whole currency units, halves toward positive infinity."""
    amount = value if isinstance(value, Decimal) else Decimal(value)
    return int((amount + _HALF).to_integral_value(rounding=ROUND_FLOOR))


@beartype
def calculate_base_premium(
    coverage_type: str,
    primary_limit: Amount | None,
    annual_revenue: Amount | None,
    cache_key: str,
) -> int:
    """Base premium for one coverage before the carrier multiplier.

    Scales the table price by the first requested limit (per million), by
    revenue (per five million, businesses only) and by a deterministic
    +/-10% band seeded from the cache key and coverage type.
    """
    premium = Decimal(base_price(coverage_type))

    if primary_limit:
        premium *= Decimal(primary_limit) / LIMIT_UNIT

    if annual_revenue is not None:
        premium *= 1 + Decimal(annual_revenue) / REVENUE_UNIT

    noise = seeded_value(cache_key + coverage_type, NOISE_MODULUS)
    premium *= NOISE_FLOOR + NOISE_SPAN * Decimal(noise) / NOISE_MODULUS

    return round_currency(premium)


@beartype
def apply_multiplier(base_premium: int, pricing_multiplier: float) -> int:
    """Annual premium for a carrier."""
    return round_currency(Decimal(base_premium) * Decimal(str(pricing_multiplier)))


@beartype
def premium_breakdown(annual: int) -> PremiumBreakdown:
    """Split an annual premium across payment plans."""
    return PremiumBreakdown(
        annual=annual,
        monthly=round_currency(Decimal(annual) / 12),
        quarterly=round_currency(Decimal(annual) / 4),
        payment_in_full_discount=round_currency(annual * PAY_IN_FULL_RATE),
    )


@beartype
def package_discount_amount(total_annual: int) -> int:
    """Multi-coverage discount on the summed annual premium."""
    return round_currency(Decimal(total_annual) * PACKAGE_DISCOUNT_PERCENTAGE / 100)


@beartype
class RenewalAdjustment(BaseModelConfig):
    """One labelled change applied to a renewal premium."""

    label: str = Field(..., min_length=1)
    percentage: int
    amount: int


@beartype
class RenewalPricing(BaseModelConfig):
    """Outcome of repricing an expiring premium."""

    base: int
    annual: int
    adjustments: list[RenewalAdjustment]
    loyalty_discount: int

    @property
    @beartype
    def change(self) -> int:
        return self.annual - self.base

    @property
    @beartype
    def change_percentage(self) -> int:
        if self.base == 0:
            return 0
        return round_currency(Decimal(self.change) / self.base * 100)

    @beartype
    def reasons(self) -> list[str]:
        """Human-readable adjustments, loyalty discount last."""
        lines = [
            f"{item.label}: +{item.percentage}% (+${item.amount} premium)"
            for item in self.adjustments
        ]
        lines.append(
            f"Loyalty discount: -{int(LOYALTY_DISCOUNT_RATE * 100)}% "
            f"(-${self.loyalty_discount} premium)"
        )
        return lines


@beartype
def price_renewal(
    expiring_annual: int,
    revenue_changed: bool,
    employees_changed: bool,
    increase_limits: bool,
) -> RenewalPricing:
    """Reprice a policy for renewal.

    Each reported change adds a fixed share of the expiring premium; the
    loyalty discount then comes off the adjusted total.
    """
    base = Decimal(expiring_annual)
    rules = (
        (revenue_changed, "Revenue increase", RENEWAL_REVENUE_RATE),
        (employees_changed, "Employee count increase", RENEWAL_EMPLOYEE_RATE),
        (increase_limits, "Limit increase", RENEWAL_LIMIT_RATE),
    )

    total = base
    adjustments: list[RenewalAdjustment] = []
    for applies, label, rate in rules:
        if not applies:
            continue
        increase = base * rate
        total += increase
        adjustments.append(
            RenewalAdjustment(
                label=label,
                percentage=int(rate * 100),
                amount=round_currency(increase),
            )
        )

    discount = total * LOYALTY_DISCOUNT_RATE
    total -= discount

    return RenewalPricing(
        base=expiring_annual,
        annual=round_currency(total),
        adjustments=adjustments,
        loyalty_discount=round_currency(discount),
    )


@beartype
def endorsement_charge() -> int:
    """Pro-rated charge for the flat endorsement fee."""
    return round_currency(ENDORSEMENT_FEE * ENDORSEMENT_PRO_RATA)


@beartype
class RefundCalculation(BaseModelConfig):
    """Earned/unearned split of an annual premium at cancellation."""

    days_active: int
    earned: int
    unearned: int
    net_refund: int
    percentage_earned: int


@beartype
def calculate_refund(
    annual: int, policy_effective: date, cancel_effective: date
) -> RefundCalculation:
    """Pro-rata refund less the flat cancellation fee.

    Days active are not clamped: a cancellation dated before the policy
    starts yields a negative earned premium and a refund above the annual.
    """
    days_active = (cancel_effective - policy_effective).days
    fraction = Decimal(days_active) / DAYS_PER_TERM
    earned = round_currency(annual * fraction)
    unearned = annual - earned
    return RefundCalculation(
        days_active=days_active,
        earned=earned,
        unearned=unearned,
        net_refund=unearned - CANCELLATION_FEE,
        percentage_earned=round_currency(fraction * 100),
    )


@beartype
def add_months(value: date, months: int) -> date:
    """Shift by calendar months, clamping the day to the target month's end."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


@beartype
def add_years(value: date, years: int) -> date:
    """Shift by calendar years; February 29 becomes February 28."""
    return add_months(value, 12 * years)
