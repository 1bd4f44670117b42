# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Carrier registry: the simulated insurers and their pricing knobs."""

from types import MappingProxyType
from typing import Final

from beartype import beartype
from pydantic import Field

from .base import BaseModelConfig


@beartype
class CarrierConfig(BaseModelConfig):
    """Static configuration of one simulated carrier."""

    id: str = Field(..., min_length=1, description="Carrier identifier")
    name: str = Field(..., min_length=1, description="Display name")
    prefix: str = Field(
        ..., min_length=2, max_length=5, description="Prefix for generated ids"
    )
    pricing_multiplier: float = Field(
        ..., gt=0, description="Multiplier applied to every base premium"
    )
    approval_rate: float = Field(
        ..., ge=0, le=1, description="Probability a coverage is approved"
    )

    @property
    @beartype
    def contact_domain(self) -> str:
        """Mail domain used in carrier contact addresses."""
        return self.id.replace("_", "", 1) + ".com"


CARRIERS: Final = MappingProxyType(
    {
        carrier.id: carrier
        for carrier in (
            CarrierConfig(
                id="reliable_insurance",
                name="Reliable Insurance Co.",
                prefix="RIC",
                pricing_multiplier=1.0,
                approval_rate=0.85,
            ),
            CarrierConfig(
                id="techshield_underwriters",
                name="TechShield Underwriters",
                prefix="TSU",
                pricing_multiplier=0.95,
                approval_rate=0.9,
            ),
            CarrierConfig(
                id="premier_underwriters",
                name="Premier Underwriters",
                prefix="PRE",
                pricing_multiplier=1.25,
                approval_rate=0.7,
            ),
            CarrierConfig(
                id="fastbind_insurance",
                name="FastBind Insurance",
                prefix="FBI",
                pricing_multiplier=0.85,
                approval_rate=0.95,
            ),
        )
    }
)


@beartype
def get_carrier(carrier_id: str) -> CarrierConfig | None:
    """Look up a carrier by id."""
    return CARRIERS.get(carrier_id)
