# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Base Pydantic model configuration for all carrier models.

Every request, response and stored record in the simulator derives from
``BaseModelConfig`` so that stored quotes and policies cannot be changed in
place; state transitions go through ``model_copy(update=...)``.
"""

from datetime import datetime
from typing import Any, TypeAlias

from beartype import beartype
from pydantic import BaseModel, ConfigDict, Field

# Whole or fractional currency amounts as they arrive from clients.
Amount: TypeAlias = int | float

# Opaque, order-preserving client payloads (``additional_data``,
# ``customizations``, endorsement ``details``).
OpaquePayload: TypeAlias = dict[str, Any]


@beartype
class BaseModelConfig(BaseModel):
    """Base model with strict configuration for all carrier entities.

    Enforces:
    - Immutability (frozen=True)
    - No extra fields allowed (extra="forbid")
    - Validation on assignment
    - Automatic whitespace stripping
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_assignment=True,
        str_strip_whitespace=True,
        validate_default=True,
    )


@beartype
class Address(BaseModelConfig):
    """Postal address shared by insureds, holders and billing records."""

    street: str | None = Field(default=None, description="Street line")
    unit: str | None = Field(default=None, description="Unit number")
    suite: str | None = Field(default=None, description="Suite number")
    city: str = Field(..., min_length=1, description="City")
    state: str = Field(..., min_length=2, max_length=2, description="State code")
    zip: str = Field(..., min_length=5, max_length=10, description="ZIP code")

    @beartype
    def one_line(self) -> str:
        """Format as ``street, city, state zip``."""
        return f"{self.street or ''}, {self.city}, {self.state} {self.zip}"


@beartype
class Signature(BaseModelConfig):
    """Electronic signature captured on bind and cancel requests."""

    full_name: str = Field(..., min_length=1, description="Signer name")
    signed_at: str = Field(..., min_length=1, description="Signature timestamp")
    ip_address: str = Field(..., min_length=1, description="Signer IP address")


@beartype
class GeneratedDocument(BaseModelConfig):
    """Downloadable document produced by a lifecycle operation."""

    type: str = Field(..., description="Document kind")
    name: str = Field(..., description="Display name")
    url: str = Field(..., description="Download URL")
    size_bytes: int | None = Field(default=None, ge=0, description="File size")
    generated_at: datetime = Field(..., description="Timestamp of generation")
