# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote request and response models.

A ``QuoteRequest`` describes one insured (person or business) and an ordered
list of coverages. The engine answers with a ``QuoteResponse`` holding one
``Quote`` per coverage. Only a fixed projection of the request feeds pricing
and the cache key; everything else is carried along for echoing.
"""

from datetime import date, datetime
from enum import Enum
from typing import Literal

from beartype import beartype
from pydantic import Field, model_validator

from .base import Address, Amount, BaseModelConfig, OpaquePayload


class InsuranceType(str, Enum):
    """Line of business of a quote request."""

    PERSONAL = "personal"
    COMMERCIAL = "commercial"


class QuoteStatus(str, Enum):
    """Underwriting outcome for one coverage."""

    QUOTED = "quoted"
    DECLINED = "declined"


CreditScoreTier = Literal["excellent", "good", "fair", "poor"]


# Insured descriptions


@beartype
class PersonalInfo(BaseModelConfig):
    """Individual applying for personal lines coverage."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: str | None = Field(default=None)
    gender: str | None = Field(default=None)
    marital_status: str | None = Field(default=None)
    occupation: str = Field(..., min_length=1)
    credit_score_tier: CreditScoreTier = Field(...)
    address: Address = Field(...)
    email: str | None = Field(default=None)
    phone: str | None = Field(default=None)


@beartype
class FinancialInfo(BaseModelConfig):
    """Business size figures used in rating."""

    annual_revenue: Amount = Field(..., ge=0)
    annual_payroll: Amount | None = Field(default=None, ge=0)
    full_time_employees: int = Field(..., ge=0)
    part_time_employees: int | None = Field(default=None, ge=0)
    contractors: int | None = Field(default=None, ge=0)


@beartype
class ContactInfo(BaseModelConfig):
    """Person to reach at the insured business."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=1)
    title: str | None = Field(default=None)


@beartype
class BusinessInfo(BaseModelConfig):
    """Business applying for commercial lines coverage."""

    legal_name: str = Field(..., min_length=1)
    dba_name: str | None = Field(default=None)
    legal_structure: str | None = Field(default=None)
    industry: str = Field(..., min_length=1)
    industry_code: str = Field(..., min_length=1)
    description: str | None = Field(default=None)
    year_started: int | None = Field(default=None, ge=1800)
    address: Address = Field(...)
    financial_info: FinancialInfo = Field(...)
    contact_info: ContactInfo | None = Field(default=None)


# Coverage-specific risk details


@beartype
class PropertyInfo(BaseModelConfig):
    """Dwelling characteristics for property coverages."""

    dwelling_value: Amount | None = Field(default=None, ge=0)
    year_built: int | None = Field(default=None)
    square_feet: int | None = Field(default=None, ge=0)
    construction_type: str | None = Field(default=None)
    roof_type: str | None = Field(default=None)
    roof_age: int | None = Field(default=None, ge=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: float | None = Field(default=None, ge=0)
    garage: bool | None = Field(default=None)
    pool: bool | None = Field(default=None)
    alarm_system: bool | None = Field(default=None)


@beartype
class VehicleInfo(BaseModelConfig):
    """Vehicle to be insured under an auto coverage."""

    year: int = Field(..., ge=1900)
    make: str = Field(..., min_length=1)
    model: str = Field(..., min_length=1)
    vin: str | None = Field(default=None)
    usage: str | None = Field(default=None)
    annual_mileage: int | None = Field(default=None, ge=0)
    garaging_address: Address | None = Field(default=None)


@beartype
class CyberInfo(BaseModelConfig):
    """Security posture for cyber liability."""

    has_cybersecurity_policy: bool | None = Field(default=None)
    has_incident_response_plan: bool | None = Field(default=None)
    handles_pii: bool | None = Field(default=None)
    number_of_records: int | None = Field(default=None, ge=0)
    has_encryption: bool | None = Field(default=None)
    has_mfa: bool | None = Field(default=None)


@beartype
class DriverInfo(BaseModelConfig):
    """Listed driver on an auto coverage."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    date_of_birth: str = Field(..., min_length=1)
    license_number: str = Field(..., min_length=1)
    license_state: str = Field(..., min_length=2, max_length=2)
    years_licensed: int = Field(..., ge=0)
    accidents_last_3_years: int = Field(..., ge=0)
    violations_last_3_years: int = Field(..., ge=0)


@beartype
class CoverageRequest(BaseModelConfig):
    """One coverage the applicant wants priced."""

    coverage_type: str = Field(..., min_length=1, description="Coverage category")
    requested_limits: dict[str, Amount] = Field(
        default_factory=dict, description="Limit name to amount, in request order"
    )
    requested_deductible: Amount | None = Field(
        default=None, ge=0, description="Single deductible amount"
    )
    requested_deductibles: dict[str, Amount] | None = Field(
        default=None, description="Per-peril deductibles (auto)"
    )
    effective_date: date = Field(..., description="Requested coverage start")
    property_info: PropertyInfo | None = Field(default=None)
    vehicle_info: VehicleInfo | None = Field(default=None)
    cyber_info: CyberInfo | None = Field(default=None)
    driver_info: list[DriverInfo] | None = Field(default=None)

    @property
    @beartype
    def deductible(self) -> Amount | dict[str, Amount] | None:
        """Per-peril deductibles when given, otherwise the single amount."""
        if self.requested_deductibles:
            return self.requested_deductibles
        return self.requested_deductible

    @property
    @beartype
    def primary_limit(self) -> Amount | None:
        """First requested limit, the one pricing scales by."""
        for value in self.requested_limits.values():
            return value
        return None


@beartype
class QuoteRequest(BaseModelConfig):
    """Inbound request for a carrier quote."""

    quote_request_id: str = Field(..., min_length=1, description="Client request id")
    insurance_type: InsuranceType = Field(..., description="personal or commercial")
    personal_info: PersonalInfo | None = Field(default=None)
    business_info: BusinessInfo | None = Field(default=None)
    coverage_requests: list[CoverageRequest] = Field(..., min_length=1)
    additional_data: OpaquePayload | None = Field(
        default=None, description="Opaque client payload, echoed but never priced"
    )

    @model_validator(mode="after")
    @beartype
    def validate_insured_matches_type(self) -> "QuoteRequest":
        """Exactly one insured record, matching the insurance type."""
        if self.personal_info is not None and self.business_info is not None:
            raise ValueError("Provide either personal_info or business_info, not both")
        if self.insurance_type == InsuranceType.PERSONAL and self.personal_info is None:
            raise ValueError("personal_info is required for personal insurance")
        if (
            self.insurance_type == InsuranceType.COMMERCIAL
            and self.business_info is None
        ):
            raise ValueError("business_info is required for commercial insurance")
        return self

    @property
    @beartype
    def insured_name(self) -> str:
        """Legal name of the business or full name of the person."""
        if self.business_info is not None:
            return self.business_info.legal_name
        if self.personal_info is not None:
            return f"{self.personal_info.first_name} {self.personal_info.last_name}"
        return ""

    @property
    @beartype
    def insured_address(self) -> Address | None:
        """Address of whichever insured record is present."""
        if self.business_info is not None:
            return self.business_info.address
        if self.personal_info is not None:
            return self.personal_info.address
        return None


# Quote output


@beartype
class PremiumBreakdown(BaseModelConfig):
    """Premium for one coverage across payment plans."""

    annual: int = Field(..., ge=0)
    monthly: int = Field(..., ge=0)
    quarterly: int = Field(..., ge=0)
    payment_in_full_discount: int = Field(..., ge=0)


@beartype
class OptionalCoverage(BaseModelConfig):
    """Add-on the insured may purchase with a coverage."""

    name: str
    additional_premium: int = Field(..., ge=0)
    description: str


@beartype
class Quote(BaseModelConfig):
    """Priced (or declined) offer for a single coverage."""

    quote_id: str = Field(..., description="Per-coverage quote id")
    coverage_type: str
    status: QuoteStatus
    coverage_limits: dict[str, Amount]
    premium: PremiumBreakdown
    deductible: Amount | dict[str, Amount] | None = Field(default=None)
    effective_date: date
    expiration_date: date
    policy_form: str
    highlights: list[str]
    exclusions: list[str]
    optional_coverages: list[OptionalCoverage]
    underwriting_notes: list[str]
    decline_reason: str | None = Field(default=None)
    decline_code: str | None = Field(default=None)

    @model_validator(mode="after")
    @beartype
    def validate_decline_fields(self) -> "Quote":
        """Decline details appear only on declined quotes."""
        declined = self.status == QuoteStatus.DECLINED
        if declined != (self.decline_reason is not None):
            raise ValueError("decline_reason must be set exactly when declined")
        return self


@beartype
class PackageDiscount(BaseModelConfig):
    """Multi-coverage discount offered when every coverage is quoted."""

    available: bool = True
    discount_percentage: int = Field(..., ge=0, le=100)
    discount_amount: int = Field(..., ge=0)
    description: str = "Multi-coverage package discount"
    applied_to: str = "all_coverages"


@beartype
class UnderwritingSummary(BaseModelConfig):
    """Carrier-level underwriting commentary."""

    overall_risk_rating: str
    approval_likelihood: str
    notes: list[str]


@beartype
class QuoteResponse(BaseModelConfig):
    """Umbrella response for one quote request."""

    success: bool = True
    carrier_id: str
    carrier_name: str
    carrier_quote_id: str
    requested_quote_id: str
    timestamp: datetime
    valid_until: datetime
    cached: bool = False
    cache_key: str | None = Field(
        default=None, description="Truncated cache key, set on cache hits"
    )
    quotes: list[Quote] = Field(..., min_length=1)
    package_discount: PackageDiscount | None = None
    underwriting_summary: UnderwritingSummary
    bind_eligibility: str
    next_steps: list[str]


@beartype
class QuoteRecord(BaseModelConfig):
    """Indexed quote, as looked up by umbrella or per-coverage id."""

    response: QuoteResponse
    quote_request: QuoteRequest
    selected_quote: Quote | None = Field(
        default=None, description="Coverage the looked-up id refers to"
    )
    created_at: datetime

    @property
    @beartype
    def bindable_quote(self) -> Quote:
        """Coverage a bind operates on; the first one for umbrella ids."""
        if self.selected_quote is not None:
            return self.selected_quote
        return self.response.quotes[0]


@beartype
class CacheStats(BaseModelConfig):
    """Diagnostics for the quote cache and index."""

    total_cached_quotes: int = Field(..., ge=0)
    total_quotes_by_id: int = Field(..., ge=0)
    cache_keys: list[str]
