# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy lifecycle models: bind, servicing requests and their results.

A ``Policy`` is created only by binding a quote. Endorsements and
certificates are appended alongside it and a cancellation only changes its
status; nothing here is ever deleted.
"""

from datetime import date, datetime
from enum import Enum

from beartype import beartype
from pydantic import Field, model_validator

from .base import (
    Address,
    Amount,
    BaseModelConfig,
    GeneratedDocument,
    OpaquePayload,
    Signature,
)
from .quote import InsuranceType


class PolicyStatus(str, Enum):
    """Enumeration of policy lifecycle states."""

    BOUND = "bound"
    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING_CANCELLATION = "pending_cancellation"


class PaymentPlan(str, Enum):
    """Installment schedule chosen at bind."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    ANNUAL = "annual"


# Bind


@beartype
class PaymentInfo(BaseModelConfig):
    """Tokenized payment method."""

    method: str = Field(..., min_length=1)
    token: str = Field(..., min_length=1)
    billing_address: Address


@beartype
class PrimaryContact(BaseModelConfig):
    """Named contact on the bound policy."""

    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=1)
    title: str | None = None


@beartype
class AdditionalInsured(BaseModelConfig):
    """Third party named on the policy."""

    name: str = Field(..., min_length=1)
    address: Address
    relationship: str | None = None


@beartype
class InsuredInfo(BaseModelConfig):
    """Who is insured and who else is named."""

    primary_contact: PrimaryContact
    additional_insureds: list[AdditionalInsured] = Field(default_factory=list)


@beartype
class BindRequest(BaseModelConfig):
    """Request to purchase a quote."""

    quote_id: str = Field(
        ..., min_length=1, description="Umbrella or coverage quote id"
    )
    effective_date: date
    payment_plan: PaymentPlan
    payment_info: PaymentInfo
    insured_info: InsuredInfo
    signature: Signature
    customizations: OpaquePayload | None = Field(
        default=None, description="Opaque client payload stored with the policy"
    )


@beartype
class PolicyPremium(BaseModelConfig):
    """Premium terms fixed at bind."""

    annual: int = Field(..., ge=0)
    payment_plan: PaymentPlan
    monthly_amount: int = Field(
        ..., ge=0, description="Recurring installment for the selected plan"
    )
    first_payment_due: date
    next_payment_date: date


@beartype
class CarrierContact(BaseModelConfig):
    """Service and claims contacts for a policy."""

    policy_service_phone: str = "1-800-555-0300"
    claims_phone: str = "1-800-555-0400"
    email: str
    claims_email: str


@beartype
class EndorsementPremiumChange(BaseModelConfig):
    """Premium effect of one endorsement."""

    amount: int
    annual_adjustment: int
    pro_rated_charge: int
    explanation: str = "Endorsement fee, pro-rated to policy expiration"


@beartype
class Endorsement(BaseModelConfig):
    """Mid-term change appended to a policy; never mutated once created."""

    endorsement_id: str
    policy_id: str
    status: str = "approved"
    endorsement_type: str
    effective_date: date
    premium_change: EndorsementPremiumChange
    documents: list[GeneratedDocument]
    confirmation_email_sent: bool = True
    next_steps: list[str] = Field(default_factory=list)


@beartype
class Policy(BaseModelConfig):
    """Bound insurance policy."""

    policy_id: str
    policy_number: str
    status: PolicyStatus
    insurance_type: InsuranceType
    coverage_type: str
    effective_date: date
    expiration_date: date
    insured_name: str
    insured_address: str
    coverage_limits: dict[str, Amount]
    premium: PolicyPremium
    deductible: Amount | dict[str, Amount] | None = None
    carrier_contact: CarrierContact
    documents: list[GeneratedDocument]
    endorsements: list[Endorsement] = Field(default_factory=list)
    additional_insureds: list[AdditionalInsured] = Field(default_factory=list)


@beartype
class PaymentConfirmation(BaseModelConfig):
    """Receipt for the first installment."""

    payment_id: str
    amount: int = Field(..., ge=0)
    currency: str = "USD"
    payment_method: str
    status: str = "succeeded"
    receipt_url: str


@beartype
class BindResult(BaseModelConfig):
    """Response to a successful bind."""

    success: bool = True
    carrier_id: str
    bind_id: str
    policy: Policy
    payment_confirmation: PaymentConfirmation
    bound_at: datetime
    confirmation_email_sent: bool = True
    next_steps: list[str]


@beartype
class PolicyView(Policy):
    """Policy as returned by retrieval, with derived expiry fields."""

    days_until_expiration: int


@beartype
class PolicyResponse(BaseModelConfig):
    """Envelope for policy retrieval."""

    success: bool = True
    policy: PolicyView


# Renewal


@beartype
class BusinessChanges(BaseModelConfig):
    """Exposure changes reported at renewal."""

    revenue_changed: bool = False
    new_annual_revenue: Amount | None = None
    employees_changed: bool = False
    new_full_time_employees: int | None = None
    new_part_time_employees: int | None = None
    locations_changed: bool = False
    operations_changed: bool = False


@beartype
class CoverageChanges(BaseModelConfig):
    """Coverage changes requested at renewal."""

    increase_limits: bool = False
    new_limits: dict[str, Amount] | None = None
    add_coverages: list[str] = Field(default_factory=list)
    remove_coverages: list[str] = Field(default_factory=list)


@beartype
class RenewRequest(BaseModelConfig):
    """Request for a renewal quote."""

    renewal_type: str = Field(..., min_length=1)
    business_changes: BusinessChanges | None = None
    coverage_changes: CoverageChanges | None = None
    desired_effective_date: date | None = None


@beartype
class RenewalPremium(BaseModelConfig):
    """Renewal premium across payment plans."""

    annual: int
    monthly: int
    quarterly: int


@beartype
class PremiumChange(BaseModelConfig):
    """Net change from the expiring premium, with reasons in applied order."""

    amount: int
    percentage: int
    reasons: list[str]


@beartype
class LoyaltyDiscount(BaseModelConfig):
    """Renewal discount applied last."""

    percentage: int
    amount: int
    description: str = "Claims-free discount"


@beartype
class RenewalTerms(BaseModelConfig):
    """Priced renewal offer for the policy's coverage."""

    quote_id: str
    coverage_type: str
    effective_date: date
    expiration_date: date
    coverage_limits: dict[str, Amount]
    premium: RenewalPremium
    premium_change: PremiumChange
    deductible: Amount | dict[str, Amount] | None = None
    loyalty_discount: LoyaltyDiscount
    valid_until: datetime
    highlights: list[str]


@beartype
class RenewalQuote(BaseModelConfig):
    """Response to a renewal request."""

    success: bool = True
    renewal_quote_id: str
    original_policy_id: str
    renewal_status: str = "quoted"
    quote: RenewalTerms
    underwriting_notes: list[str]
    bind_eligibility: str = "eligible_automatic"
    next_steps: list[str]


# Endorsement


@beartype
class EndorseRequest(BaseModelConfig):
    """Request for a mid-term policy change."""

    endorsement_type: str = Field(..., min_length=1)
    effective_date: date
    details: OpaquePayload = Field(default_factory=dict)


@beartype
class UpdatedPolicySummary(BaseModelConfig):
    """Policy totals after an endorsement."""

    total_annual_premium: int
    endorsements_count: int = Field(..., ge=1)


@beartype
class EndorsementResult(Endorsement):
    """Response to an endorsement request."""

    success: bool = True
    updated_policy_summary: UpdatedPolicySummary


# Cancellation


@beartype
class CancelRequest(BaseModelConfig):
    """Request to cancel a policy."""

    cancellation_type: str = Field(..., min_length=1)
    effective_date: date
    reason: str = Field(..., min_length=1)
    signature: Signature


@beartype
class RefundBreakdown(BaseModelConfig):
    """How the earned share was derived."""

    total_premium_paid: int
    days_policy_active: int
    total_days: int
    percentage_earned: int


@beartype
class Refund(BaseModelConfig):
    """Earned/unearned split and the resulting refund."""

    earned_premium: int
    unearned_premium: int
    cancellation_fee: int
    short_rate_penalty: int = 0
    net_refund: int
    refund_method: str = "original_payment_method"
    estimated_refund_date: date
    refund_breakdown: RefundBreakdown


@beartype
class CancellationResult(BaseModelConfig):
    """Response to a cancellation request."""

    success: bool = True
    cancellation_id: str
    policy_id: str
    policy_number: str
    status: PolicyStatus = PolicyStatus.PENDING_CANCELLATION
    effective_date: date
    cancellation_type: str
    refund: Refund
    documents: list[GeneratedDocument]
    important_notes: list[str]
    confirmation_email_sent: bool = True
    next_steps: list[str]


# Certificates


@beartype
class CertificateHolder(BaseModelConfig):
    """Party requesting proof of coverage."""

    name: str = Field(..., min_length=1)
    address: Address


@beartype
class CertificateRequest(BaseModelConfig):
    """Request for a certificate of insurance."""

    certificate_holder: CertificateHolder
    additional_insured: bool
    description_of_operations: str
    special_provisions: list[str] = Field(default_factory=list)
    project_number: str | None = None
    project_description: str | None = None


@beartype
class IssuedHolder(BaseModelConfig):
    """Holder as printed on the certificate."""

    name: str
    address: str


@beartype
class CertificateDocument(BaseModelConfig):
    """Rendered certificate file."""

    url: str
    format: str = "PDF"
    size_bytes: int = 245760


@beartype
class CoverageSummary(BaseModelConfig):
    """Coverage section of a certificate."""

    coverage_type: str
    limits: str
    policy_number: str
    effective_date: date
    expiration_date: date


@beartype
class Certificate(BaseModelConfig):
    """Certificate of insurance issued against a policy."""

    certificate_id: str
    policy_id: str
    certificate_number: str
    issued_date: date
    certificate_holder: IssuedHolder
    format: str = "ACORD 25"
    document: CertificateDocument
    generated_at: datetime
    expires_at: date
    coverage_summary: CoverageSummary
    description_of_operations: str
    special_provisions: list[str]
    confirmation_email_sent: bool = True
    next_steps: list[str]


@beartype
class CertificateResult(Certificate):
    """Response to a certificate request."""

    success: bool = True


# Stored state


@beartype
class PolicyRecord(BaseModelConfig):
    """Everything the policy store keeps for one bound policy."""

    policy: Policy
    bind_request: BindRequest
    quote_id: str
    carrier_id: str
    created_at: datetime
    cancellation: CancellationResult | None = None

    @model_validator(mode="after")
    @beartype
    def validate_cancellation(self) -> "PolicyRecord":
        """A retained cancellation always goes with the pending status."""
        if (
            self.cancellation is not None
            and self.policy.status != PolicyStatus.PENDING_CANCELLATION
        ):
            raise ValueError("Cancelled policies must be pending_cancellation")
        return self

