# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Policy lifecycle: bind, retrieve, renew, endorse, cancel and certify.

Every operation resolves its inputs first and commits at most one store
mutation last, so a failed lookup never leaves partial state behind.
"""

from collections.abc import Callable, Mapping
from datetime import datetime, time, timedelta, timezone

from beartype import beartype

from ..core.errors import (
    ServiceError,
    carrier_not_found,
    policy_not_found,
    quote_expired,
    quote_not_found,
)
from ..core.logging_utils import get_logger
from ..core.result_types import Err, Ok, Result
from ..models.base import GeneratedDocument
from ..models.carrier import CARRIERS, CarrierConfig
from ..models.policy import (
    BindRequest,
    BindResult,
    CancellationResult,
    CancelRequest,
    CarrierContact,
    Certificate,
    CertificateDocument,
    CertificateRequest,
    CertificateResult,
    CoverageSummary,
    Endorsement,
    EndorsementPremiumChange,
    EndorsementResult,
    EndorseRequest,
    IssuedHolder,
    LoyaltyDiscount,
    PaymentConfirmation,
    PaymentPlan,
    Policy,
    PolicyPremium,
    PolicyRecord,
    PolicyResponse,
    PolicyStatus,
    PolicyView,
    PremiumChange,
    Refund,
    RefundBreakdown,
    RenewalPremium,
    RenewalQuote,
    RenewalTerms,
    RenewRequest,
    UpdatedPolicySummary,
)
from ..models.quote import QuoteRecord
from .id_generator import IdGenerator
from .rating_engine import (
    CANCELLATION_FEE,
    DAYS_PER_TERM,
    ENDORSEMENT_FEE,
    LOYALTY_DISCOUNT_RATE,
    add_months,
    add_years,
    calculate_refund,
    endorsement_charge,
    price_renewal,
    round_currency,
)
from .stores import PolicyStore, QuoteIndex

logger = get_logger(__name__)

DEFAULT_DOCUMENT_BASE_URL = "https://carrier-simulator.example.com"
DEFAULT_VALIDITY_DAYS = 30
REFUND_PROCESSING_DAYS = 15
POLICY_DOCUMENT_BYTES = 524288
DECLARATIONS_BYTES = 102400

_MONTHS_TO_NEXT_PAYMENT: dict[PaymentPlan, int] = {
    PaymentPlan.MONTHLY: 1,
    PaymentPlan.QUARTERLY: 3,
    PaymentPlan.ANNUAL: 12,
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PolicyService:
    """Service for the lifecycle of policies bound from quotes."""

    def __init__(
        self,
        id_generator: IdGenerator,
        quote_index: QuoteIndex,
        policy_store: PolicyStore,
        carriers: Mapping[str, CarrierConfig] = CARRIERS,
        document_base_url: str = DEFAULT_DOCUMENT_BASE_URL,
        validity_days: int = DEFAULT_VALIDITY_DAYS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize policy service with the shared quote index."""
        self._ids = id_generator
        self._quotes = quote_index
        self._policies = policy_store
        self._carriers = carriers
        self._base_url = document_base_url.rstrip("/")
        self._validity = timedelta(days=validity_days)
        self._clock = clock

    @beartype
    def bind_policy(
        self, carrier_id: str, request: BindRequest
    ) -> Result[BindResult, ServiceError]:
        """Purchase a quote, creating a new policy.

        Binding is not idempotent: each call mints a new policy.
        """
        carrier = self._carriers.get(carrier_id)
        if carrier is None:
            return Err(carrier_not_found(carrier_id))

        record = self._quotes.get(request.quote_id)
        if record is None:
            return Err(quote_not_found(request.quote_id))

        now = self._clock()
        valid_until = record.response.valid_until
        if now > valid_until:
            logger.warning(
                "Rejected bind of expired quote %s (valid until %s)",
                request.quote_id,
                valid_until.isoformat(),
            )
            return Err(quote_expired(request.quote_id, valid_until.isoformat()))

        policy = self._build_policy(carrier, record, request, now)
        installment = policy.premium.monthly_amount
        payment_stamp = self._ids.stamp()

        result = BindResult(
            carrier_id=carrier.id,
            bind_id=self._ids.reference_id(carrier, "B"),
            policy=policy,
            payment_confirmation=PaymentConfirmation(
                payment_id=f"pay_{payment_stamp}",
                amount=installment,
                payment_method=f"card_ending_{self._ids.card_last_four()}",
                receipt_url=f"{self._base_url}/receipts/pay_{payment_stamp}.pdf",
            ),
            bound_at=now,
            next_steps=[
                "Policy documents are ready for download",
                f"First payment will be charged on {request.effective_date}",
                "Certificate of insurance available immediately",
                "24/7 customer service available",
            ],
        )

        self._policies.put(
            PolicyRecord(
                policy=policy,
                bind_request=request,
                quote_id=request.quote_id,
                carrier_id=carrier.id,
                created_at=now,
            )
        )
        logger.info(
            "Bound policy %s (%s) from quote %s",
            policy.policy_id,
            policy.policy_number,
            request.quote_id,
        )
        return Ok(result)

    @beartype
    def get_policy(
        self, carrier_id: str, policy_id: str
    ) -> Result[PolicyResponse, ServiceError]:
        """Policy with derived expiry status and its endorsements."""
        record = self._policies.get(policy_id)
        if record is None:
            return Err(policy_not_found(policy_id))

        policy = record.policy
        expires_at = datetime.combine(policy.expiration_date, time.min, timezone.utc)
        days_left = (expires_at - self._clock()) // timedelta(days=1)

        if days_left < 0:
            status = PolicyStatus.EXPIRED
        elif record.cancellation is not None:
            status = PolicyStatus.PENDING_CANCELLATION
        else:
            status = PolicyStatus.ACTIVE

        view = PolicyView(
            **policy.model_dump(exclude={"status", "endorsements"}),
            status=status,
            endorsements=self._policies.endorsements(policy_id),
            days_until_expiration=days_left,
        )
        return Ok(PolicyResponse(policy=view))

    @beartype
    def renew_policy(
        self, carrier_id: str, policy_id: str, request: RenewRequest
    ) -> Result[RenewalQuote, ServiceError]:
        """Price a renewal of the policy without changing it."""
        record = self._policies.get(policy_id)
        if record is None:
            return Err(policy_not_found(policy_id))
        carrier = self._carriers.get(carrier_id)
        if carrier is None:
            return Err(carrier_not_found(carrier_id))

        policy = record.policy
        business = request.business_changes
        coverage = request.coverage_changes
        pricing = price_renewal(
            policy.premium.annual,
            revenue_changed=business is not None and business.revenue_changed,
            employees_changed=business is not None and business.employees_changed,
            increase_limits=coverage is not None and coverage.increase_limits,
        )

        renewal_quote_id = self._ids.reference_id(carrier, "RQ")
        effective = request.desired_effective_date or policy.expiration_date
        limits = (
            coverage.new_limits
            if coverage is not None and coverage.new_limits
            else policy.coverage_limits
        )

        return Ok(
            RenewalQuote(
                renewal_quote_id=renewal_quote_id,
                original_policy_id=policy_id,
                quote=RenewalTerms(
                    quote_id=f"{renewal_quote_id}-{policy.coverage_type}",
                    coverage_type=policy.coverage_type,
                    effective_date=effective,
                    expiration_date=add_years(effective, 1),
                    coverage_limits=limits,
                    premium=RenewalPremium(
                        annual=pricing.annual,
                        monthly=round_currency(pricing.annual / 12),
                        quarterly=round_currency(pricing.annual / 4),
                    ),
                    premium_change=PremiumChange(
                        amount=pricing.change,
                        percentage=pricing.change_percentage,
                        reasons=pricing.reasons(),
                    ),
                    deductible=policy.deductible,
                    loyalty_discount=LoyaltyDiscount(
                        percentage=int(LOYALTY_DISCOUNT_RATE * 100),
                        amount=pricing.loyalty_discount,
                    ),
                    valid_until=self._clock() + self._validity,
                    highlights=[
                        "All prior endorsements maintained",
                        "No underwriting required for renewal",
                        "Streamlined renewal process",
                    ],
                ),
                underwriting_notes=[
                    "Positive renewal eligibility",
                    "No claims in prior term",
                    "Automatic renewal available",
                ],
                next_steps=[
                    "Review renewal quote",
                    "Accept renewal to bind new policy",
                    f"Current policy expires {policy.expiration_date.isoformat()}",
                ],
            )
        )

    @beartype
    def add_endorsement(
        self, carrier_id: str, policy_id: str, request: EndorseRequest
    ) -> Result[EndorsementResult, ServiceError]:
        """Append a flat-fee endorsement to the policy."""
        record = self._policies.get(policy_id)
        if record is None:
            return Err(policy_not_found(policy_id))
        carrier = self._carriers.get(carrier_id)
        if carrier is None:
            return Err(carrier_not_found(carrier_id))

        endorsement_id = self._ids.reference_id(carrier, "END")
        readable_type = request.endorsement_type.replace("_", " ")
        endorsement = Endorsement(
            endorsement_id=endorsement_id,
            policy_id=policy_id,
            endorsement_type=request.endorsement_type,
            effective_date=request.effective_date,
            premium_change=EndorsementPremiumChange(
                amount=ENDORSEMENT_FEE,
                annual_adjustment=ENDORSEMENT_FEE,
                pro_rated_charge=endorsement_charge(),
            ),
            documents=[
                GeneratedDocument(
                    type="endorsement",
                    name=f"Endorsement - {readable_type}",
                    url=f"{self._base_url}/documents/{endorsement_id}.pdf",
                    generated_at=self._clock(),
                )
            ],
            next_steps=[
                f"Endorsement effective {request.effective_date.isoformat()}",
                "Updated documents available for download",
                "New certificate of insurance can be generated",
            ],
        )

        count = self._policies.add_endorsement(endorsement)
        logger.info("Added endorsement %s to policy %s", endorsement_id, policy_id)

        return Ok(
            EndorsementResult(
                **endorsement.model_dump(),
                updated_policy_summary=UpdatedPolicySummary(
                    total_annual_premium=(
                        record.policy.premium.annual + ENDORSEMENT_FEE * count
                    ),
                    endorsements_count=count,
                ),
            )
        )

    @beartype
    def cancel_policy(
        self, carrier_id: str, policy_id: str, request: CancelRequest
    ) -> Result[CancellationResult, ServiceError]:
        """Cancel the policy and compute its pro-rata refund."""
        with self._policies.lock:
            record = self._policies.get(policy_id)
            if record is None:
                return Err(policy_not_found(policy_id))
            carrier = self._carriers.get(carrier_id)
            if carrier is None:
                return Err(carrier_not_found(carrier_id))

            policy = record.policy
            refund = calculate_refund(
                policy.premium.annual, policy.effective_date, request.effective_date
            )
            effective = request.effective_date.isoformat()

            result = CancellationResult(
                cancellation_id=self._ids.reference_id(carrier, "CAN"),
                policy_id=policy_id,
                policy_number=policy.policy_number,
                effective_date=request.effective_date,
                cancellation_type=request.cancellation_type,
                refund=Refund(
                    earned_premium=refund.earned,
                    unearned_premium=refund.unearned,
                    cancellation_fee=CANCELLATION_FEE,
                    net_refund=refund.net_refund,
                    estimated_refund_date=(
                        request.effective_date
                        + timedelta(days=REFUND_PROCESSING_DAYS)
                    ),
                    refund_breakdown=RefundBreakdown(
                        total_premium_paid=refund.earned,
                        days_policy_active=refund.days_active,
                        total_days=DAYS_PER_TERM,
                        percentage_earned=refund.percentage_earned,
                    ),
                ),
                documents=[
                    GeneratedDocument(
                        type="cancellation_notice",
                        name="Cancellation Notice",
                        url=(
                            f"{self._base_url}/documents/"
                            f"cancellation_{self._ids.stamp()}.pdf"
                        ),
                        generated_at=self._clock(),
                    )
                ],
                important_notes=[
                    f"Policy coverage ends at 12:01 AM on {effective}",
                    "No coverage after cancellation date",
                    "Refund will be processed within 15 business days",
                    "Consider obtaining replacement coverage before cancellation",
                ],
                next_steps=[
                    "Cancellation notice sent to your email",
                    f"Secure replacement coverage before {effective}",
                    f"Refund of ${refund.net_refund} will be issued",
                ],
            )

            self._policies.put(
                record.model_copy(
                    update={
                        "policy": policy.model_copy(
                            update={"status": PolicyStatus.PENDING_CANCELLATION}
                        ),
                        "cancellation": result,
                    }
                )
            )

        logger.info(
            "Cancelled policy %s effective %s (net refund %d)",
            policy_id,
            effective,
            refund.net_refund,
        )
        return Ok(result)

    @beartype
    def generate_certificate(
        self, carrier_id: str, policy_id: str, request: CertificateRequest
    ) -> Result[CertificateResult, ServiceError]:
        """Issue an ACORD 25 certificate of insurance for the policy."""
        record = self._policies.get(policy_id)
        if record is None:
            return Err(policy_not_found(policy_id))
        carrier = self._carriers.get(carrier_id)
        if carrier is None:
            return Err(carrier_not_found(carrier_id))

        policy = record.policy
        now = self._clock()
        certificate_id = self._ids.reference_id(carrier, "CERT")
        certificate = Certificate(
            certificate_id=certificate_id,
            policy_id=policy_id,
            certificate_number=f"CERT-{certificate_id}",
            issued_date=now.date(),
            certificate_holder=IssuedHolder(
                name=request.certificate_holder.name,
                address=request.certificate_holder.address.one_line(),
            ),
            document=CertificateDocument(
                url=f"{self._base_url}/certificates/{certificate_id}.pdf",
            ),
            generated_at=now,
            expires_at=policy.expiration_date,
            coverage_summary=CoverageSummary(
                coverage_type=policy.coverage_type,
                limits="/".join(
                    _format_amount(value) for value in policy.coverage_limits.values()
                ),
                policy_number=policy.policy_number,
                effective_date=policy.effective_date,
                expiration_date=policy.expiration_date,
            ),
            description_of_operations=request.description_of_operations,
            special_provisions=list(request.special_provisions),
            next_steps=[
                "Certificate ready for download",
                "Valid until policy expiration",
                "Can generate additional certificates as needed",
            ],
        )

        self._policies.add_certificate(certificate)
        logger.info("Issued certificate %s for policy %s", certificate_id, policy_id)
        return Ok(CertificateResult(**certificate.model_dump()))

    def _build_policy(
        self,
        carrier: CarrierConfig,
        record: QuoteRecord,
        request: BindRequest,
        now: datetime,
    ) -> Policy:
        quote = record.bindable_quote
        quote_request = record.quote_request
        plan = request.payment_plan
        installments = {
            PaymentPlan.MONTHLY: quote.premium.monthly,
            PaymentPlan.QUARTERLY: quote.premium.quarterly,
            PaymentPlan.ANNUAL: quote.premium.annual,
        }
        policy_id = self._ids.policy_id(carrier)
        address = quote_request.insured_address

        return Policy(
            policy_id=policy_id,
            policy_number=self._ids.policy_number(carrier, quote.coverage_type),
            status=PolicyStatus.BOUND,
            insurance_type=quote_request.insurance_type,
            coverage_type=quote.coverage_type,
            effective_date=request.effective_date,
            expiration_date=quote.expiration_date,
            insured_name=quote_request.insured_name,
            insured_address=address.one_line() if address is not None else "",
            coverage_limits=quote.coverage_limits,
            premium=PolicyPremium(
                annual=quote.premium.annual,
                payment_plan=plan,
                monthly_amount=installments[plan],
                first_payment_due=request.effective_date,
                next_payment_date=add_months(
                    request.effective_date, _MONTHS_TO_NEXT_PAYMENT[plan]
                ),
            ),
            deductible=quote.deductible,
            carrier_contact=CarrierContact(
                email=f"service@{carrier.contact_domain}",
                claims_email=f"claims@{carrier.contact_domain}",
            ),
            documents=[
                GeneratedDocument(
                    type="policy",
                    name=f"{quote.coverage_type} Policy",
                    url=f"{self._base_url}/documents/{policy_id}/policy.pdf",
                    size_bytes=POLICY_DOCUMENT_BYTES,
                    generated_at=now,
                ),
                GeneratedDocument(
                    type="declarations",
                    name="Declarations Page",
                    url=f"{self._base_url}/documents/{policy_id}/declarations.pdf",
                    size_bytes=DECLARATIONS_BYTES,
                    generated_at=now,
                ),
            ],
            additional_insureds=list(request.insured_info.additional_insureds),
        )


def _format_amount(value: int | float) -> str:
    """Render a limit the way it was supplied, without a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
