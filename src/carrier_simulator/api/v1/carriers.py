# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Carrier endpoints: quoting, policy lifecycle, health and cache tools.

Every route requires the shared ``X-API-Key`` header. Business failures come
back from the services as ``Err`` values and are rendered by
``handle_result``.
"""

from datetime import datetime, timezone

from beartype import beartype
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import Field

from ...models.base import BaseModelConfig
from ...models.carrier import get_carrier
from ...models.policy import (
    BindRequest,
    BindResult,
    CancellationResult,
    CancelRequest,
    CertificateRequest,
    CertificateResult,
    EndorsementResult,
    EndorseRequest,
    PolicyResponse,
    RenewalQuote,
    RenewRequest,
)
from ...models.quote import CacheStats, InsuranceType, QuoteRequest, QuoteResponse
from ...services.policy_service import PolicyService
from ...services.quote_service import QuoteService
from ...services.reference_data import SUPPORTED_COVERAGES
from ..dependencies import get_policy_service, get_quote_service, verify_api_key
from ..response_patterns import handle_result

router = APIRouter(dependencies=[Depends(verify_api_key)])


class ServiceStatuses(BaseModelConfig):
    """Status of each simulated carrier subsystem."""

    quoting: str = "operational"
    binding: str = "operational"
    policy_management: str = "operational"
    document_generation: str = "operational"


class CarrierHealth(BaseModelConfig):
    """Health report for one carrier; sparse when the carrier is unknown."""

    status: str = Field(..., description="operational or unknown")
    carrier_id: str
    carrier_name: str | None = None
    message: str | None = None
    timestamp: datetime | None = None
    services: ServiceStatuses | None = None
    supported_insurance_types: list[InsuranceType] | None = None
    supported_coverages: dict[str, list[str]] | None = None


class CacheStatsResponse(BaseModelConfig):
    """Cache diagnostics envelope."""

    success: bool = True
    stats: CacheStats
    timestamp: datetime


class CacheClearResponse(BaseModelConfig):
    """Acknowledgement of a cache clear."""

    success: bool = True
    message: str = "Cache cleared successfully"
    timestamp: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


@router.post("/{carrier_id}/quote", response_model=QuoteResponse)
@beartype
async def create_quote(
    carrier_id: str,
    quote_request: QuoteRequest,
    quote_service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse | JSONResponse:
    """Quote every requested coverage, reusing cached quotes when possible."""
    return handle_result(quote_service.generate_quote(carrier_id, quote_request))


@router.post(
    "/{carrier_id}/bind",
    response_model=BindResult,
    status_code=status.HTTP_201_CREATED,
)
@beartype
async def bind_policy(
    carrier_id: str,
    bind_request: BindRequest,
    policy_service: PolicyService = Depends(get_policy_service),
) -> BindResult | JSONResponse:
    """Bind a quote into a new policy."""
    return handle_result(policy_service.bind_policy(carrier_id, bind_request))


@router.get("/{carrier_id}/policies/{policy_id}", response_model=PolicyResponse)
@beartype
async def get_policy(
    carrier_id: str,
    policy_id: str,
    policy_service: PolicyService = Depends(get_policy_service),
) -> PolicyResponse | JSONResponse:
    """Retrieve a bound policy with its expiry status."""
    return handle_result(policy_service.get_policy(carrier_id, policy_id))


@router.post("/{carrier_id}/policies/{policy_id}/renew", response_model=RenewalQuote)
@beartype
async def renew_policy(
    carrier_id: str,
    policy_id: str,
    renew_request: RenewRequest,
    policy_service: PolicyService = Depends(get_policy_service),
) -> RenewalQuote | JSONResponse:
    """Quote a renewal term for a policy."""
    return handle_result(
        policy_service.renew_policy(carrier_id, policy_id, renew_request)
    )


@router.post(
    "/{carrier_id}/policies/{policy_id}/endorse", response_model=EndorsementResult
)
@beartype
async def endorse_policy(
    carrier_id: str,
    policy_id: str,
    endorse_request: EndorseRequest,
    policy_service: PolicyService = Depends(get_policy_service),
) -> EndorsementResult | JSONResponse:
    """Add a mid-term endorsement to a policy."""
    return handle_result(
        policy_service.add_endorsement(carrier_id, policy_id, endorse_request)
    )


@router.post(
    "/{carrier_id}/policies/{policy_id}/cancel", response_model=CancellationResult
)
@beartype
async def cancel_policy(
    carrier_id: str,
    policy_id: str,
    cancel_request: CancelRequest,
    policy_service: PolicyService = Depends(get_policy_service),
) -> CancellationResult | JSONResponse:
    """Cancel a policy and report the refund."""
    return handle_result(
        policy_service.cancel_policy(carrier_id, policy_id, cancel_request)
    )


@router.post(
    "/{carrier_id}/policies/{policy_id}/certificate",
    response_model=CertificateResult,
)
@beartype
async def generate_certificate(
    carrier_id: str,
    policy_id: str,
    certificate_request: CertificateRequest,
    policy_service: PolicyService = Depends(get_policy_service),
) -> CertificateResult | JSONResponse:
    """Issue a certificate of insurance."""
    return handle_result(
        policy_service.generate_certificate(carrier_id, policy_id, certificate_request)
    )


@router.get(
    "/{carrier_id}/health",
    response_model=CarrierHealth,
    response_model_exclude_none=True,
)
@beartype
async def carrier_health(carrier_id: str) -> CarrierHealth:
    """Report carrier availability; unknown carriers are not an error."""
    carrier = get_carrier(carrier_id)
    if carrier is None:
        return CarrierHealth(
            status="unknown", carrier_id=carrier_id, message="Carrier not found"
        )

    return CarrierHealth(
        status="operational",
        carrier_id=carrier.id,
        carrier_name=carrier.name,
        timestamp=_now(),
        services=ServiceStatuses(),
        supported_insurance_types=list(InsuranceType),
        supported_coverages={
            line: list(coverages) for line, coverages in SUPPORTED_COVERAGES.items()
        },
    )


@router.get("/cache/stats", response_model=CacheStatsResponse)
@beartype
async def cache_stats(
    quote_service: QuoteService = Depends(get_quote_service),
) -> CacheStatsResponse:
    """Quote cache diagnostics."""
    return CacheStatsResponse(stats=quote_service.cache_stats(), timestamp=_now())


@router.post("/cache/clear", response_model=CacheClearResponse)
@beartype
async def clear_cache(
    quote_service: QuoteService = Depends(get_quote_service),
) -> CacheClearResponse:
    """Empty the quote cache; already issued quotes stay bindable."""
    quote_service.clear_cache()
    return CacheClearResponse(timestamp=_now())
