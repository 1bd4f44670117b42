# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""FastAPI dependencies for authentication and service wiring.

One set of stores and services lives for the lifetime of the process; tests
replace it through ``app.dependency_overrides[get_services]``.
"""

from collections.abc import Callable
from datetime import datetime, timezone

from attrs import frozen
from beartype import beartype
from fastapi import Depends, Header, HTTPException, status

from ..core.config import Settings, get_settings
from ..services.id_generator import IdGenerator
from ..services.policy_service import PolicyService
from ..services.quote_service import QuoteService
from ..services.stores import PolicyStore, QuoteCache, QuoteIndex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@frozen
class Services:
    """Service instances sharing one set of stores."""

    quote_service: QuoteService
    policy_service: PolicyService


@beartype
def build_services(
    settings: Settings,
    id_generator: IdGenerator | None = None,
    clock: Callable[[], datetime] = _utc_now,
) -> Services:
    """Wire fresh stores into quote and policy services."""
    ids = id_generator or IdGenerator(clock=clock)
    quote_index = QuoteIndex()
    return Services(
        quote_service=QuoteService(
            ids,
            QuoteCache(),
            quote_index,
            validity_days=settings.quote_validity_days,
            clock=clock,
        ),
        policy_service=PolicyService(
            ids,
            quote_index,
            PolicyStore(),
            document_base_url=settings.document_base_url,
            validity_days=settings.quote_validity_days,
            clock=clock,
        ),
    )


_services: Services | None = None


@beartype
def get_services() -> Services:
    """Get the process-wide services instance."""
    global _services
    if _services is None:
        _services = build_services(get_settings())
    return _services


@beartype
def reset_services() -> None:
    """Drop all in-memory state (for testing)."""
    global _services
    _services = None


@beartype
async def get_quote_service(
    services: Services = Depends(get_services),
) -> QuoteService:
    """Provide the quote service."""
    return services.quote_service


@beartype
async def get_policy_service(
    services: Services = Depends(get_services),
) -> PolicyService:
    """Provide the policy service."""
    return services.policy_service


@beartype
async def verify_api_key(
    x_api_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> bool:
    """Verify the shared API key sent in the ``X-API-Key`` header.

    Raises:
        HTTPException: 401 when the header is missing or does not match
    """
    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "code": "UNAUTHORIZED",
                "message": "Missing API key. Include X-API-Key header.",
            },
        )
    if x_api_key != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": "UNAUTHORIZED", "message": "Invalid API key"},
        )
    return True
