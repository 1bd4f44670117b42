# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Quote generation with content-addressable caching.

Semantically identical requests (same pricing projection) return the exact
same stored response: ids, premiums, timestamps and approval outcomes are
fixed at first synthesis.
"""

import threading
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta, timezone

from beartype import beartype

from ..core.errors import ServiceError, carrier_not_found, quote_not_found
from ..core.logging_utils import get_logger, truncate_key
from ..core.result_types import Err, Ok, Result, result_from_optional
from ..models.carrier import CARRIERS, CarrierConfig
from ..models.quote import (
    CacheStats,
    CoverageRequest,
    PackageDiscount,
    Quote,
    QuoteRecord,
    QuoteRequest,
    QuoteResponse,
    QuoteStatus,
    UnderwritingSummary,
)
from . import reference_data
from .cache_keys import CacheKeys
from .id_generator import IdGenerator
from .rating_engine import (
    PACKAGE_DISCOUNT_PERCENTAGE,
    add_years,
    apply_multiplier,
    calculate_base_premium,
    package_discount_amount,
    premium_breakdown,
)
from .stores import QuoteCache, QuoteIndex

logger = get_logger(__name__)

DECLINE_CODE = "OUTSIDE_APPETITE"
CARRIER_QUOTE_COVERAGE = "main"
DEFAULT_VALIDITY_DAYS = 30


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuoteService:
    """Service for quote generation, lookup and cache maintenance."""

    def __init__(
        self,
        id_generator: IdGenerator,
        quote_cache: QuoteCache,
        quote_index: QuoteIndex,
        carriers: Mapping[str, CarrierConfig] = CARRIERS,
        validity_days: int = DEFAULT_VALIDITY_DAYS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize quote service with its stores and generator."""
        if validity_days < 1:
            raise ValueError("validity_days must be at least 1")

        self._ids = id_generator
        self._cache = quote_cache
        self._index = quote_index
        self._carriers = carriers
        self._validity = timedelta(days=validity_days)
        self._clock = clock
        # Held across lookup, synthesis and insert so concurrent identical
        # misses resolve to a single stored outcome.
        self._generation_lock = threading.Lock()

    @beartype
    def generate_quote(
        self, carrier_id: str, request: QuoteRequest
    ) -> Result[QuoteResponse, ServiceError]:
        """Return the cached quote for a request, synthesizing it on a miss."""
        carrier = self._carriers.get(carrier_id)
        if carrier is None:
            return Err(carrier_not_found(carrier_id))

        key = CacheKeys.quote_key(carrier_id, request)

        with self._generation_lock:
            cached = self._cache.get(key)
            if cached is not None:
                logger.info(
                    "Quote cache hit for %s (key %s)", carrier_id, truncate_key(key)
                )
                return Ok(
                    cached.model_copy(
                        update={"cached": True, "cache_key": truncate_key(key)}
                    )
                )

            logger.info(
                "Quote cache miss for %s (key %s)", carrier_id, truncate_key(key)
            )
            response = self._synthesize(carrier, request, key)
            self._store(key, response, request)

        return Ok(response)

    @beartype
    def get_quote(self, quote_id: str) -> Result[QuoteRecord, ServiceError]:
        """Look up a quote by umbrella or per-coverage id."""
        record = self._index.get(quote_id)
        return result_from_optional(record, quote_not_found(quote_id))

    @beartype
    def cache_stats(self) -> CacheStats:
        """Counts of cached responses and indexed ids, with truncated keys."""
        return CacheStats(
            total_cached_quotes=self._cache.size(),
            total_quotes_by_id=self._index.size(),
            cache_keys=[CacheKeys.preview(key) for key in self._cache.keys()],
        )

    @beartype
    def clear_cache(self) -> None:
        """Drop every cached response; indexed quotes stay retrievable."""
        with self._generation_lock:
            self._cache.clear()
        logger.info("Quote cache cleared")

    def _synthesize(
        self, carrier: CarrierConfig, request: QuoteRequest, key: str
    ) -> QuoteResponse:
        timestamp = self._clock()
        valid_until = timestamp + self._validity

        quotes = [
            self._quote_coverage(carrier, request, coverage, key)
            for coverage in request.coverage_requests
        ]

        return QuoteResponse(
            carrier_id=carrier.id,
            carrier_name=carrier.name,
            carrier_quote_id=self._ids.quote_id(carrier, CARRIER_QUOTE_COVERAGE),
            requested_quote_id=request.quote_request_id,
            timestamp=timestamp,
            valid_until=valid_until,
            quotes=quotes,
            package_discount=self._package_discount(quotes),
            underwriting_summary=UnderwritingSummary(
                overall_risk_rating="preferred",
                approval_likelihood="high",
                notes=[
                    f"{carrier.name} standard underwriting",
                    "All requested coverages reviewed",
                    "Competitive pricing applied",
                ],
            ),
            bind_eligibility="eligible_immediate",
            next_steps=[
                "Review quotes and select coverages",
                "Proceed to bind endpoint to purchase",
                f"Quotes valid until {valid_until.date().isoformat()}",
            ],
        )

    def _quote_coverage(
        self,
        carrier: CarrierConfig,
        request: QuoteRequest,
        coverage: CoverageRequest,
        key: str,
    ) -> Quote:
        coverage_type = coverage.coverage_type
        revenue = (
            request.business_info.financial_info.annual_revenue
            if request.business_info is not None
            else None
        )
        base = calculate_base_premium(
            coverage_type, coverage.primary_limit, revenue, key
        )
        annual = apply_multiplier(base, carrier.pricing_multiplier)
        approved = self._ids.rng.random() < carrier.approval_rate

        return Quote(
            quote_id=self._ids.quote_id(carrier, coverage_type, seed=key),
            coverage_type=coverage_type,
            status=QuoteStatus.QUOTED if approved else QuoteStatus.DECLINED,
            coverage_limits=dict(coverage.requested_limits),
            premium=premium_breakdown(annual),
            deductible=coverage.deductible,
            effective_date=coverage.effective_date,
            expiration_date=add_years(coverage.effective_date, 1),
            policy_form=reference_data.policy_form(coverage_type),
            highlights=reference_data.highlights(coverage_type),
            exclusions=reference_data.exclusions(coverage_type),
            optional_coverages=reference_data.optional_coverages(coverage_type),
            underwriting_notes=reference_data.underwriting_notes(
                request.business_info, request.personal_info
            ),
            decline_reason=(
                None
                if approved
                else reference_data.decline_reason(coverage_type, carrier.name)
            ),
            decline_code=None if approved else DECLINE_CODE,
        )

    @staticmethod
    def _package_discount(quotes: list[Quote]) -> PackageDiscount | None:
        if len(quotes) < 2:
            return None
        if any(quote.status != QuoteStatus.QUOTED for quote in quotes):
            return None
        total = sum(quote.premium.annual for quote in quotes)
        return PackageDiscount(
            discount_percentage=PACKAGE_DISCOUNT_PERCENTAGE,
            discount_amount=package_discount_amount(total),
        )

    def _store(self, key: str, response: QuoteResponse, request: QuoteRequest) -> None:
        created_at = self._clock()
        records = {
            response.carrier_quote_id: QuoteRecord(
                response=response, quote_request=request, created_at=created_at
            )
        }
        for quote in response.quotes:
            records[quote.quote_id] = QuoteRecord(
                response=response,
                quote_request=request,
                selected_quote=quote,
                created_at=created_at,
            )

        self._cache.put(key, response)
        self._index.put_many(records)
        logger.info(
            "Stored quote %s with %d coverage(s) (key %s)",
            response.carrier_quote_id,
            len(response.quotes),
            truncate_key(key),
        )
