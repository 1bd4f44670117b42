"""Content-addressable cache keys for quote requests.

Only the pricing-relevant projection of a request feeds the key, so two
requests that differ in names, emails, request ids or opaque payloads map to
the same cached quote.
"""

import hashlib
import json
from typing import Any

from beartype import beartype

from ..models.quote import BusinessInfo, CoverageRequest, PersonalInfo, QuoteRequest


class CacheKeys:
    """Centralized cache key derivation."""

    PREVIEW_LENGTH = 16

    @staticmethod
    @beartype
    def normalize(value: Any) -> Any:
        """Fold integral floats to ints so ``500000.0`` keys like ``500000``."""
        if isinstance(value, bool):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, dict):
            return {key: CacheKeys.normalize(item) for key, item in value.items()}
        if isinstance(value, list):
            return [CacheKeys.normalize(item) for item in value]
        return value

    @staticmethod
    @beartype
    def personal_projection(info: PersonalInfo | None) -> dict[str, Any] | None:
        """Rating fields of a person."""
        if info is None:
            return None
        return {
            "occupation": info.occupation,
            "credit_score_tier": info.credit_score_tier,
            "state": info.address.state,
            "zip": info.address.zip,
        }

    @staticmethod
    @beartype
    def business_projection(info: BusinessInfo | None) -> dict[str, Any] | None:
        """Rating fields of a business."""
        if info is None:
            return None
        return {
            "industry": info.industry,
            "industry_code": info.industry_code,
            "annual_revenue": info.financial_info.annual_revenue,
            "employees": info.financial_info.full_time_employees,
            "state": info.address.state,
            "zip": info.address.zip,
        }

    @staticmethod
    @beartype
    def coverage_projection(coverage: CoverageRequest) -> dict[str, Any]:
        """Rating fields of one coverage; absent details project as null."""
        property_info = coverage.property_info
        vehicle_info = coverage.vehicle_info
        cyber_info = coverage.cyber_info
        return {
            "coverage_type": coverage.coverage_type,
            "requested_limits": dict(coverage.requested_limits),
            "requested_deductible": coverage.requested_deductible,
            "requested_deductibles": (
                dict(coverage.requested_deductibles)
                if coverage.requested_deductibles is not None
                else None
            ),
            "effective_date": coverage.effective_date.isoformat(),
            "dwelling_value": property_info.dwelling_value if property_info else None,
            "year_built": property_info.year_built if property_info else None,
            "construction_type": (
                property_info.construction_type if property_info else None
            ),
            "vehicle_year": vehicle_info.year if vehicle_info else None,
            "vehicle_make": vehicle_info.make if vehicle_info else None,
            "vehicle_model": vehicle_info.model if vehicle_info else None,
            "has_cybersecurity": (
                cyber_info.has_cybersecurity_policy if cyber_info else None
            ),
            "number_of_records": cyber_info.number_of_records if cyber_info else None,
        }

    @staticmethod
    @beartype
    def quote_projection(carrier_id: str, request: QuoteRequest) -> dict[str, Any]:
        """Full projection hashed into a quote cache key."""
        return CacheKeys.normalize(
            {
                "carrier_id": carrier_id,
                "insurance_type": request.insurance_type.value,
                "personal_info": CacheKeys.personal_projection(request.personal_info),
                "business_info": CacheKeys.business_projection(request.business_info),
                "coverage_requests": [
                    CacheKeys.coverage_projection(coverage)
                    for coverage in request.coverage_requests
                ],
            }
        )

    @staticmethod
    @beartype
    def quote_key(carrier_id: str, request: QuoteRequest) -> str:
        """SHA-256 hex digest of the compact JSON projection."""
        payload = json.dumps(
            CacheKeys.quote_projection(carrier_id, request), separators=(",", ":")
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    @staticmethod
    @beartype
    def preview(key: str) -> str:
        """Truncated key as reported in cache statistics."""
        return f"{key[:CacheKeys.PREVIEW_LENGTH]}..."
