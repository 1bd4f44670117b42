"""Unit tests for request, quote and policy models."""

from collections.abc import Callable
from datetime import date
from typing import Any

import pytest
from pydantic import ValidationError

from carrier_simulator.models.base import Address
from carrier_simulator.models.carrier import CARRIERS, get_carrier
from carrier_simulator.models.policy import (
    BindRequest,
    CancelRequest,
    PolicyRecord,
)
from carrier_simulator.models.quote import CoverageRequest, Quote, QuoteRequest
from carrier_simulator.services.policy_service import PolicyService
from carrier_simulator.services.quote_service import QuoteService

from conftest import START_TIME


def _quote_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "quote_id": "RIC-Q-2025-123456-GL",
        "coverage_type": "general_liability",
        "status": "quoted",
        "coverage_limits": {"per_occurrence": 1000000},
        "premium": {
            "annual": 1200,
            "monthly": 100,
            "quarterly": 300,
            "payment_in_full_discount": 60,
        },
        "effective_date": "2025-02-01",
        "expiration_date": "2026-02-01",
        "policy_form": "CG 00 01",
        "highlights": [],
        "exclusions": [],
        "optional_coverages": [],
        "underwriting_notes": [],
    }
    data.update(overrides)
    return data


class TestQuoteRequest:
    """Test insured validation on quote requests."""

    def test_commercial_requires_business_info(
        self, commercial_request_data: dict[str, Any]
    ) -> None:
        del commercial_request_data["business_info"]

        with pytest.raises(ValidationError) as exc_info:
            QuoteRequest.model_validate(commercial_request_data)

        assert "business_info is required" in str(exc_info.value)

    def test_rejects_both_insureds(
        self,
        commercial_request_data: dict[str, Any],
        personal_request_data: dict[str, Any],
    ) -> None:
        commercial_request_data["personal_info"] = personal_request_data[
            "personal_info"
        ]

        with pytest.raises(ValidationError):
            QuoteRequest.model_validate(commercial_request_data)

    def test_requires_a_coverage(self, commercial_request_data: dict[str, Any]) -> None:
        commercial_request_data["coverage_requests"] = []

        with pytest.raises(ValidationError):
            QuoteRequest.model_validate(commercial_request_data)

    def test_rejects_unknown_fields(
        self, commercial_request_data: dict[str, Any]
    ) -> None:
        commercial_request_data["surprise"] = True

        with pytest.raises(ValidationError):
            QuoteRequest.model_validate(commercial_request_data)

    def test_insured_name_and_address(
        self, commercial_request: QuoteRequest, personal_request: QuoteRequest
    ) -> None:
        assert commercial_request.insured_name == "Acme Technology LLC"
        assert personal_request.insured_name == "Sam Rivera"
        assert personal_request.insured_address is not None
        assert personal_request.insured_address.city == "Austin"

    def test_requests_are_immutable(self, commercial_request: QuoteRequest) -> None:
        with pytest.raises(ValidationError):
            commercial_request.quote_request_id = "changed"  # type: ignore[misc]


class TestCoverageRequest:
    """Test derived coverage fields."""

    def test_single_deductible(self) -> None:
        coverage = CoverageRequest(
            coverage_type="general_liability",
            requested_limits={"per_occurrence": 1000000, "aggregate": 2000000},
            requested_deductible=500,
            effective_date=date(2025, 2, 1),
        )

        assert coverage.deductible == 500
        assert coverage.primary_limit == 1000000

    def test_per_peril_deductibles_win(self) -> None:
        coverage = CoverageRequest(
            coverage_type="auto",
            requested_deductible=1000,
            requested_deductibles={"collision": 500},
            effective_date=date(2025, 2, 1),
        )

        assert coverage.deductible == {"collision": 500}
        assert coverage.primary_limit is None


class TestQuote:
    """Test the decline field invariant."""

    def test_quoted_without_decline_reason(self) -> None:
        assert Quote.model_validate(_quote_data()).decline_reason is None

    def test_declined_requires_reason(self) -> None:
        with pytest.raises(ValidationError):
            Quote.model_validate(_quote_data(status="declined"))

    def test_quoted_rejects_reason(self) -> None:
        with pytest.raises(ValidationError):
            Quote.model_validate(_quote_data(decline_reason="Outside appetite"))


class TestPolicyRecord:
    """A retained cancellation implies the pending status."""

    def test_cancellation_requires_pending_status(
        self,
        quote_service: QuoteService,
        policy_service: PolicyService,
        commercial_request: QuoteRequest,
        make_bind_request: Callable[..., BindRequest],
    ) -> None:
        response = quote_service.generate_quote(
            "reliable_insurance", commercial_request
        ).unwrap()
        bind_request = make_bind_request(response.carrier_quote_id)
        bound = policy_service.bind_policy("reliable_insurance", bind_request).unwrap()
        cancellation = policy_service.cancel_policy(
            "reliable_insurance",
            bound.policy.policy_id,
            CancelRequest.model_validate(
                {
                    "cancellation_type": "insured_request",
                    "effective_date": "2025-03-01",
                    "reason": "Sold business",
                    "signature": bind_request.signature.model_dump(),
                }
            ),
        ).unwrap()

        with pytest.raises(ValidationError):
            PolicyRecord(
                policy=bound.policy,
                bind_request=bind_request,
                quote_id=response.carrier_quote_id,
                carrier_id="reliable_insurance",
                created_at=START_TIME,
                cancellation=cancellation,
            )


class TestAddressAndCarriers:
    """Test small model helpers."""

    def test_address_one_line(self) -> None:
        address = Address(street="1 Main St", city="Austin", state="TX", zip="78701")
        assert address.one_line() == "1 Main St, Austin, TX 78701"

    def test_address_without_street(self) -> None:
        address = Address(city="Austin", state="TX", zip="78701")
        assert address.one_line() == ", Austin, TX 78701"

    def test_carrier_registry(self) -> None:
        assert set(CARRIERS) == {
            "reliable_insurance",
            "techshield_underwriters",
            "premier_underwriters",
            "fastbind_insurance",
        }
        assert get_carrier("acme_mutual") is None

    @pytest.mark.parametrize(
        ("carrier_id", "domain"),
        [
            ("reliable_insurance", "reliableinsurance.com"),
            ("techshield_underwriters", "techshieldunderwriters.com"),
            ("fastbind_insurance", "fastbindinsurance.com"),
        ],
    )
    def test_contact_domain(self, carrier_id: str, domain: str) -> None:
        carrier = get_carrier(carrier_id)
        assert carrier is not None
        assert carrier.contact_domain == domain
