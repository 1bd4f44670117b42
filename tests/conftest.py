"""Test configuration and fixtures.

Services are built with a pinned approval roll and a mutable clock so quote
outcomes and expiry checks are reproducible.
"""

import copy
import random
from collections.abc import Callable, Generator
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

from carrier_simulator.api.dependencies import Services, build_services, get_services
from carrier_simulator.core.config import Settings, clear_settings_cache, get_settings
from carrier_simulator.main import create_app
from carrier_simulator.models.policy import BindRequest
from carrier_simulator.models.quote import QuoteRequest
from carrier_simulator.services.id_generator import IdGenerator
from carrier_simulator.services.policy_service import PolicyService
from carrier_simulator.services.quote_service import QuoteService

START_TIME = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


class FixedRandom(random.Random):
    """Random source whose ``random()`` always returns the same value.

    Integer draws (``randrange``) still come from the seeded generator, so
    only the approval roll is pinned.
    """

    def __init__(self, value: float, seed: int = 1234) -> None:
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value

    def getrandbits(self, k: int) -> int:
        # Defined here so integer draws keep using the seeded bit stream.
        return super().getrandbits(k)


class MutableClock:
    """Clock that only moves when a test advances it."""

    def __init__(self, now: datetime = START_TIME) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


COMMERCIAL_REQUEST: dict[str, Any] = {
    "quote_request_id": "REQ-2025-0001",
    "insurance_type": "commercial",
    "business_info": {
        "legal_name": "Acme Technology LLC",
        "dba_name": "Acme Tech",
        "legal_structure": "llc",
        "industry": "Technology Consulting",
        "industry_code": "541512",
        "description": "Software consulting",
        "year_started": 2018,
        "address": {
            "street": "100 Market St",
            "suite": "400",
            "city": "San Francisco",
            "state": "CA",
            "zip": "94105",
        },
        "financial_info": {
            "annual_revenue": 500000,
            "annual_payroll": 250000,
            "full_time_employees": 12,
            "part_time_employees": 2,
        },
        "contact_info": {
            "first_name": "Ada",
            "last_name": "Park",
            "email": "ada@acme.example",
            "phone": "415-555-0100",
            "title": "CEO",
        },
    },
    "coverage_requests": [
        {
            "coverage_type": "general_liability",
            "requested_limits": {
                "per_occurrence": 1000000,
                "general_aggregate": 2000000,
            },
            "requested_deductible": 500,
            "effective_date": "2025-02-01",
        }
    ],
    "additional_data": {"broker": "Northwind", "notes": ["renewal prospect"]},
}

PERSONAL_REQUEST: dict[str, Any] = {
    "quote_request_id": "REQ-2025-0002",
    "insurance_type": "personal",
    "personal_info": {
        "first_name": "Sam",
        "last_name": "Rivera",
        "date_of_birth": "1985-04-12",
        "occupation": "Engineer",
        "credit_score_tier": "excellent",
        "address": {
            "street": "12 Elm St",
            "city": "Austin",
            "state": "TX",
            "zip": "78701",
        },
        "email": "sam@example.com",
    },
    "coverage_requests": [
        {
            "coverage_type": "homeowners",
            "requested_limits": {"dwelling": 400000, "personal_property": 200000},
            "requested_deductible": 1000,
            "effective_date": "2025-03-01",
            "property_info": {
                "dwelling_value": 400000,
                "year_built": 1998,
                "construction_type": "frame",
            },
        },
        {
            "coverage_type": "auto",
            "requested_limits": {"bodily_injury": 100000},
            "requested_deductibles": {"collision": 500, "comprehensive": 250},
            "effective_date": "2025-03-01",
            "vehicle_info": {"year": 2021, "make": "Toyota", "model": "Camry"},
        },
    ],
}

BIND_REQUEST: dict[str, Any] = {
    "quote_id": "",
    "effective_date": "2025-02-01",
    "payment_plan": "monthly",
    "payment_info": {
        "method": "credit_card",
        "token": "tok_visa_4242",
        "billing_address": {
            "street": "100 Market St",
            "city": "San Francisco",
            "state": "CA",
            "zip": "94105",
        },
    },
    "insured_info": {
        "primary_contact": {
            "first_name": "Ada",
            "last_name": "Park",
            "email": "ada@acme.example",
            "phone": "415-555-0100",
        },
        "additional_insureds": [
            {
                "name": "Landlord Holdings LP",
                "address": {"city": "San Francisco", "state": "CA", "zip": "94107"},
                "relationship": "landlord",
            }
        ],
    },
    "signature": {
        "full_name": "Ada Park",
        "signed_at": "2025-01-15T12:00:00Z",
        "ip_address": "203.0.113.7",
    },
}


@pytest.fixture
def commercial_request_data() -> dict[str, Any]:
    """Commercial general liability request body."""
    return copy.deepcopy(COMMERCIAL_REQUEST)


@pytest.fixture
def personal_request_data() -> dict[str, Any]:
    """Personal homeowners + auto request body."""
    return copy.deepcopy(PERSONAL_REQUEST)


@pytest.fixture
def make_bind_data() -> Callable[..., dict[str, Any]]:
    """Build a bind request body for a quote id."""

    def _make(quote_id: str, **overrides: Any) -> dict[str, Any]:
        data = copy.deepcopy(BIND_REQUEST)
        data["quote_id"] = quote_id
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def commercial_request(commercial_request_data: dict[str, Any]) -> QuoteRequest:
    return QuoteRequest.model_validate(commercial_request_data)


@pytest.fixture
def personal_request(personal_request_data: dict[str, Any]) -> QuoteRequest:
    return QuoteRequest.model_validate(personal_request_data)


@pytest.fixture
def make_bind_request(
    make_bind_data: Callable[..., dict[str, Any]],
) -> Callable[..., BindRequest]:
    def _make(quote_id: str, **overrides: Any) -> BindRequest:
        return BindRequest.model_validate(make_bind_data(quote_id, **overrides))

    return _make


@pytest.fixture
def settings() -> Generator[Settings, None, None]:
    """Default settings, isolated from any cached instance."""
    clear_settings_cache()
    yield Settings()
    clear_settings_cache()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock()


@pytest.fixture
def approval_roll() -> float:
    """Approval draw below every carrier's approval rate."""
    return 0.0


@pytest.fixture
def id_generator(clock: MutableClock, approval_roll: float) -> IdGenerator:
    return IdGenerator(rng=FixedRandom(approval_roll), clock=clock)


@pytest.fixture
def services(
    settings: Settings, id_generator: IdGenerator, clock: MutableClock
) -> Services:
    """Quote and policy services sharing one set of stores."""
    return build_services(settings, id_generator=id_generator, clock=clock)


@pytest.fixture
def quote_service(services: Services) -> QuoteService:
    return services.quote_service


@pytest.fixture
def policy_service(services: Services) -> PolicyService:
    return services.policy_service


@pytest.fixture
def client(
    settings: Settings, services: Services
) -> Generator[TestClient, None, None]:
    """Test client sending the configured API key."""
    app = create_app()
    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app, headers={"X-API-Key": settings.api_key}) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(
    settings: Settings, services: Services
) -> Generator[TestClient, None, None]:
    """Test client without credentials."""
    app = create_app()
    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_settings] = lambda: settings
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
