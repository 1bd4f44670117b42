"""Static reference tables: base prices, forms and marketing copy.

Pure lookups keyed by coverage type; every table has a default for coverage
types it does not list.
"""

from typing import Final

from beartype import beartype

from ..models.quote import BusinessInfo, OptionalCoverage, PersonalInfo

DEFAULT_BASE_PRICE: Final = 1000

BASE_PRICES: Final[dict[str, int]] = {
    # Personal
    "homeowners": 1200,
    "auto": 900,
    "renters": 250,
    "life": 500,
    "personal_umbrella": 300,
    # Commercial
    "general_liability": 1250,
    "professional_liability": 2500,
    "cyber_liability": 3000,
    "workers_compensation": 1800,
    "commercial_property": 2000,
    "business_auto": 1500,
    "umbrella": 800,
    "directors_officers": 3500,
    "employment_practices": 2200,
    "crime": 1000,
    "media": 1800,
    "fiduciary": 2500,
    "employee_benefits": 1200,
}

POLICY_FORMS: Final[dict[str, str]] = {
    "general_liability": "ISO CGL",
    "professional_liability": "Claims-Made",
    "cyber_liability": "Cyber Pro Form",
    "homeowners": "HO-3",
    "auto": "Personal Auto Policy",
    "renters": "HO-4",
    "life": "Term Life",
}

_HIGHLIGHTS: Final[dict[str, tuple[str, ...]]] = {
    "general_liability": (
        "Coverage for bodily injury and property damage",
        "Legal defense costs covered in addition to limits",
        "Medical payments included",
        "Products and completed operations coverage",
        "Contractual liability coverage",
    ),
    "cyber_liability": (
        "Data breach notification and credit monitoring",
        "Forensic investigation costs",
        "Business interruption from cyber events",
        "Cyber extortion and ransomware coverage",
        "24/7 incident response hotline",
    ),
    "professional_liability": (
        "Covers professional errors and omissions",
        "Defense costs in addition to policy limits",
        "Prior acts coverage included",
        "Extended reporting period available",
        "Contractual liability coverage",
    ),
    "homeowners": (
        "Replacement cost dwelling coverage",
        "Personal property coverage",
        "Liability protection",
        "Additional living expenses covered",
        "24/7 claims support",
    ),
    "auto": (
        "Liability coverage",
        "Collision and comprehensive coverage",
        "Uninsured/underinsured motorist protection",
        "Roadside assistance available",
        "Rental car reimbursement",
    ),
}
_DEFAULT_HIGHLIGHTS: Final = (
    "Comprehensive coverage",
    "Competitive rates",
    "24/7 support",
    "Fast claims processing",
    "Flexible payment options",
)

_EXCLUSIONS: Final[dict[str, tuple[str, ...]]] = {
    "general_liability": (
        "Professional services (covered by E&O)",
        "Pollution liability",
        "Employee injuries (covered by Workers Comp)",
        "Auto liability (requires separate policy)",
        "Cyber incidents (requires cyber policy)",
    ),
    "cyber_liability": (
        "War and terrorism",
        "Failure to maintain required security standards",
        "Theft of intellectual property",
        "Loss of future revenue",
    ),
    "professional_liability": (
        "Bodily injury or property damage",
        "Intentional acts or fraud",
        "Violations of securities laws",
        "Patent or trademark infringement",
    ),
    "homeowners": (
        "Flood damage (requires separate policy)",
        "Earthquake damage",
        "Wear and tear",
        "Intentional damage",
        "Business activities",
    ),
}
_DEFAULT_EXCLUSIONS: Final = (
    "Intentional acts",
    "War and terrorism",
    "Nuclear hazards",
    "Certain natural disasters",
)

_OPTIONAL_COVERAGES: Final[dict[str, tuple[OptionalCoverage, ...]]] = {
    "general_liability": (
        OptionalCoverage(
            name="Hired and Non-Owned Auto Liability",
            additional_premium=125,
            description="Liability for rented, leased, or borrowed vehicles",
        ),
        OptionalCoverage(
            name="Employee Benefits Liability",
            additional_premium=300,
            description="Coverage for errors in benefits administration",
        ),
    ),
    "cyber_liability": (
        OptionalCoverage(
            name="Social Engineering Coverage",
            additional_premium=450,
            description="Coverage for funds transfer fraud",
        ),
        OptionalCoverage(
            name="Media Liability",
            additional_premium=600,
            description="Copyright infringement and defamation coverage",
        ),
    ),
}

SUPPORTED_COVERAGES: Final[dict[str, tuple[str, ...]]] = {
    "personal": ("homeowners", "auto", "renters", "life", "umbrella"),
    "commercial": (
        "general_liability",
        "professional_liability",
        "cyber_liability",
        "workers_comp",
        "commercial_property",
        "business_auto",
        "umbrella",
        "directors_officers",
        "employment_practices",
        "crime",
        "media",
        "fiduciary",
        "employee_benefits",
    ),
}


@beartype
def base_price(coverage_type: str) -> int:
    return BASE_PRICES.get(coverage_type, DEFAULT_BASE_PRICE)


@beartype
def policy_form(coverage_type: str) -> str:
    return POLICY_FORMS.get(coverage_type, "Standard Form")


@beartype
def highlights(coverage_type: str) -> list[str]:
    return list(_HIGHLIGHTS.get(coverage_type, _DEFAULT_HIGHLIGHTS))


@beartype
def exclusions(coverage_type: str) -> list[str]:
    return list(_EXCLUSIONS.get(coverage_type, _DEFAULT_EXCLUSIONS))


@beartype
def optional_coverages(coverage_type: str) -> list[OptionalCoverage]:
    return list(_OPTIONAL_COVERAGES.get(coverage_type, ()))


@beartype
def underwriting_notes(
    business_info: BusinessInfo | None, personal_info: PersonalInfo | None
) -> list[str]:
    """Carrier commentary derived from the insured's profile."""
    notes: list[str] = []

    if business_info is not None:
        if business_info.financial_info.annual_revenue < 1_000_000:
            notes.append("Small business with manageable risk profile")
        if "tech" in business_info.industry.lower():
            notes.append("Technology sector - aligned with carrier specialization")
        notes.append("No prior claims history reported")

    if personal_info is not None:
        if personal_info.credit_score_tier == "excellent":
            notes.append("Excellent credit score provides 15% discount")
        elif personal_info.credit_score_tier == "good":
            notes.append("Good credit score provides 10% discount")

    notes.append("Competitive market conditions")
    notes.append("Standard underwriting approval")
    return notes


@beartype
def decline_reason(coverage_type: str, carrier_name: str) -> str:
    return (
        f"{carrier_name} has determined that this {coverage_type} coverage request "
        "is outside our current risk appetite. Please consider alternative carriers."
    )
