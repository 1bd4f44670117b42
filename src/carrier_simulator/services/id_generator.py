# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Deterministic and random identifier generation.

``seeded_value`` is a pure function of its inputs, stable across process
restarts, so quote ids and premium noise derived from a cache key can be
asserted in fixtures. Unseeded values come from an injectable
``random.Random`` and must never be compared across calls.
"""

import random
import threading
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Final

from beartype import beartype

from ..models.carrier import CarrierConfig

_INT32_MASK: Final = 0xFFFFFFFF
_INT32_SIGN: Final = 0x80000000
ID_NUMBER_BOUND: Final = 999999

COVERAGE_SUFFIXES: Final[dict[str, str]] = {
    # Personal
    "homeowners": "HO",
    "auto": "AU",
    "renters": "RN",
    "life": "LF",
    "personal_umbrella": "UM",
    # Commercial
    "general_liability": "GL",
    "professional_liability": "PL",
    "cyber_liability": "CY",
    "workers_compensation": "WC",
    "commercial_property": "CP",
    "business_auto": "BA",
    "umbrella": "UM",
    "directors_officers": "DO",
    "employment_practices": "EP",
    "crime": "CR",
    "media": "MD",
    "fiduciary": "FD",
    "employee_benefits": "EB",
}
UNKNOWN_COVERAGE_SUFFIX: Final = "XX"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@beartype
def seeded_value(seed: str, modulus: int) -> int:
    """Reproducible integer in ``[0, modulus)`` for a seed string.

    Accumulates ``h = h * 31 + ord(char)`` wrapped to a signed 32-bit integer
    and reduces ``abs(h)`` by ``modulus``.
    """
    if modulus <= 0:
        raise ValueError("modulus must be positive")

    accumulator = 0
    for char in seed:
        accumulator = ((accumulator << 5) - accumulator + ord(char)) & _INT32_MASK
    if accumulator & _INT32_SIGN:
        accumulator -= 1 << 32
    return abs(accumulator) % modulus


@beartype
def coverage_suffix(coverage_type: str) -> str:
    """Two-letter code for a coverage type, ``XX`` when unrecognized."""
    return COVERAGE_SUFFIXES.get(coverage_type, UNKNOWN_COVERAGE_SUFFIX)


class IdGenerator:
    """Mints quote, policy and reference identifiers for carriers."""

    def __init__(
        self,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize with an optional pinned random source and clock."""
        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = threading.Lock()
        self._last_stamp = 0

    @property
    def rng(self) -> random.Random:
        """Random source used for every unseeded draw."""
        return self._rng

    @beartype
    def random_number(self) -> str:
        """Unreproducible six-digit number."""
        return f"{self._rng.randrange(ID_NUMBER_BOUND):06d}"

    @beartype
    def quote_id(
        self, carrier: CarrierConfig, coverage_type: str, seed: str | None = None
    ) -> str:
        """``{prefix}-Q-{year}-{NNNNNN}-{suffix}``, reproducible when seeded."""
        if seed:
            number = f"{seeded_value(seed, ID_NUMBER_BOUND):06d}"
        else:
            number = self.random_number()
        year = self._clock().year
        return f"{carrier.prefix}-Q-{year}-{number}-{coverage_suffix(coverage_type)}"

    @beartype
    def policy_id(self, carrier: CarrierConfig) -> str:
        """``{prefix}-P-{year}-{NNNNNN}``."""
        return f"{carrier.prefix}-P-{self._clock().year}-{self.random_number()}"

    @beartype
    def policy_number(self, carrier: CarrierConfig, coverage_type: str) -> str:
        """``{prefix}-{year}-{suffix}-{NNNNNN}``."""
        year = self._clock().year
        suffix = coverage_suffix(coverage_type)
        return f"{carrier.prefix}-{year}-{suffix}-{self.random_number()}"

    @beartype
    def stamp(self) -> int:
        """Epoch milliseconds, strictly increasing for this generator."""
        now_ms = int(self._clock().timestamp() * 1000)
        with self._lock:
            self._last_stamp = max(now_ms, self._last_stamp + 1)
            return self._last_stamp

    @beartype
    def reference_id(self, carrier: CarrierConfig, tag: str) -> str:
        """``{prefix}-{tag}-{millis}`` for binds, renewals and documents."""
        return f"{carrier.prefix}-{tag}-{self.stamp()}"

    @beartype
    def card_last_four(self) -> str:
        """Masked card digits for payment confirmations."""
        return f"{self._rng.randrange(10000):04d}"
