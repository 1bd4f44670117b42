# PolicyCore - Policy Decision Management System
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""In-memory stores for quotes and policies.

State lives for the lifetime of the process. Each store owns its lock and
stores immutable models; updates replace the stored value wholesale.
"""

import threading
from collections import defaultdict

from beartype import beartype

from ..models.policy import Certificate, Endorsement, PolicyRecord
from ..models.quote import QuoteRecord, QuoteResponse


class QuoteCache:
    """Quote responses keyed by content-addressable cache key."""

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[str, QuoteResponse] = {}
        self._lock = threading.RLock()

    @beartype
    def get(self, key: str) -> QuoteResponse | None:
        with self._lock:
            return self._entries.get(key)

    @beartype
    def put(self, key: str, response: QuoteResponse) -> None:
        with self._lock:
            self._entries[key] = response

    @beartype
    def keys(self) -> list[str]:
        """Keys in insertion order."""
        with self._lock:
            return list(self._entries)

    @beartype
    def size(self) -> int:
        with self._lock:
            return len(self._entries)

    @beartype
    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class QuoteIndex:
    """Quote records by umbrella and per-coverage quote id.

    Entries are never evicted, so quotes stay bindable after the cache is
    cleared.
    """

    def __init__(self) -> None:
        """Initialize an empty index."""
        self._records: dict[str, QuoteRecord] = {}
        self._lock = threading.RLock()

    @beartype
    def get(self, quote_id: str) -> QuoteRecord | None:
        with self._lock:
            return self._records.get(quote_id)

    @beartype
    def put_many(self, records: dict[str, QuoteRecord]) -> None:
        """Index several ids in one step."""
        with self._lock:
            self._records.update(records)

    @beartype
    def size(self) -> int:
        with self._lock:
            return len(self._records)


class PolicyStore:
    """Bound policies with their endorsements and certificates."""

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._policies: dict[str, PolicyRecord] = {}
        self._endorsements: defaultdict[str, list[Endorsement]] = defaultdict(list)
        self._certificates: defaultdict[str, list[Certificate]] = defaultdict(list)
        self._lock = threading.RLock()

    @property
    def lock(self) -> threading.RLock:
        """Lock for read-modify-write sequences spanning several calls."""
        return self._lock

    @beartype
    def get(self, policy_id: str) -> PolicyRecord | None:
        with self._lock:
            return self._policies.get(policy_id)

    @beartype
    def put(self, record: PolicyRecord) -> None:
        """Insert or replace the record for its policy id."""
        with self._lock:
            self._policies[record.policy.policy_id] = record

    @beartype
    def add_endorsement(self, endorsement: Endorsement) -> int:
        """Append an endorsement and return the policy's endorsement count."""
        with self._lock:
            endorsements = self._endorsements[endorsement.policy_id]
            endorsements.append(endorsement)
            return len(endorsements)

    @beartype
    def endorsements(self, policy_id: str) -> list[Endorsement]:
        """Endorsements in the order they were added."""
        with self._lock:
            return list(self._endorsements.get(policy_id, ()))

    @beartype
    def add_certificate(self, certificate: Certificate) -> None:
        with self._lock:
            self._certificates[certificate.policy_id].append(certificate)

    @beartype
    def certificates(self, policy_id: str) -> list[Certificate]:
        with self._lock:
            return list(self._certificates.get(policy_id, ()))

    @beartype
    def size(self) -> int:
        with self._lock:
            return len(self._policies)
