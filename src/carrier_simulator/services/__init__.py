"""Business services for quoting and the policy lifecycle."""

from .id_generator import IdGenerator
from .policy_service import PolicyService
from .quote_service import QuoteService
from .stores import PolicyStore, QuoteCache, QuoteIndex

__all__ = [
    "IdGenerator",
    "PolicyService",
    "PolicyStore",
    "QuoteCache",
    "QuoteIndex",
    "QuoteService",
]
