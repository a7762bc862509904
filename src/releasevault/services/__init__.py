"""Services module for ReleaseVault.

Rate limiting for catalog providers and a local in-memory catalog.
"""

from .catalog import AliasTable, InMemoryCatalog
from .rate_limiter import RateLimiterRegistry, TokenBucketRateLimiter

__all__ = [
    "AliasTable",
    "InMemoryCatalog",
    "RateLimiterRegistry",
    "TokenBucketRateLimiter",
]
