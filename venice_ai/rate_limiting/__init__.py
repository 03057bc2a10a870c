"""
Rate limiting for Venice API clients.

This module contains:
- The FIFO concurrency and requests-per-window limiter
- Server-side rate limit metadata parsed from response headers
"""

from .limiter import RateLimiter
from .models import RateLimitConfig, RateLimitInfo, RateLimitState

__all__ = ["RateLimitConfig", "RateLimitInfo", "RateLimitState", "RateLimiter"]
