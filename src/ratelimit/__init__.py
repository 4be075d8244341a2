"""Per-client sliding-window admission control.

Components:
- SlidingWindowRateLimiter: In-process limiter owning every client window
- Admission: Outcome of a single admission check
- RateLimitConfig: Pydantic settings for window size and request budget
"""

from src.ratelimit.config import RateLimitConfig
from src.ratelimit.limiter import Admission, SlidingWindowRateLimiter

__all__ = [
    "Admission",
    "RateLimitConfig",
    "SlidingWindowRateLimiter",
]
