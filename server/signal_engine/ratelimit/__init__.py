"""
Rate limiting for outbound provider calls and inbound API requests.
"""
from signal_engine.ratelimit.limiter import RateLimiter, RateLimitRecord

__all__ = ["RateLimiter", "RateLimitRecord"]
