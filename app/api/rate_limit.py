"""
Shared rate limiter.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import settings

limiter = Limiter(key_func=get_remote_address)

# Limit string applied to every engine route
DEFAULT_LIMIT = f"{settings.rate_limit_requests}/minute"

RATE_LIMIT_RESPONSE = {
    429: {"description": "Rate limit exceeded"},
}
