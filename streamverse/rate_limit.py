"""
Shared slowapi rate limiter.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from streamverse.config import get_settings

limiter = Limiter(key_func=get_remote_address)

DEFAULT_LIMIT = f"{get_settings().rate_limit_per_minute}/minute"
