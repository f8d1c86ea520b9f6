"""
api/limiter.py -- The one slowapi Limiter for the whole app.

api/main.py attaches it to app.state for SlowAPIMiddleware; the users and
auth route modules decorate register and login with @limiter.limit().
Counters live in this instance's memory:// storage, so every route module
must import this object rather than build its own.

RATE_LIMIT_ENABLED=false turns every limit into a no-op (the test suite
registers and logs in far more than 10 times a minute).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri="memory://",
    enabled=_settings.rate_limit_enabled,
)

AUTH_RATE_LIMIT = _settings.login_rate_limit
