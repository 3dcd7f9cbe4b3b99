"""
Global slowapi rate limiter.

Imported by social_graph/router.py for per-endpoint limits.  Mounted onto
app.state in main.py so slowapi middleware can find it.

Storage is Settings.rate_limit_storage: RATE_LIMIT_STORAGE_URI when set, else
``memory://`` in development and REDIS_URL in every other environment.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address

from parasocial.config import get_settings

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=_settings.rate_limit_storage,
    enabled=_settings.rate_limit_enabled,
)
