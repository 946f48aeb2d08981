from slowapi import Limiter
from slowapi.util import get_remote_address

from interntrack.core.config import settings

# Applied to every route through SlowAPIMiddleware
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT_DEFAULT])
