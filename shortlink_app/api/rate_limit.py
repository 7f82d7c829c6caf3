from slowapi import Limiter

from shortlink_app.config import settings
from shortlink_app.utils.request_info import get_client_ip

# Shared by every router that needs per-client throttling
limiter = Limiter(key_func=get_client_ip, enabled=settings.rate_limit_enabled)

WRITE_LIMIT = f"{settings.rate_limit_per_minute}/minute"
