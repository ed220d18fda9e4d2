from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger


# ----------------------------------------------------------------
# CLIENT IP IDENTIFICATION
# ----------------------------------------------------------------
def get_real_ip(request):
    """
    Client IP behind proxies: X-Forwarded-For (leftmost), then X-Real-IP,
    then the socket address.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    return get_remote_address(request)


# ----------------------------------------------------------------
# LIMITER (in-memory; only the login endpoint is limited)
# ----------------------------------------------------------------
logger.debug("Initializing in-memory rate limiter")
limiter = Limiter(key_func=get_real_ip)
