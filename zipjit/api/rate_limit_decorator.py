"""
Rate Limit Decorator

Provides a decorator that puts the global admission gate in front of a
Flask route.
"""

from functools import wraps

from flask import current_app

from zipjit.domain.errors import RateLimitExceededError


def rate_limit(f):
    """
    Decorator to apply the global admission gate to a Flask route.

    A refused request is answered with HTTP 429 and a ``Retry-After``
    header; the wrapped route does not run, so no job is created.

    Usage:
        @rate_limit
        def post(self):
            pass
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        rate_limit_service = _get_rate_limit_service()

        if rate_limit_service is None:
            return f(*args, **kwargs)

        try:
            rate_limit_service.check_submission()
        except RateLimitExceededError as e:
            current_app.logger.info(f"Rate limit exceeded: {e.technical_message}")
            headers = {"Retry-After": e.context.get("retry_after", "1")}
            return e.to_dict(), e.http_status_code, headers

        return f(*args, **kwargs)

    return decorated_function


def _get_rate_limit_service():
    """
    Get rate limit service from DI container.

    Returns:
        RateLimitService instance or None if not available
    """
    container = getattr(current_app, "container", None)
    if container is None:
        current_app.logger.warning("DI container not available for rate limiting")
        return None

    from zipjit.application.rate_limit_service import RateLimitService

    if not container.is_registered(RateLimitService):
        return None
    return container.resolve(RateLimitService)
