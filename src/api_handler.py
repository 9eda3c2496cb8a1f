"""Web API Handler - Location verification endpoints.

This module provides the HTTP handlers behind the verify-location and
verify-zip Cloud Functions. Part of the imperative shell - handles HTTP I/O.
"""

import json
import logging
from typing import Any

from flask import Request, Response

from src.core.access import get_client_ip
from src.core.rate_limit import RateLimitResult, rate_limit_headers
from src.orchestrator import LocationVerifier
from src.shell.rate_limiter import RequestRateLimiter

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}


def _cors_headers(origin: str | None, allowed_origins: tuple[str, ...]) -> dict[str, str]:
    """Generate CORS headers for the response."""
    headers = {
        "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": "3600",
    }
    if origin and origin in allowed_origins:
        headers["Access-Control-Allow-Origin"] = origin
    elif allowed_origins:
        headers["Access-Control-Allow-Origin"] = allowed_origins[0]
    return headers


def json_response(
    data: dict[str, Any],
    status: int = 200,
    origin: str | None = None,
    allowed_origins: tuple[str, ...] = (),
    extra_headers: dict[str, str] | None = None,
) -> Response:
    """Create a JSON response with CORS and security headers."""
    response = Response(
        json.dumps(data, default=str),
        status=status,
        mimetype="application/json",
    )
    headers = {
        **SECURITY_HEADERS,
        **_cors_headers(origin, allowed_origins),
        **(extra_headers or {}),
    }
    for key, value in headers.items():
        response.headers[key] = value
    return response


def _preflight(origin: str | None, allowed_origins: tuple[str, ...]) -> Response:
    response = Response("", status=204)
    for key, value in _cors_headers(origin, allowed_origins).items():
        response.headers[key] = value
    return response


def _check_rate_limit(
    request: Request,
    rate_limiter: RequestRateLimiter | None,
) -> RateLimitResult | None:
    if rate_limiter is None:
        return None
    key = get_client_ip(request.headers, request.remote_addr) or "unknown"
    return rate_limiter.check(key)


def _rate_limited(
    result: RateLimitResult,
    origin: str | None,
    allowed_origins: tuple[str, ...],
) -> Response:
    return json_response(
        {"error": "Too many requests"},
        status=429,
        origin=origin,
        allowed_origins=allowed_origins,
        extra_headers=rate_limit_headers(result),
    )


def verify_location(
    request: Request,
    verifier: LocationVerifier,
    rate_limiter: RequestRateLimiter | None = None,
) -> Response:
    """API endpoint: Check the caller's IP location against the service area.

    Returns:
        JSON {allowed, reason?, location?}. Always 200 unless rate limited;
        lookup failures grant access.
    """
    origin = request.headers.get("Origin")
    allowed_origins = verifier.config.allowed_origins

    if request.method == "OPTIONS":
        return _preflight(origin, allowed_origins)

    limit = _check_rate_limit(request, rate_limiter)
    if limit is not None and not limit.allowed:
        return _rate_limited(limit, origin, allowed_origins)

    decision = verifier.verify_request(request.headers, request.remote_addr)

    return json_response(
        decision.to_dict(),
        origin=origin,
        allowed_origins=allowed_origins,
        extra_headers=rate_limit_headers(limit) if limit else None,
    )


def verify_zip(
    request: Request,
    verifier: LocationVerifier,
    rate_limiter: RequestRateLimiter | None = None,
) -> Response:
    """API endpoint: Check a zip code against the service radius.

    Body:
        {"zipCode": "67401"}

    Returns:
        JSON {allowed, distance?, error?}; 400 if zipCode is missing
    """
    origin = request.headers.get("Origin")
    allowed_origins = verifier.config.allowed_origins

    if request.method == "OPTIONS":
        return _preflight(origin, allowed_origins)

    limit = _check_rate_limit(request, rate_limiter)
    if limit is not None and not limit.allowed:
        return _rate_limited(limit, origin, allowed_origins)

    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        body = {}
    zip_code = body.get("zipCode")

    if not zip_code or not isinstance(zip_code, str):
        return json_response(
            {"error": "Zip code is required"},
            status=400,
            origin=origin,
            allowed_origins=allowed_origins,
        )

    try:
        result = verifier.verify_zip(zip_code.strip())
    except Exception:
        logger.exception("Zip code verification failed")
        return json_response(
            {"allowed": False, "error": "Unable to verify location. Please try again."},
            status=500,
            origin=origin,
            allowed_origins=allowed_origins,
        )

    return json_response(
        result.to_dict(),
        origin=origin,
        allowed_origins=allowed_origins,
    )
