"""League API - FastAPI service for location checks and the coach message board.

Consolidated API endpoints deployed as a single Cloud Run service.
Business logic lives in src.core; src.orchestrator wires it to Firestore
and the geocoding services.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.core.access import REASON_ERROR, get_client_ip
from src.core.config import Config
from src.core.rate_limit import rate_limit_headers
from src.orchestrator import LocationVerifier, MessageBoard
from src.shell.config_loader import load_config
from src.shell.rate_limiter import RequestRateLimiter
from src.shell.token_store import TokenSweeper

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Evict stale zip cache entries while the service is up."""
    sweeper = TokenSweeper(
        get_location_verifier().zip_geocoder.cache,
        get_config().tokens.sweep_interval_seconds,
    )
    sweeper.start()
    yield
    sweeper.stop(timeout=5)


app = FastAPI(
    title="League API",
    description="Service area verification and coach message board",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip()
        for o in os.environ.get("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
        if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# ===== Request Models =====

class ZipVerifyRequest(BaseModel):
    zipCode: Any = None


class MessageCreate(BaseModel):
    content: str | None = None
    authorId: str | None = None
    authorName: str | None = None


class ReplyCreate(BaseModel):
    messageId: str | None = None
    content: str | None = None
    authorId: str | None = None
    authorName: str | None = None


# ===== Dependencies =====

_config: Config | None = None
_verifier: LocationVerifier | None = None
_message_board: MessageBoard | None = None
_rate_limiter: RequestRateLimiter | None = None


def get_config() -> Config:
    """Get or load configuration."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def get_location_verifier() -> LocationVerifier:
    """Get or create the location verifier."""
    global _verifier
    if _verifier is None:
        _verifier = LocationVerifier(get_config())
    return _verifier


def get_message_board() -> MessageBoard:
    """Get or create the message board."""
    global _message_board
    if _message_board is None:
        _message_board = MessageBoard(get_config())
    return _message_board


def get_rate_limiter() -> RequestRateLimiter:
    """Get or create the request rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RequestRateLimiter(get_config().rate_limit)
    return _rate_limiter


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _client_host(request: Request) -> str | None:
    return request.client.host if request.client else None


# ===== Location Endpoints =====

@app.get("/api/verify-location")
async def verify_location(
    request: Request,
    verifier: LocationVerifier = Depends(get_location_verifier),
    rate_limiter: RequestRateLimiter = Depends(get_rate_limiter),
):
    """Check the caller's IP location against the service area (fails open)."""
    limit = rate_limiter.check(get_client_ip(request.headers, _client_host(request)) or "unknown")
    if not limit.allowed:
        return JSONResponse(
            status_code=429,
            content={"error": "Too many requests"},
            headers=rate_limit_headers(limit),
        )

    try:
        decision = verifier.verify_request(request.headers, _client_host(request))
    except Exception:
        logger.exception("Location verification error")
        return {"allowed": True, "reason": REASON_ERROR}

    return JSONResponse(content=decision.to_dict(), headers=rate_limit_headers(limit))


@app.post("/api/verify-zip")
async def verify_zip(
    payload: ZipVerifyRequest,
    verifier: LocationVerifier = Depends(get_location_verifier),
):
    """Check a zip code against the service radius."""
    if not payload.zipCode or not isinstance(payload.zipCode, str):
        return _error(400, "Zip code is required")

    try:
        result = verifier.verify_zip(payload.zipCode.strip())
    except Exception:
        logger.exception("Zip code verification API error")
        return _error(500, "Unable to verify location. Please try again.", allowed=False)

    return result.to_dict()


# ===== Message Board Endpoints =====

@app.post("/api/messages")
async def create_message(
    payload: MessageCreate,
    board: MessageBoard = Depends(get_message_board),
):
    """Create a message-board post and notify mentioned coaches."""
    if not payload.content or not payload.authorId or not payload.authorName:
        return _error(400, "Missing required fields")

    try:
        result = board.post_message(payload.content, payload.authorId, payload.authorName)
    except ValueError as e:
        return _error(400, str(e))
    except Exception:
        logger.exception("Unexpected error creating message")
        return _error(500, "Failed to create message")

    return result.post


@app.post("/api/message-replies")
async def create_reply(
    payload: ReplyCreate,
    board: MessageBoard = Depends(get_message_board),
):
    """Reply to a post and notify mentioned coaches."""
    if not payload.messageId or not payload.content or not payload.authorId or not payload.authorName:
        return _error(400, "Missing required fields")

    try:
        result = board.post_reply(
            payload.messageId,
            payload.content,
            payload.authorId,
            payload.authorName,
        )
    except ValueError as e:
        return _error(400, str(e))
    except Exception:
        logger.exception("Unexpected error creating reply")
        return _error(500, "Failed to create reply")

    return result.post


@app.get("/api/mentions/unread-count")
async def unread_mention_count(
    user_id: str = Query(...),
    board: MessageBoard = Depends(get_message_board),
):
    """Count distinct posts with unread mentions of a user."""
    return {"count": board.unread_mention_count(user_id)}


@app.post("/api/mentions/{notification_id}/read")
async def mark_mention_read(
    notification_id: str,
    board: MessageBoard = Depends(get_message_board),
):
    """Acknowledge a mention notification."""
    if not board.mark_mention_read(notification_id):
        return _error(500, "Failed to mark mention as read")
    return {"success": True}


@app.get("/health")
async def health_check():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}
