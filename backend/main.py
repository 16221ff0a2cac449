import logging
import time
from collections import deque

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
try:
    from backend.app.config import (
        API_RATE_LIMIT_MAX_REQUESTS,
        API_RATE_LIMIT_WINDOW_SECONDS,
        load_settings,
    )
    from backend.app.errors import ValidationError
    from backend.app.models import GeneratePlaylistRequest, GeneratePlaylistResponse
    from backend.app.services.aggregator import PlaylistAggregator
except ModuleNotFoundError:
    from app.config import (
        API_RATE_LIMIT_MAX_REQUESTS,
        API_RATE_LIMIT_WINDOW_SECONDS,
        load_settings,
    )
    from app.errors import ValidationError
    from app.models import GeneratePlaylistRequest, GeneratePlaylistResponse
    from app.services.aggregator import PlaylistAggregator


# Configure logging in the worker process too (uvicorn backend.main:app)
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------
# Rate limiting (protects the YouTube quota)
# ---------------------------

API_RATE_LIMIT_BUCKETS: dict[str, deque] = {}


def get_client_ip(request: Request) -> str:
    forwarded = (request.headers.get("x-forwarded-for") or "").strip()
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def enforce_api_rate_limit(request: Request, scope: str = "generate") -> None:
    now_ts = time.time()
    key = f"{scope}:{get_client_ip(request)}"
    bucket = API_RATE_LIMIT_BUCKETS.get(key)
    if bucket is None:
        bucket = deque()
        API_RATE_LIMIT_BUCKETS[key] = bucket

    cutoff = now_ts - API_RATE_LIMIT_WINDOW_SECONDS
    while bucket and bucket[0] < cutoff:
        bucket.popleft()

    if len(bucket) >= API_RATE_LIMIT_MAX_REQUESTS:
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please wait a minute and try again.",
        )

    bucket.append(now_ts)


# ---------------------------
# App setup
# ---------------------------

settings = load_settings()
aggregator = PlaylistAggregator(settings)

app = FastAPI(title="Group Playlist API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ValidationError)
async def playlist_validation_error_handler(_request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(_request: Request, exc: RequestValidationError):
    errors = exc.errors()
    location = ".".join(str(part) for part in errors[0].get("loc", ())) if errors else ""
    message = f"Invalid request body ({location})." if location else "Invalid request body."
    return JSONResponse(status_code=400, content={"message": message})


@app.exception_handler(HTTPException)
async def http_exception_handler(_request: Request, exc: HTTPException):
    content = {"message": exc.detail}
    if exc.status_code == 429:
        content["error_code"] = "rate_limited"
    return JSONResponse(status_code=exc.status_code, content=content)


@app.get("/health")
def health():
    return {"ok": True}


@app.post("/api/generate-playlist", response_model=GeneratePlaylistResponse)
def generate_playlist(payload: GeneratePlaylistRequest, request: Request):
    enforce_api_rate_limit(request)
    playlist = aggregator.generate(payload.participants)
    return {"playlist": playlist}


if __name__ == "__main__":
    logger.info("Server listening on http://localhost:%d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)
