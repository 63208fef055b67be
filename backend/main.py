"""WebJage API – FastAPI app exposing the page analysis pipeline."""

from datetime import datetime, timezone
import os
from pathlib import Path
import resource
import time

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from analysis_cache import AnalysisCache
from claude_service import analyze_content
from enricher import format_timestamp
from errors import AnalysisError, PayloadTooLarge, ValidationError
from orchestrator import AnalysisOrchestrator
from schemas import AnalyzeRequest

load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

APP_ENV = os.getenv("APP_ENV", "production").strip().lower()
CACHE_TTL_SECONDS = float(os.getenv("CACHE_TTL_SECONDS", "3600"))
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", str(10 * 1024 * 1024)))
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "").split(",") if o.strip()]
EXTENSION_ORIGIN_REGEX = r"^(chrome-extension|moz-extension)://.*$|^http://localhost(:\d+)?$"

ERROR_LABELS = {
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    501: "Not Implemented",
}

START_TIME = time.time()

app = FastAPI(
    title="WebJage API",
    description="AI webpage content analysis",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=EXTENSION_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_orchestrator() -> AnalysisOrchestrator:
    return AnalysisOrchestrator(
        cache=AnalysisCache(ttl_seconds=CACHE_TTL_SECONDS),
        analyzer=analyze_content,
    )


def get_orchestrator(request: Request) -> AnalysisOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        orchestrator = build_orchestrator()
        request.app.state.orchestrator = orchestrator
    return orchestrator


def is_development() -> bool:
    return APP_ENV == "development"


def require_development() -> None:
    if not is_development():
        raise HTTPException(
            status_code=403,
            detail="This endpoint is only available in development mode",
        )


@app.on_event("startup")
def startup() -> None:
    app.state.orchestrator = build_orchestrator()
    if not os.getenv("ANTHROPIC_API_KEY"):
        print("WARNING: ANTHROPIC_API_KEY not found in environment variables.")
        print("         Please create a backend/.env file with your Claude API key.")
    else:
        print("STARTUP: Claude API key configured.")


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    length = request.headers.get("content-length", "")
    if length.isdigit() and int(length) > MAX_BODY_BYTES:
        error = PayloadTooLarge()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())
    return await call_next(request)


@app.exception_handler(AnalysisError)
async def analysis_error_handler(request: Request, exc: AnalysisError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = str(errors[0].get("msg", "")) if errors else ""
    message = message.removeprefix("Value error, ") or None
    error = ValidationError(message)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    label = ERROR_LABELS.get(exc.status_code, "Error")
    message = str(exc.detail)
    if exc.status_code == 404 and message == "Not Found":
        message = "The requested endpoint does not exist"
    return JSONResponse(status_code=exc.status_code, content={"error": label, "message": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    print("ERROR:", repr(exc))
    message = str(exc) if is_development() else "Something went wrong"
    return JSONResponse(status_code=500, content={"error": "Internal Server Error", "message": message})


@app.post("/api/analyze")
async def analyze(
    body: AnalyzeRequest,
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
) -> dict:
    """
    Pipeline: fingerprint -> cache -> preprocess -> Claude -> enrich -> cache -> return.
    """
    return await orchestrator.analyze(body.model_dump(exclude_none=True))


@app.get("/api/analyze/stats")
def analysis_stats(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    """Cache hit/miss counters plus process uptime and memory."""
    cache_stats = orchestrator.cache.stats()
    lookups = cache_stats["hits"] + cache_stats["misses"]
    usage = resource.getrusage(resource.RUSAGE_SELF)

    return {
        "cache": {
            **cache_stats,
            "hitRate": cache_stats["hits"] / lookups if lookups else 0,
        },
        "server": {
            "uptime": round(time.time() - START_TIME, 3),
            "memory": {"maxRss": usage.ru_maxrss},
            "timestamp": format_timestamp(),
        },
    }


@app.get("/api/analyze/cache", dependencies=[Depends(require_development)])
def list_cache(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    """Enumerate cached keys with their expiry (development only)."""
    cache = orchestrator.cache
    keys = cache.keys()

    entries: dict[str, dict] = {}
    for key in keys:
        expires_at = cache.get_ttl(key)
        entries[key] = {
            "ttl": (
                format_timestamp(datetime.fromtimestamp(expires_at, tz=timezone.utc))
                if expires_at is not None
                else None
            ),
            "hasData": cache.has(key),
        }

    return {"totalKeys": len(keys), "keys": entries, "stats": cache.stats()}


@app.delete("/api/analyze/cache", dependencies=[Depends(require_development)])
def clear_cache(orchestrator: AnalysisOrchestrator = Depends(get_orchestrator)) -> dict:
    """Flush every cached analysis (development only)."""
    keys_deleted = orchestrator.cache.flush_all()
    print(f"CACHE FLUSH: keys_deleted={keys_deleted}")
    return {"message": "Cache cleared successfully", "keysDeleted": keys_deleted}


@app.post("/api/analyze/batch")
def analyze_batch() -> dict:
    raise HTTPException(status_code=501, detail="Batch analysis is not yet implemented")


@app.get("/health")
def health() -> dict:
    """Health check for deployment."""
    return {"status": "healthy", "timestamp": format_timestamp(), "version": app.version}
