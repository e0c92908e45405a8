"""FastAPI REST API for the RFID inventory ledger."""

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

# Load environment variables from .env file (find it relative to this file)
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)

from .config import Settings, settings as default_settings
from .exceptions import InvalidRequestError, LedgerError, PayloadTooLargeError
from .ledger import InventoryLedger, Mode, ScanRequest, build_demo_ledger
from .utils import normalize_tag, parse_flexible_date, utc_now_iso

# Configure logging
logging.basicConfig(level=default_settings.effective_log_level)
logger = logging.getLogger(__name__)


# Pydantic models for API
class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdjustRequest(CamelModel):
    item_id: str = Field(..., description="Catalog item id, e.g. ITEM-002")
    location_id: str = Field(..., description="Location id, e.g. LOC-R1")
    qty: int = Field(1, ge=1, description="Quantity to move")
    actor: Optional[str] = Field(None, description="Who performed the movement")
    reason: Optional[str] = None
    work_order: Optional[str] = None
    expires_at: Optional[str] = Field(None, description="Lot expiry date (ISO or natural language)")


class TagBody(CamelModel):
    card_hex: str = Field(..., min_length=1, description="Tag read from the RFID card")

    @field_validator("card_hex")
    @classmethod
    def _non_blank_tag(cls, value: str) -> str:
        if not normalize_tag(value):
            raise ValueError("cardHex must not be blank")
        return value


class ScanBody(TagBody):
    mode: Mode = Field(Mode.OUT, description="IN or OUT")
    qty: int = Field(1, ge=1)
    actor: str = "rfid"
    location_id: Optional[str] = None
    reason: Optional[str] = None
    work_order: Optional[str] = None

    @field_validator("mode", mode="before")
    @classmethod
    def _upper_mode(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("location_id")
    @classmethod
    def _blank_location(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class MapBody(TagBody):
    item_id: str
    location_id: str


class MoveBody(TagBody):
    location_id: str


def create_ledger(config: Settings) -> InventoryLedger:
    """Build the process-wide ledger from settings."""
    if config.seed_demo_data:
        return build_demo_ledger(
            default_location_id=config.default_location_id,
            disposal_location_id=config.disposal_location_id,
            quarantine_capacity=config.quarantine_capacity,
            extra_badges=config.badge_tag_list,
        )
    return InventoryLedger(
        badges=config.badge_tag_list,
        default_location_id=config.default_location_id,
        disposal_location_id=config.disposal_location_id,
        quarantine_capacity=config.quarantine_capacity,
    )


def get_ledger(request: Request) -> InventoryLedger:
    """Dependency returning the ledger owned by the running app."""
    return request.app.state.ledger


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


LedgerDep = Annotated[InventoryLedger, Depends(get_ledger)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def _error(status_code: int, code: str, message: Optional[str] = None, **extra) -> JSONResponse:
    content = {"ok": False, "error": code}
    if message:
        content["message"] = message
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def _parse_expiry(value: Optional[str]):
    if not value:
        return None
    parsed = parse_flexible_date(value)
    if parsed is None:
        raise InvalidRequestError(f"Could not parse expiresAt: {value!r}", expiresAt=value)
    return parsed


# ===== Routes =====


async def list_items(ledger: LedgerDep):
    """Catalog with derived totals and risk status."""
    return [item.to_wire() for item in ledger.items()]


async def list_locations(ledger: LedgerDep):
    return [location.to_wire() for location in ledger.list_locations()]


async def list_stocks(
    ledger: LedgerDep,
    item_id: Optional[str] = Query(None, alias="itemId", description="Only rows for this item"),
):
    return [row.to_wire() for row in ledger.stock_rows(item_id)]


async def list_logs(
    ledger: LedgerDep,
    item_id: Optional[str] = Query(None, alias="itemId", description="Only entries for this item"),
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of entries"),
):
    """Transaction log, most recent first."""
    return [entry.to_wire() for entry in ledger.logs(item_id=item_id, limit=limit)]


async def get_config(config: SettingsDep, mode: str = Query("crew")):
    """UI configuration for the crew or ground view. Not ledger state."""
    is_ground = mode.lower() == "ground"
    return {
        "ok": True,
        "params": {
            "role": "manager" if is_ground else "astronaut",
            "missionId": config.mission_id,
            "defaultLocationId": config.default_location_id,
            "organization": config.organization,
            "uiMode": "ground" if is_ground else "crew",
        },
    }


async def checkout(ledger: LedgerDep, body: AdjustRequest):
    """Take stock out of a location directly, bypassing tag resolution."""
    result = ledger.checkout(
        item_id=body.item_id,
        location_id=body.location_id,
        qty=body.qty,
        actor=body.actor,
        reason=body.reason,
        work_order=body.work_order,
        expires_at=_parse_expiry(body.expires_at),
    )
    return result.to_wire()


async def checkin(ledger: LedgerDep, body: AdjustRequest):
    """Put stock into a location directly, bypassing tag resolution."""
    result = ledger.checkin(
        item_id=body.item_id,
        location_id=body.location_id,
        qty=body.qty,
        actor=body.actor,
        reason=body.reason,
        work_order=body.work_order,
        expires_at=_parse_expiry(body.expires_at),
    )
    return result.to_wire()


# ===== RFID Endpoints =====


async def rfid_scan(ledger: LedgerDep, body: ScanBody):
    """Resolve a card scan into a checkin or checkout."""
    result = ledger.scan(
        ScanRequest(
            card_hex=body.card_hex,
            mode=body.mode,
            qty=body.qty,
            actor=body.actor,
            location_id=body.location_id,
            reason=body.reason,
            work_order=body.work_order,
        )
    )
    return result.to_wire()


async def rfid_map(ledger: LedgerDep, body: MapBody):
    """Create or overwrite a tag mapping."""
    entry = ledger.set_mapping(body.card_hex, body.item_id, body.location_id)
    return {"ok": True, "cardHex": entry.card_hex, "itemId": entry.item_id, "locationId": entry.last_location_id}


async def rfid_mappings(ledger: LedgerDep):
    return [entry.to_wire() for entry in ledger.mappings()]


async def rfid_move(ledger: LedgerDep, body: MoveBody):
    """Relocate a tag in the directory without touching stock."""
    entry = ledger.force_move(body.card_hex, body.location_id)
    return {"ok": True, "cardHex": entry.card_hex, "locationId": entry.last_location_id}


async def rfid_unknown(ledger: LedgerDep):
    """Unresolved scans, most recent first."""
    return [entry.to_wire() for entry in ledger.unknown_scans()]


# Registered directly on the app (not through an APIRouter) so slowapi can
# resolve each endpoint and apply the default limits to it.
API_ROUTES = [
    ("GET", "/api/items", list_items),
    ("GET", "/api/locations", list_locations),
    ("GET", "/api/stocks", list_stocks),
    ("GET", "/api/logs", list_logs),
    ("GET", "/api/config", get_config),
    ("GET", "/config", get_config),
    ("GET", "/config.json", get_config),
    ("POST", "/api/checkout", checkout),
    ("POST", "/api/checkin", checkin),
    ("POST", "/api/rfid/scan", rfid_scan),
    ("POST", "/api/rfid/map", rfid_map),
    ("GET", "/api/rfid/mappings", rfid_mappings),
    ("POST", "/api/rfid/move", rfid_move),
    ("GET", "/api/rfid/unknown", rfid_unknown),
]


class BodySizeLimitMiddleware:
    """Answer 413 once a request body grows past ``max_bytes``.

    Counts the bytes actually received, so chunked uploads without a
    Content-Length are bounded too. The accepted body is replayed to the
    wrapped app as a single message.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length is not None and length.isdigit() and int(length) > self.max_bytes:
            await self._reject(scope, receive, send)
            return

        chunks: list[bytes] = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                # Client disconnected before sending the whole body
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        logger.warning(f"Rejected oversized body on {scope.get('method')} {scope.get('path')}")
        error = PayloadTooLargeError(self.max_bytes)
        response = _error(error.status_code, error.code, str(error))
        await response(scope, receive, send)


# ===== App factory =====


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log ledger lifecycle."""
    ledger: InventoryLedger = app.state.ledger
    logger.info(
        f"Starting tagledger API: {len(ledger.catalog)} items, "
        f"{len(ledger.locations)} locations, {len(ledger.tags)} mapped tags"
    )
    yield
    logger.info("Shutting down...")


def create_app(config: Optional[Settings] = None, ledger: Optional[InventoryLedger] = None) -> FastAPI:
    """Build the FastAPI application around an explicitly constructed ledger."""
    config = config or default_settings
    app = FastAPI(
        title="tagledger API",
        description="RFID-tag-mediated inventory ledger",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.ledger = ledger if ledger is not None else create_ledger(config)

    # Rate limiting
    app.state.limiter = Limiter(key_func=get_remote_address, default_limits=[config.rate_limit])
    app.add_middleware(SlowAPIMiddleware)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=config.max_body_bytes)

    allowed_origins = config.cors_origin_list
    if "*" in allowed_origins:
        raise ValueError("CORS_ORIGINS must list explicit origins")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def short_circuit_options(request: Request, call_next):
        """Answer every OPTIONS with 200; real preflights from allowed origins go to CORS."""
        if request.method != "OPTIONS":
            return await call_next(request)
        origin = request.headers.get("origin")
        if origin in allowed_origins and "access-control-request-method" in request.headers:
            return await call_next(request)
        return Response(status_code=200)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(f"{request.method} {request.url.path} {status_code} {elapsed_ms:.0f}ms")

    # ===== Error handling =====

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{exc.code}: {exc}")
        return _error(exc.status_code, exc.code, str(exc), **exc.details)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if any(err.get("type") == "json_invalid" for err in errors):
            return _error(400, "INVALID_JSON", "Request body is not valid JSON")
        message = "; ".join(
            f"{'.'.join(str(part) for part in err.get('loc', ())[1:]) or 'body'}: {err.get('msg')}"
            for err in errors
        )
        return _error(400, "INVALID_REQUEST", message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code in (404, 405):
            return _error(exc.status_code, "NOT_FOUND", f"{request.method} {request.url.path}")
        return _error(exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
        """Return JSON 429 with Retry-After header."""
        item = getattr(getattr(exc, "limit", None), "limit", None)
        retry_after = str(item.get_expiry()) if item is not None else "60"
        response = _error(429, "RATE_LIMITED", "Rate limit exceeded")
        response.headers["Retry-After"] = retry_after
        return response

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _error(500, "INTERNAL_ERROR")

    # ===== Routes =====

    @app.get("/health")
    async def health_check():
        return {"ok": True, "status": "healthy", "time": utc_now_iso()}

    for method, path, endpoint in API_ROUTES:
        app.add_api_route(path, endpoint, methods=[method])
    return app


def run_api():
    """Run the FastAPI server."""
    import uvicorn
    uvicorn.run(
        "tagledger.api:create_app",
        factory=True,
        host=default_settings.host,
        port=default_settings.port,
    )


if __name__ == "__main__":
    run_api()
