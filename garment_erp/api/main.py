from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import UUID, uuid4

from fastapi import APIRouter, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from jose import JWTError
from starlette.exceptions import HTTPException as StarletteHTTPException

from garment_erp.api.routes.auth import router as auth_router
from garment_erp.api.routes.customers import router as customers_router
from garment_erp.api.routes.dispatch import router as dispatch_router
from garment_erp.api.routes.inventory import router as inventory_router
from garment_erp.api.routes.invoices import router as invoices_router
from garment_erp.api.routes.masters import router as masters_router
from garment_erp.api.routes.navigation import router as navigation_router
from garment_erp.api.routes.orders import router as orders_router
from garment_erp.api.routes.people import router as people_router
from garment_erp.api.routes.procurement import router as procurement_router
from garment_erp.api.routes.production import router as production_router
from garment_erp.api.routes.quality import router as quality_router
from garment_erp.api.routes.reports import router as reports_router
from garment_erp.api.routes.roles import router as roles_router
from garment_erp.api.routes.tutorials import router as tutorials_router
from garment_erp.api.routes.users import router as users_router
from garment_erp.core.deps import is_admin
from garment_erp.core.errors import BusinessRuleError
from garment_erp.core.logging import configure_logging, request_context, user_id_var
from garment_erp.core.security import TOKEN_ACCESS, decode_token
from garment_erp.core.settings import get_app_settings
from garment_erp.db.models.security import USER_STATUS_APPROVED, User
from garment_erp.db.run_migrations import main as run_alembic
from garment_erp.db.seed import seed_all
from garment_erp.db.session import dispose_engine, get_session_maker
from garment_erp.repositories.security import SecurityRepository
from garment_erp.schemas.common import ErrorInfo, ErrorResponse, MessageResponse
from garment_erp.schemas.realtime import WsEnvelope
from garment_erp.services.production import ProductionService
from garment_erp.services.realtime import broadcast_manager

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Tables whose row changes are pushed on /ws/changes
SUBSCRIBABLE_TABLES = (
    "users",
    "customers",
    "orders",
    "batches",
    "order_batch_assignments",
    "order_cutting_assignments",
    "qc_reviews",
    "invoices",
    "dispatch_orders",
)

WS_UNAUTHORIZED = 4401
WS_FORBIDDEN = 4403
WS_BAD_REQUEST = 4400

openapi_tags = [
    {"name": "Health", "description": "Liveness check."},
    {"name": "Auth", "description": "Registration, login, tokens and the current user's profile."},
    {"name": "Users", "description": "User administration and approval."},
    {"name": "Roles", "description": "Role administration."},
    {"name": "Navigation", "description": "Sidebar items and role/user sidebar permissions."},
    {"name": "People", "description": "Departments, designations, employees and tailors."},
    {"name": "Masters", "description": "Size types, product categories, fabrics and suppliers."},
    {"name": "Customers", "description": "Customers, spreadsheet import and export."},
    {"name": "Orders", "description": "Sales orders and their production status."},
    {"name": "Production", "description": "Batches, distribution, cutting, picking and KPIs."},
    {"name": "Quality", "description": "QC queue and per-size inspection rounds."},
    {"name": "Inventory", "description": "Product master, stock adjustments, logs and barcode labels."},
    {"name": "Procurement", "description": "Purchase orders and goods receipts."},
    {"name": "Invoices", "description": "GST invoices and payments."},
    {"name": "Dispatch", "description": "Dispatch of QC-approved pieces and delivery challans."},
    {"name": "Tutorials", "description": "Help videos by section."},
    {"name": "Reports", "description": "Exportable business reports (CSV/Excel/PDF) and the dashboard summary."},
    {"name": "WebSocket", "description": "WebSocket usage, endpoints, and connection details."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with a correlation_id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    request.state.correlation_id = corr
    with request_context(corr):
        logger.info("Incoming request %s %s", request.method, request.url.path)
        response = await call_next(request)

    response.headers["X-Correlation-ID"] = corr
    return response


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        user_id=user_id_var.get(),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    response = _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


@app.exception_handler(BusinessRuleError)
async def business_rule_exception_handler(request: Request, exc: BusinessRuleError):
    """Business rule violations raised by services (400, 404 or 409)."""
    logger.info("Business rule violation: %s", exc.message)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="business_rule_error",
        message=exc.message,
        details=exc.details,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


@app.on_event("startup")
async def on_startup() -> None:
    """
    Run migrations and optional seeding on service startup.

    Alembic's env runs its own event loop, so the upgrade runs in a worker thread.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            # Keep serving; readiness is decided by the health of later requests.
            logger.exception("Migration step failed: %s", exc)

    if settings.AUTO_SEED:
        try:
            logger.info("Running database seeding...")
            await seed_all()
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await dispose_engine()


# Build API v1 router and include sub-routers
api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


# PUBLIC_INTERFACE
@api_v1.get(
    "/websocket-info",
    response_model=Dict[str, Any],
    summary="WebSocket Usage Information",
    description="Connection details for the WebSocket endpoints: authentication, topics and message format.",
    tags=["WebSocket"],
)
def websocket_info() -> Dict[str, Any]:
    """
    Describe how to connect to WebSocket endpoints in this service.

    Returns:
        JSON object with usage notes and endpoints list describing query params and message format.
    """
    return {
        "usage": (
            "Connect with a valid access token as the 'token' query parameter. "
            "Messages are JSON envelopes: { type: string, payload: object, at: ISO-8601, user_id?: string, channel?: string }. "
            "Send 'ping' as text to receive 'pong'."
        ),
        "security": {
            "token": "Access JWT; the user must be active and approved.",
            "close_codes": {
                str(WS_UNAUTHORIZED): "missing or invalid token",
                str(WS_FORBIDDEN): "user not allowed on this endpoint",
                str(WS_BAD_REQUEST): "no subscribable table requested",
            },
        },
        "endpoints": [
            {
                "path": "/ws/dashboard",
                "summary": "Production KPI snapshots, sent on connect and after every production write.",
                "query": ["token"],
                "messages": {"server_to_client": ["kpi.snapshot"]},
            },
            {
                "path": "/ws/changes",
                "summary": "Row-level INSERT/UPDATE/DELETE notifications for the requested tables (admin only).",
                "query": ["token", "tables"],
                "tables": list(SUBSCRIBABLE_TABLES),
                "messages": {"server_to_client": ["db.change"]},
            },
        ],
        "notes": "WebSocket endpoints are not represented in OpenAPI schema; refer to this endpoint for usage.",
    }


# Include all routers under /api/v1
api_v1.include_router(auth_router)
api_v1.include_router(users_router)
api_v1.include_router(roles_router)
api_v1.include_router(navigation_router)
api_v1.include_router(people_router)
api_v1.include_router(masters_router)
api_v1.include_router(customers_router)
api_v1.include_router(orders_router)
api_v1.include_router(production_router)
api_v1.include_router(quality_router)
api_v1.include_router(inventory_router)
api_v1.include_router(procurement_router)
api_v1.include_router(invoices_router)
api_v1.include_router(dispatch_router)
api_v1.include_router(tutorials_router)
api_v1.include_router(reports_router)

# Attach api_v1 to app
app.include_router(api_v1)

# Uploaded files (avatars, images, videos) are served read-only
Path(settings.STORAGE_ROOT).mkdir(parents=True, exist_ok=True)
app.mount(settings.STORAGE_PUBLIC_PATH, StaticFiles(directory=settings.STORAGE_ROOT), name="files")


async def _authenticate_ws(websocket: WebSocket) -> Optional[tuple[User, list[str]]]:
    """
    Resolve the user and role names from the 'token' query param of an accepted socket.

    Closes the socket with 4401 and returns None when the token or user is invalid.
    """
    token = websocket.query_params.get("token")
    user: Optional[User] = None
    roles: list[str] = []
    user_id: Optional[UUID] = None
    if token:
        try:
            user_id = UUID(str(decode_token(token, expected_type=TOKEN_ACCESS)["sub"]))
        except (JWTError, ValueError):
            user_id = None
        if user_id is not None:
            async with get_session_maker()() as session:
                repo = SecurityRepository(session)
                user = await repo.get_user_by_id(user_id)
                if user is not None:
                    roles = await repo.role_names_for_user(user.id)

    if user is None or not user.is_active or user.status != USER_STATUS_APPROVED:
        await websocket.close(code=WS_UNAUTHORIZED)
        return None
    return user, roles


async def _pump(websocket: WebSocket, topics: list[str], name: str) -> None:
    """Answer pings and ignore other client messages until the socket goes away."""
    try:
        while True:
            msg = await websocket.receive_text()
            if msg and msg.lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("Error on %s connection", name)
        await websocket.close()
    finally:
        for topic in topics:
            await broadcast_manager.disconnect(topic, websocket)


# PUBLIC_INTERFACE
@app.websocket("/ws/dashboard")
async def ws_dashboard(websocket: WebSocket):
    """
    WebSocket endpoint for real-time production KPI updates.

    Security:
      - Query param 'token' must be a valid access JWT of an approved user.
    Messages:
      - Server -> Client: type='kpi.snapshot' payload=KpiSnapshot
      - Client -> Server: optional 'ping' to keepalive; other messages ignored.
    """
    await websocket.accept()
    auth = await _authenticate_ws(websocket)
    if auth is None:
        return

    topic = broadcast_manager.dashboard_topic()
    await broadcast_manager.connect(topic, websocket)

    # Send initial KPI snapshot on connect
    try:
        async with get_session_maker()() as session:
            snapshot = await ProductionService(session).compute_kpis()
        env = WsEnvelope(type="kpi.snapshot", payload=snapshot.model_dump(mode="json"))
        await websocket.send_json(env.model_dump(mode="json"))
    except Exception:
        logger.exception("Failed to send initial KPI snapshot")

    await _pump(websocket, [topic], "ws_dashboard")


# PUBLIC_INTERFACE
@app.websocket("/ws/changes")
async def ws_changes(websocket: WebSocket):
    """
    WebSocket endpoint for row-level change notifications.

    Security:
      - Query param 'token' must be a valid access JWT of an approved admin.
    Query Parameters:
      - tables: comma-separated table names, e.g. 'users,orders'
    Messages:
      - Server -> Client: type='db.change' payload={table, event, record}, channel=<table>
    """
    await websocket.accept()
    auth = await _authenticate_ws(websocket)
    if auth is None:
        return
    user, roles = auth
    if not is_admin(user, roles):
        await websocket.close(code=WS_FORBIDDEN)
        return

    tables = broadcast_manager.parse_tables(websocket.query_params.get("tables"), SUBSCRIBABLE_TABLES)
    if not tables:
        await websocket.close(code=WS_BAD_REQUEST)
        return

    topics = [broadcast_manager.changes_topic(t) for t in tables]
    for topic in topics:
        await broadcast_manager.connect(topic, websocket)
    await _pump(websocket, topics, "ws_changes")
