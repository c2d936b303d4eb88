import asyncio
import time
import uuid
from fastapi import FastAPI, WebSocket, WebSocketDisconnect, Request, Query, status, APIRouter
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.api.v1.routes import (
    auth as auth_router,
    users as users_router,
    events as events_router,
    invitations as invitations_router,
    rsvps as rsvps_router,
    notifications as notifications_router,
    discussions as discussions_router,
    messages as messages_router,
    health as health_router,
)
from app.cache.redis_client import cache
from app.core.config import settings
from app.core.exceptions import AppError, ErrorCode
from app.core.logging import logger
from app.core.security import decode_access_token
from app.db.session import engine, Base
from app.schemas import ErrorResponse
from app.events import publisher
from app.events.consumer import run_worker
from app.websocket.manager import manager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

app = FastAPI(title="EventCircle")

# The auth router owns the limiter its decorators are bound to
app.state.limiter = auth_router.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
    with logger.contextualize(request_id=request_id):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    response.headers["X-Request-ID"] = request_id
    return response


def _error_response(status_code: int, message: str, code: str, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=code).model_dump(),
        headers=headers,
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}: {exc.message}")
    return _error_response(exc.status_code, exc.message, exc.code.value)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message, ErrorCode.VALIDATION_ERROR.value)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    codes = {401: "UNAUTHORIZED", 403: ErrorCode.FORBIDDEN.value, 404: "NOT_FOUND"}
    return _error_response(
        exc.status_code,
        str(exc.detail),
        codes.get(exc.status_code, "HTTP_ERROR"),
        getattr(exc, "headers", None),
    )


api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router.router)
api_router.include_router(users_router.router)
api_router.include_router(events_router.router)
api_router.include_router(invitations_router.router)
api_router.include_router(rsvps_router.router)
api_router.include_router(notifications_router.router)
api_router.include_router(discussions_router.router)
api_router.include_router(messages_router.router)
api_router.include_router(health_router.router)

app.include_router(api_router)


@app.on_event("startup")
async def on_startup():
    # Alembic owns the schema in deployed environments
    if settings.ENVIRONMENT == "development":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    # relay bus notifications to the websockets held by this instance
    app.state.worker = asyncio.create_task(run_worker())


@app.on_event("shutdown")
async def on_shutdown():
    worker = getattr(app.state, "worker", None)
    if worker is not None:
        worker.cancel()
    await manager.close_all()
    await publisher.close_connection()
    await cache.close()
    await engine.dispose()


@app.websocket("/ws/notifications/{user_id}")
async def websocket_endpoint(websocket: WebSocket, user_id: str, token: str = Query(...)):
    """
    WebSocket endpoint with JWT authentication.
    Clients must provide a valid access token as a query parameter.
    Example: ws://localhost:8000/ws/notifications/{user_id}?token=your_jwt_token
    """
    try:
        payload = await decode_access_token(token)

        token_user_id = str(payload.get("sub"))
        if token_user_id != user_id:
            logger.warning(f"WebSocket connection attempt: token user_id {token_user_id} does not match path user_id {user_id}")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await manager.connect(user_id, websocket)
        logger.info(f"WebSocket connection established for user {user_id}")

        while True:
            # nothing is expected from the client; this only detects disconnects
            await websocket.receive_text()

    except ValueError as e:
        logger.warning(f"WebSocket connection rejected for user {user_id}: {str(e)}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
    except WebSocketDisconnect:
        await manager.disconnect(user_id, websocket)
        logger.info(f"WebSocket disconnected for user {user_id}")
