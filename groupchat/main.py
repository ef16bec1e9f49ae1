import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from groupchat.config import settings
from groupchat.core.exceptions import ChatError
from groupchat.modules.groups import routes as groups_routes
from groupchat.modules.messages import routes as messages_routes
from groupchat.modules.realtime import routes as realtime_routes
from groupchat.modules.realtime.relay import RealtimeRelay
from groupchat.modules.uploads import routes as uploads_routes
from groupchat.modules.users import routes as users_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


class RequestLogMiddleware:
    """Logs every HTTP request and adds security headers to the response."""

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        logger.info("Request received: %s %s", scope["method"], scope["path"])

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(groups_routes.router, prefix="/api")
app.include_router(messages_routes.router, prefix="/api")
app.include_router(users_routes.router, prefix="/api")
app.include_router(uploads_routes.router, prefix="/api")
app.include_router(realtime_routes.router)


@app.on_event("startup")
async def startup_event():
    app.state.relay = RealtimeRelay(send_timeout=settings.relay_send_timeout_seconds)
    logger.info("Application startup (environment=%s)", settings.environment)


@app.on_event("shutdown")
async def shutdown_event():
    relay = getattr(app.state, "relay", None)
    if relay is not None:
        await relay.close()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
async def health():
    return {"status": "UP"}


@app.get("/ready")
async def ready():
    """Readiness: the realtime relay must be up."""
    if getattr(app.state, "relay", None) is None:
        return JSONResponse(status_code=503, content={"status": "starting"})
    return {"status": "ready"}
