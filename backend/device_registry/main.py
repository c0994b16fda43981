import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import Settings, settings as default_settings
from .core.errors import ApiError, BadIdentifier, RequestValidationFailed
from .core.log import setup_logging
from .db.store import DeviceStore
from .api import devices
from .services.validation import describe_error

API_VERSION = "1.0.0"

http_logger = logging.getLogger("device_registry.http")
logger = logging.getLogger("device_registry")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    app = FastAPI(
        title="IoT Device Management API",
        description="Register and manage IoT device records",
        version=API_VERSION,
        docs_url="/api-docs",
    )
    app.state.store = DeviceStore(settings.DB_URI, seed_sample_devices=settings.SEED_SAMPLE_DEVICES)

    app.include_router(devices.router)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        http_logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    @app.on_event("startup")
    def on_startup():
        app.state.store.init()

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.store.close()

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationFailed)
    async def validation_failed_handler(request: Request, exc: RequestValidationFailed):
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        err = dict(exc.errors()[0])
        loc = tuple(err.get("loc") or ())
        if loc and loc[0] in ("body", "path", "query"):
            err["loc"] = loc[1:]
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": describe_error(err)})

    @app.exception_handler(BadIdentifier)
    async def bad_identifier_handler(request: Request, exc: BadIdentifier):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid device ID", "message": "Device ID must be a positive integer"},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and known paths with the wrong method are both route misses
        if exc.status_code in (404, 405):
            http_logger.warning(f"No route for {request.method} {request.url.path}")
            return JSONResponse(
                status_code=404,
                content={"error": "Not Found", "message": f"Route {request.method} {request.url.path} not found"},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": "Something went wrong on the server"},
        )

    @app.get("/")
    def root():
        return {
            "message": "IoT Device Management API",
            "version": API_VERSION,
            "documentation": "Visit /api-docs for interactive API documentation",
            "endpoints": {
                "GET /": "API information",
                "GET /health": "Service and database status",
                "GET /api-docs": "Interactive API documentation (Swagger UI)",
                "GET /devices": "List all devices",
                "POST /devices": "Register new device",
                "GET /devices/:id": "Get device details",
                "PUT /devices/:id": "Update device",
                "DELETE /devices/:id": "Delete device",
            },
        }

    @app.get("/health")
    def health():
        return {"ok": True, "database": app.state.store.is_connected}

    return app


app = create_app()


def run():
    import uvicorn

    setup_logging(default_settings.LOG_LEVEL)
    logger.info(f"IoT Device Management API starting on http://{default_settings.HOST}:{default_settings.PORT}")
    # log_config=None keeps uvicorn on the root handler installed above
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
