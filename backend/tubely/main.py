"""
FastAPI entry point for Tubely
"""

import os
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from tubely.config.base import Settings
from tubely.config.loader import load_settings
from tubely.errors import TubelyError
from tubely.routers.videos import router as videos_router
from tubely.services.container import ServiceContainer, build_services
from tubely.utils.logger import get_logger, set_log_level

logger = get_logger(__name__)


class BodyTooLarge(HTTPException):
    """
    Raised from the receive channel once a request body passes the limit.

    An HTTPException subclass, so FastAPI re-raises it from form parsing
    instead of reporting a 400 parse error.
    """

    def __init__(self, limit: int):
        super().__init__(status_code=413, detail=f"Request body exceeds maximum size of {limit} bytes")


class MaxBodySizeMiddleware:
    """
    Caps request bodies at max_body_size bytes.

    A declared Content-Length over the limit is refused before anything is
    read. Bodies without one (chunked uploads) are counted as they arrive and
    the request is aborted on the first chunk that crosses the limit, so the
    form parser never buffers more than that.
    """

    def __init__(self, app: ASGIApp, max_body_size: int):
        self.app = app
        self.max_body_size = max_body_size

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length is not None:
            try:
                declared = int(content_length)
            except ValueError:
                response = _error_response(400, "INVALID_CONTENT_LENGTH", "Invalid Content-Length header")
                await response(scope, receive, send)
                return
            if declared > self.max_body_size:
                logger.warning(f"Rejected {scope['method']} {scope['path']}: body of {declared} bytes")
                await _body_too_large_response(self.max_body_size)(scope, receive, send)
                return

        received = 0
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_size:
                    logger.warning(f"Aborted {scope['method']} {scope['path']}: body passed {self.max_body_size} bytes")
                    raise BodyTooLarge(self.max_body_size)
            return message

        async def tracking_send(message: Message):
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLarge:
            if response_started:
                raise
            await _body_too_large_response(self.max_body_size)(scope, receive, send)


def _error_response(status: int, code: str, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error_code": code, "detail": detail})


def _body_too_large_response(limit: int) -> JSONResponse:
    return _error_response(413, "FILE_TOO_LARGE", f"Request body exceeds maximum size of {limit} bytes")


async def body_too_large_handler(request: Request, exc: BodyTooLarge):
    return _error_response(exc.status_code, "FILE_TOO_LARGE", exc.detail)


async def tubely_error_handler(request: Request, exc: TubelyError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return _error_response(exc.status_code, exc.error_code, exc.public_message)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error_code": "VALIDATION_FAILED", "detail": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


def create_app(settings: Optional[Settings] = None, services: Optional[ServiceContainer] = None) -> FastAPI:
    settings = settings or (services.settings if services else load_settings())
    set_log_level(settings.LOG_LEVEL)
    services = services or build_services(settings)

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Video uploads with fast-start processing and signed playback URLs",
        version=settings.VERSION,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.DEBUG else [f"http://{h}" for h in settings.ALLOWED_HOSTS],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400
    )
    app.add_middleware(MaxBodySizeMiddleware, max_body_size=settings.MAX_UPLOAD_SIZE)

    app.add_exception_handler(TubelyError, tubely_error_handler)
    app.add_exception_handler(BodyTooLarge, body_too_large_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(videos_router)

    os.makedirs(settings.ASSETS_ROOT, exist_ok=True)
    app.mount("/assets", StaticFiles(directory=settings.ASSETS_ROOT), name="assets")

    @app.get("/")
    async def root():
        return {"message": f"{settings.APP_NAME} API", "version": settings.VERSION}

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "services": {
                "metadata": settings.METADATA_BACKEND,
                "video_storage": settings.VIDEO_STORAGE,
            }
        }

    logger.info(f"{settings.APP_NAME} API initialized (storage={settings.VIDEO_STORAGE}, metadata={settings.METADATA_BACKEND})")
    return app


if __name__ == "__main__":
    import uvicorn

    app_settings = load_settings()
    uvicorn.run(create_app(app_settings), host=app_settings.API_HOST, port=app_settings.API_PORT)
