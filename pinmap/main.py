from __future__ import annotations
import logging
import time
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse

from pinmap.core.config import settings, configure_cors
from pinmap.core.exceptions import BodyTooLarge, register_exception_handlers
from pinmap.core.logging import configure_logging
from pinmap.db.session import init_models, ping

# Routers (import once, include once)
from pinmap.api.v1.health import router as health_router
from pinmap.api.v1.pins import router as pins_router
from pinmap.api.v1.summary import router as summary_router

configure_logging(settings.log_level)
logger = logging.getLogger("pinmap")


class BodySizeLimit:
    """
    Reject request bodies larger than max_bytes.

    A declared Content-Length is checked up front; chunked bodies are counted
    as they are received.
    """

    def __init__(self, app, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def _refuse(self, scope, receive, send):
        response = JSONResponse(status_code=413, content=BodyTooLarge().to_body())
        await response(scope, receive, send)

    async def __call__(self, scope, receive, send):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        for k, v in scope.get("headers") or []:
            if k.lower() == b"content-length":
                try:
                    declared = int(v)
                except ValueError:
                    declared = 0
                if declared > self.max_bytes:
                    return await self._refuse(scope, receive, send)
                break

        received = 0
        started = False

        async def limited_receive():
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise BodyTooLarge()
            return message

        async def tracking_send(message):
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLarge:
            if started:
                raise
            await self._refuse(scope, receive, send)


app = FastAPI(title=settings.app_name)
configure_cors(app)
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(BodySizeLimit, max_bytes=settings.max_body_bytes)

# Global exception handlers
register_exception_handlers(app)


@app.on_event("startup")
def on_startup():
    """
    - Create tables
    - Verify the store answers; without it the process must not serve
    """
    try:
        init_models()
        ping()
    except Exception:
        logger.exception("Database connection failed")
        raise
    logger.info("Database connected")


@app.middleware("http")
async def _access_log(request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


# Mount API routers (once)
app.include_router(health_router)
app.include_router(pins_router)
app.include_router(summary_router)


def _static_file(full_path: str) -> Path | None:
    root = Path(settings.static_dir).resolve()
    candidate = (root / full_path).resolve()
    if full_path and candidate.is_file() and candidate.is_relative_to(root):
        return candidate
    return None


# SPA fallback: keep last so API routes win
@app.get("/{full_path:path}", include_in_schema=False)
def spa_fallback(full_path: str):
    found = _static_file(full_path)
    if found:
        return FileResponse(found)
    index = Path(settings.static_dir) / "index.html"
    if not index.is_file():
        return JSONResponse(status_code=404, content={"error": "Not found"})
    return FileResponse(index)


def run() -> None:
    import uvicorn

    logger.info("Server listening on http://localhost:%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
