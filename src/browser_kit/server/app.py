"""
Browser Session Service

A FastAPI application exposing the session manager over HTTP/JSON.
Run with: python -m browser_kit
(or uvicorn --factory browser_kit.server.app:build_app)
"""

import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..config import Settings
from ..engine.errors import BrowserKitError, ValidationError
from ..engine.manager import SessionManager

logger = logging.getLogger(__name__)

_CONTENT_LENGTH_RE = re.compile(r"[0-9]{1,20}")


# =============================================================================
# Request models
# =============================================================================
# Fields are optional at the schema level so a missing field produces the
# service's own 400 message instead of a schema error.

class SessionRequest(BaseModel):
    sessionId: Optional[str] = None


class UrlRequest(SessionRequest):
    url: Optional[str] = None


class SelectorRequest(SessionRequest):
    selector: Optional[str] = None


class FillRequest(SelectorRequest):
    value: Optional[str] = None


class WaitRequest(SelectorRequest):
    timeout: Optional[int] = Field(None, ge=0, description="Timeout in milliseconds")


def _require(condition, message: str) -> None:
    if not condition:
        raise ValidationError(message)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


def get_manager(request: Request) -> SessionManager:
    return request.app.state.manager


class BodySizeLimitMiddleware:
    """Reject request bodies larger than *max_bytes* with 413.

    A declared Content-Length is checked up front. The body itself is
    counted as it arrives, so chunked uploads are held to the same limit,
    and is replayed to the app once complete.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length", "")
        if _CONTENT_LENGTH_RE.fullmatch(length) and int(length) > self.max_bytes:
            await self._reject(scope, receive, send)
            return

        buffered: list[Message] = []
        received = 0
        while True:
            message = await receive()
            buffered.append(message)
            if message["type"] != "http.request":
                break
            received += len(message.get("body", b""))
            if received > self.max_bytes:
                await self._reject(scope, receive, send)
                return
            if not message.get("more_body", False):
                break

        async def replay() -> Message:
            if buffered:
                return buffered.pop(0)
            return await receive()

        await self.app(scope, replay, send)

    @staticmethod
    async def _reject(scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=413, content={"error": "Request body too large"})
        await response(scope, receive, send)


# =============================================================================
# Application factory
# =============================================================================

def create_app(manager: Optional[SessionManager] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the app around *manager* (wired from *settings* when omitted)."""
    settings = settings or Settings()
    if manager is None:
        manager = SessionManager.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage browser driver and reaper lifecycle."""
        await manager.start()
        logger.info("Session manager started")
        try:
            yield
        finally:
            # Runs on SIGINT/SIGTERM via uvicorn's graceful shutdown.
            logger.info("Shutting down...")
            await manager.stop()
            logger.info("Session manager stopped")

    app = FastAPI(title="Browser Session Service", version="0.1.0", lifespan=lifespan)
    app.state.manager = manager
    app.state.settings = settings

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

    @app.exception_handler(BrowserKitError)
    async def browser_kit_error_handler(request: Request, exc: BrowserKitError):
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed ({exc.kind.value}): {exc}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        detail = errors[0].get("msg", "Invalid request body") if errors else "Invalid request body"
        return JSONResponse(status_code=400, content={"error": detail})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    @app.get("/health")
    async def health(manager: SessionManager = Depends(get_manager)):
        """Health check endpoint."""
        return {"status": "ok", "timestamp": _utc_timestamp(), "activeSessions": manager.count()}

    @app.get("/sessions")
    async def list_sessions(manager: SessionManager = Depends(get_manager)):
        return {"sessions": manager.sessions()}

    @app.post("/launch-browser")
    async def launch_browser(body: UrlRequest, manager: SessionManager = Depends(get_manager)):
        _require(body.sessionId and body.url, "sessionId and url are required")
        await manager.launch(body.sessionId, body.url)
        return {"success": True, "message": "Browser launched successfully", "sessionId": body.sessionId}

    @app.post("/navigate")
    async def navigate(body: UrlRequest, manager: SessionManager = Depends(get_manager)):
        _require(body.sessionId and body.url, "sessionId and url are required")
        await manager.navigate(body.sessionId, body.url)
        return {"success": True, "message": "Navigation successful"}

    @app.get("/page-html/{session_id}")
    async def page_html(session_id: str, manager: SessionManager = Depends(get_manager)):
        html = await manager.page_html(session_id)
        return {"html": html}

    @app.post("/click-element")
    async def click_element(body: SelectorRequest, manager: SessionManager = Depends(get_manager)):
        _require(body.sessionId and body.selector, "sessionId and selector are required")
        await manager.click(body.sessionId, body.selector)
        return {"success": True, "message": "Element clicked successfully"}

    @app.post("/fill-input")
    async def fill_input(body: FillRequest, manager: SessionManager = Depends(get_manager)):
        # An empty string is a legitimate value; only absence is rejected.
        _require(body.sessionId and body.selector and body.value is not None,
                 "sessionId, selector, and value are required")
        await manager.fill(body.sessionId, body.selector, body.value)
        return {"success": True, "message": "Input filled successfully"}

    @app.post("/wait-for-element")
    async def wait_for_element(body: WaitRequest, manager: SessionManager = Depends(get_manager)):
        _require(body.sessionId and body.selector, "sessionId and selector are required")
        await manager.wait_for(body.sessionId, body.selector, body.timeout)
        return {"success": True, "message": "Element found"}

    @app.post("/scroll-to-element")
    async def scroll_to_element(body: SelectorRequest, manager: SessionManager = Depends(get_manager)):
        _require(body.sessionId and body.selector, "sessionId and selector are required")
        await manager.scroll_to(body.sessionId, body.selector)
        return {"success": True, "message": "Scrolled to element"}

    @app.post("/extract-text")
    async def extract_text(body: SelectorRequest, manager: SessionManager = Depends(get_manager)):
        _require(body.sessionId and body.selector, "sessionId and selector are required")
        text = await manager.extract_text(body.sessionId, body.selector)
        return {"text": text}

    @app.delete("/close-session/{session_id}")
    async def close_session(session_id: str, manager: SessionManager = Depends(get_manager)):
        await manager.close(session_id)
        return {"success": True, "message": "Session closed"}

    return app


def build_app() -> FastAPI:
    """Factory for ``uvicorn --factory browser_kit.server.app:build_app``."""
    return create_app(settings=Settings.from_env())
