"""
RCPanel - Request Router

Maps HTTP method + path patterns to handlers built on a Context, on top of
FastAPI's APIRouter. Path patterns use named segments ("/api/remotes/{name}")
which handlers read through Context.param().

Two handler shapes are supported:
- page handlers, `handler(ctx) -> str`, produce one complete HTML body
- streaming handlers, `handler(ctx) -> None`, write events to the update
  channel (ctx.sse()) while they run

Handlers are plain functions. They run on the worker thread pool, so a slow
RC round-trip on one request never blocks the others.

Request lifecycle: received -> context built -> handler invoked ->
responded | errored.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional

from datastar_py.fastapi import DatastarResponse
from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse

from rcpanel.context import Context
from rcpanel.update_channel import UpdateChannel
from rcpanel.views import ERROR_REGION_ID, ErrorFragment

# Create logger
logger = logging.getLogger(__name__)

PageHandler = Callable[[Context], str]
StreamHandler = Callable[[Context], None]

# Seconds between peer liveness checks while a streaming handler is quiet
DISCONNECT_POLL_SECONDS = 0.5

# Marks the end of a streaming handler's events
_END_OF_STREAM = object()


class Router:
    """
    Route registry producing a FastAPI APIRouter.

    Usage:
        router = Router()

        @router.page("/jobs")
        def jobs_page(ctx): ...

        @router.post("/api/jobs/{id}/stop")
        def stop_job(ctx): ...

        app.include_router(router.api_router)
    """

    def __init__(self, prefix: str = "", tags: Optional[list] = None):
        self.api_router = APIRouter(prefix=prefix, tags=tags)

    # ==================== Registration ====================

    def page(self, path: str):
        """Register a page handler for GET requests."""
        def decorator(handler: PageHandler) -> PageHandler:
            self.api_router.add_api_route(
                path, self._page_endpoint(handler), methods=["GET"],
                response_class=HTMLResponse, name=handler.__name__
            )
            return handler
        return decorator

    def stream(self, method: str, path: str):
        """Register a streaming handler for the given HTTP method."""
        def decorator(handler: StreamHandler) -> StreamHandler:
            self.api_router.add_api_route(
                path, self._stream_endpoint(handler), methods=[method.upper()],
                name=handler.__name__
            )
            return handler
        return decorator

    def get(self, path: str):
        return self.stream("GET", path)

    def post(self, path: str):
        return self.stream("POST", path)

    def put(self, path: str):
        return self.stream("PUT", path)

    def delete(self, path: str):
        return self.stream("DELETE", path)

    # ==================== Page Handlers ====================

    def _page_endpoint(self, handler: PageHandler):
        async def endpoint(request: Request):
            body = await request.body()
            ctx = Context(request, body)
            logger.debug(f"{request.method} {request.url.path}: context built, invoking {handler.__name__}")

            try:
                html = await run_in_threadpool(handler, ctx)
            except Exception as e:
                logger.exception(f"Page handler {handler.__name__} failed: {e}")
                return HTMLResponse(ErrorFragment(str(e)), status_code=500)

            if ctx.response is not None:
                return ctx.response
            return HTMLResponse(html, headers=ctx.response_headers)

        endpoint.__name__ = handler.__name__
        return endpoint

    # ==================== Streaming Handlers ====================

    def _stream_endpoint(self, handler: StreamHandler):
        async def endpoint(request: Request):
            body = await request.body()
            loop = asyncio.get_running_loop()
            queue: asyncio.Queue = asyncio.Queue()
            disconnected = threading.Event()

            def send(frame: str):
                # Called from the handler's worker thread; the loop keeps call order
                loop.call_soon_threadsafe(queue.put_nowait, frame)

            def open_channel() -> UpdateChannel:
                return UpdateChannel(send, is_disconnected=disconnected.is_set)

            ctx = Context(request, body, channel_factory=open_channel)
            logger.debug(f"{request.method} {request.url.path}: context built, invoking {handler.__name__}")

            async def run_handler():
                try:
                    await run_in_threadpool(RunStreamHandler, handler, ctx)
                finally:
                    queue.put_nowait(_END_OF_STREAM)

            async def events():
                task = asyncio.ensure_future(run_handler())
                task.add_done_callback(_log_handler_failure)
                getter = None
                try:
                    while True:
                        if getter is None:
                            getter = asyncio.ensure_future(queue.get())
                        done, _ = await asyncio.wait({getter}, timeout=DISCONNECT_POLL_SECONDS)
                        if not done:
                            if await request.is_disconnected():
                                logger.info(f"Client disconnected from {request.url.path}")
                                break
                            continue
                        frame = getter.result()
                        getter = None
                        if frame is _END_OF_STREAM:
                            break
                        yield frame
                finally:
                    # The handler may still be running; it sees the channel as closed from now on
                    disconnected.set()
                    if getter is not None:
                        getter.cancel()

            return DatastarResponse(events())

        endpoint.__name__ = handler.__name__
        return endpoint


def _log_handler_failure(task: asyncio.Future):
    # Retrieves the outcome even when the stream ended before the handler did
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.error(f"Streaming handler task failed: {error}")


def RunStreamHandler(handler: StreamHandler, ctx: Context) -> None:
    """
    Run a streaming handler and convert its failure into one final error patch.

    The response headers are already on their way, so an error cannot become
    an HTTP error page; it is patched into the error region instead.
    """
    try:
        handler(ctx)
        logger.debug(f"{ctx.method} {ctx.path}: responded")
    except Exception as e:
        logger.exception(f"Streaming handler {handler.__name__} failed: {e}")
        ctx.sse().patch_elements(ErrorFragment(str(e), ERROR_REGION_ID))
