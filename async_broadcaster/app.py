"""FastAPI relay that fans one upstream source out to WebSocket clients."""

import asyncio
import contextlib
import logging

from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .broadcaster import AsyncBroadcaster
from .cancellation import CancellationToken
from .config import AppConfig, SourceConfig, get_config
from .sources import ticker

logger = logging.getLogger(__name__)


def build_source(config: SourceConfig):
    if config.kind == "ticker":
        return ticker(config.interval_sec, limit=config.limit)
    raise ValueError(f"Unsupported source kind: {config.kind}")


class RelayContext:
    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.broadcaster: AsyncBroadcaster[object] | None = None

    def start(self) -> None:
        logger.info("Starting %s source", self.config.source.kind)
        self.broadcaster = AsyncBroadcaster(build_source(self.config.source))

    async def shutdown(self) -> None:
        if self.broadcaster is not None:
            await self.broadcaster.aclose()


async def _watch_disconnect(websocket: WebSocket, token: CancellationToken) -> None:
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        token.cancel("client disconnected")


def create_app(config: AppConfig | None = None) -> FastAPI:
    config = config or get_config()
    context = RelayContext(config)

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI):
        context.start()
        try:
            yield
        finally:
            await context.shutdown()

    app = FastAPI(title="Async Broadcaster Relay", version="0.1.0", lifespan=lifespan)
    app.state.context = context

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health")
    async def health() -> dict[str, object]:
        broadcaster = context.broadcaster
        if broadcaster is None:
            return {"status": "starting", "listeners": 0, "buffered": 0, "closed": False}
        return {
            "status": "ok",
            "listeners": broadcaster.listener_count,
            "buffered": broadcaster.buffered,
            "closed": broadcaster.closed,
        }

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        broadcaster = context.broadcaster
        if broadcaster is None:
            await websocket.close(code=1013)
            return

        token = CancellationToken()
        watcher = asyncio.create_task(_watch_disconnect(websocket, token))
        try:
            async with contextlib.aclosing(broadcaster.iterable.values(cancellation_token=token)) as values:
                async for value in values:
                    await websocket.send_json({"type": "value", "value": value})
            if not token.cancelled:
                await websocket.send_json({"type": "end"})
                await websocket.close()
        except WebSocketDisconnect:
            logger.debug("WebSocket disconnected")
        finally:
            watcher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await watcher

    return app
