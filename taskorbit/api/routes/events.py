"""
WebSocket push channel for task status changes.
"""
import asyncio
import logging
from typing import Any, Dict

from taskorbit.adapters.http_framework import HTTPFrameworkAdapter
from taskorbit.dependencies.services import get_broadcaster
from taskorbit.notifications.broadcaster import StatusBroadcaster

logger = logging.getLogger(__name__)

http_adapter = HTTPFrameworkAdapter()
Depends = http_adapter.Depends
WebSocket = http_adapter.WebSocket
WebSocketDisconnect = http_adapter.WebSocketDisconnect

router = http_adapter.create_router(tags=["events"])


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Consume client frames until the client goes away. Inbound messages are ignored."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws/tasks")
async def task_events(websocket: WebSocket, broadcaster: StatusBroadcaster = Depends(get_broadcaster)):
    """
    Stream {"event": ..., "data": <task>} messages until the client disconnects.
    """
    loop = asyncio.get_running_loop()
    queue: "asyncio.Queue[Dict[str, Any]]" = asyncio.Queue()

    def on_event(event: str, payload: Dict[str, Any]) -> None:
        # Publishers may run on another thread or loop
        loop.call_soon_threadsafe(queue.put_nowait, {"event": event, "data": payload})

    # Subscribe before accepting so no event is missed once the client is connected
    token = broadcaster.subscribe(on_event)
    disconnect = None
    try:
        await websocket.accept()
        logger.info(f"Event listener {token} connected")
        disconnect = asyncio.create_task(_wait_for_disconnect(websocket))
        while True:
            next_event = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({next_event, disconnect}, return_when=asyncio.FIRST_COMPLETED)
            if disconnect in done:
                next_event.cancel()
                break
            await websocket.send_json(next_event.result())
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.unsubscribe(token)
        if disconnect is not None and not disconnect.done():
            disconnect.cancel()
        logger.info(f"Event listener {token} disconnected")
