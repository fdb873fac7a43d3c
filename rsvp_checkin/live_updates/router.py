import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from rsvp_checkin.live_updates.bus import LiveUpdateBus, Subscription, get_live_update_bus
from rsvp_checkin.live_updates.urls import LIVE_UPDATES_URL

logger = logging.getLogger(__name__)

router = APIRouter()


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        message = await subscription.get()
        await websocket.send_json(message)


async def _drain(websocket: WebSocket) -> None:
    # Dashboards only listen; reading lets us notice a disconnect while idle
    while True:
        await websocket.receive_text()


@router.websocket(LIVE_UPDATES_URL)
async def live_updates(
    websocket: WebSocket,
    bus: LiveUpdateBus = Depends(get_live_update_bus),
) -> None:
    """
    Stream registration-created and guest-checked-in events to a dashboard.
    Events published before the connection was opened are not replayed.
    """
    await websocket.accept()
    subscription = bus.subscribe()
    tasks = {
        asyncio.create_task(_forward(websocket, subscription)),
        asyncio.create_task(_drain(websocket)),
    }
    try:
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                logger.error(f"Live update stream failed: {error}")
    finally:
        for task in tasks:
            task.cancel()
        bus.unsubscribe(subscription)
