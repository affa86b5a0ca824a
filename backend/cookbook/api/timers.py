import asyncio
import contextlib
import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request, Response, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from ..core.timer_manager import TimerRegistry
from ..models.recipe import Recipe
from ..models.timer import TimerSnapshot
from ..services.event_stream import EventBroadcaster

log = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1")


class StartTimerRequest(BaseModel):
    seconds: int
    name: Optional[str] = None


def get_registry(request: Request) -> TimerRegistry:
    return request.app.state.timers


def get_events(request: Request) -> EventBroadcaster:
    return request.app.state.events


async def _start(request: Request, seconds: int, name: Optional[str]) -> TimerSnapshot:
    registry = get_registry(request)
    try:
        timer_id = await registry.start_timer(seconds, name, get_events(request))
    except (TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    snapshot = registry.get_snapshot(timer_id) if timer_id > 0 else None
    if snapshot is None:
        raise HTTPException(status_code=500, detail="Failed to start timer")
    return snapshot


def _require(registry: TimerRegistry, timer_id: int) -> TimerSnapshot:
    snapshot = registry.get_snapshot(timer_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail=f"Timer {timer_id} not found")
    return snapshot


@router.post("/timers", status_code=201, response_model=TimerSnapshot)
async def start_timer(body: StartTimerRequest, request: Request):
    return await _start(request, body.seconds, body.name)


@router.get("/timers", response_model=List[TimerSnapshot])
async def list_timers(request: Request):
    return get_registry(request).get_all_timers()


@router.delete("/timers")
async def stop_all_timers(request: Request):
    return {"stopped": await get_registry(request).stop_all_timers()}


@router.get("/timers/{timer_id}", response_model=TimerSnapshot)
async def get_timer(timer_id: int, request: Request):
    return _require(get_registry(request), timer_id)


@router.post("/timers/{timer_id}/pause", response_model=TimerSnapshot)
async def pause_timer(timer_id: int, request: Request):
    registry = get_registry(request)
    snapshot = _require(registry, timer_id)
    if not await registry.pause_timer(timer_id):
        raise HTTPException(status_code=409, detail=f"Timer {timer_id} is {snapshot.state.value}, cannot pause")
    return registry.get_snapshot(timer_id)


@router.post("/timers/{timer_id}/resume", response_model=TimerSnapshot)
async def resume_timer(timer_id: int, request: Request):
    registry = get_registry(request)
    snapshot = _require(registry, timer_id)
    if not await registry.resume_timer(timer_id):
        raise HTTPException(status_code=409, detail=f"Timer {timer_id} is {snapshot.state.value}, cannot resume")
    return registry.get_snapshot(timer_id)


@router.delete("/timers/{timer_id}", status_code=204)
async def stop_timer(timer_id: int, request: Request):
    if not await get_registry(request).stop_timer(timer_id):
        raise HTTPException(status_code=404, detail=f"Timer {timer_id} not found")
    return Response(status_code=204)


@router.post("/recipes/timer", status_code=201, response_model=TimerSnapshot)
async def start_recipe_timer(recipe: Recipe, request: Request):
    """Start a cooking timer covering the recipe's prep and cook time."""
    if recipe.timer_seconds <= 0:
        raise HTTPException(
            status_code=400,
            detail="Please set prep time and/or cook time before starting timer.",
        )
    log.info(f"🍳 Starting cooking timer for '{recipe.name}' ({recipe.total_time} minutes)")
    return await _start(request, recipe.timer_seconds, recipe.name)


@router.websocket("/ws/timers")
async def timer_events(ws: WebSocket):
    """Push every timer notification to the client as JSON."""
    events: EventBroadcaster = ws.app.state.events
    queue = events.subscribe()
    await ws.accept()
    log.info("🔗 Timer event subscriber connected")

    async def pump():
        while True:
            event = await queue.get()
            await ws.send_json(event)

    sender = asyncio.create_task(pump())
    try:
        while True:
            # client messages are ignored; this only waits for the disconnect
            await ws.receive_text()
    except WebSocketDisconnect:
        log.info("👋 Timer event subscriber disconnected")
    finally:
        sender.cancel()
        with contextlib.suppress(Exception, asyncio.CancelledError):
            await sender
        events.unsubscribe(queue)
