from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
import logging

from .api.timers import router as timers_router
from .core.config import get_settings
from .core.timer_manager import TimerRegistry
from .services.event_stream import EventBroadcaster

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
log = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One registry per application, shared by every request handler
    app.state.timers = TimerRegistry()
    app.state.events = EventBroadcaster()
    log.info("✅ Timer registry initialized")
    try:
        yield
    finally:
        stopped = await app.state.timers.stop_all_timers()
        log.info(f"🛑 {stopped} timers stopped on shutdown")


app = FastAPI(
    title="cookbook",
    version="0.1.0",
    description="Recipe cooking timers",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(timers_router)


@app.get("/api/health")
async def health_check(request: Request):
    return {
        "status": "ok",
        "message": "cookbook API is running",
        "active_timers": request.app.state.timers.get_active_timer_count(),
    }
