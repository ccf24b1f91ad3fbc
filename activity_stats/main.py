"""FastAPI application entry point"""

from fastapi import FastAPI, BackgroundTasks
from fastapi.middleware.cors import CORSMiddleware
from typing import Dict, Any
import logging

from activity_stats.config.settings import settings
from activity_stats.jobs.snapshot_build import run_snapshot_build
from activity_stats.orchestrator import ReconciliationOrchestrator
from activity_stats.schemas import ActivityResponse, CalendarResponse

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Reconciles GitHub contribution snapshots with the live event feed",
    version=settings.APP_VERSION
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Global orchestrator instance; results are cached per username and day
orchestrator = ReconciliationOrchestrator()

last_snapshot_build: Dict[str, Any] = {}


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "endpoints": {
            "health": "/api/health",
            "activity": "/api/activity/{username}",
            "calendar": "/api/activity/{username}/calendar",
            "build_snapshot": "POST /api/snapshot/build",
        }
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "activity-stats",
        "version": settings.APP_VERSION
    }


@app.get("/api/activity/{username}", response_model=ActivityResponse)
async def get_activity(username: str, refresh: bool = False):
    """Reconciled stats; degraded sources yield zeros, never an error"""
    result = await orchestrator.reconcile(username, use_cache=not refresh)
    return ActivityResponse.from_result(result)


@app.get("/api/activity/{username}/calendar", response_model=CalendarResponse)
async def get_calendar(username: str, refresh: bool = False):
    """Trailing-window calendar with heat levels"""
    result = await orchestrator.reconcile(username, use_cache=not refresh)
    return CalendarResponse.from_result(result)


@app.post("/api/snapshot/build")
async def build_snapshot(background_tasks: BackgroundTasks):
    """Trigger a snapshot artifact rebuild"""
    logger.info("Snapshot build triggered")

    async def run_build():
        try:
            summary = await run_snapshot_build()
            last_snapshot_build.clear()
            last_snapshot_build.update(summary)
            logger.info(f"Snapshot build finished: {last_snapshot_build}")
        except Exception as e:
            logger.error(f"Snapshot build failed: {e}", exc_info=True)

    background_tasks.add_task(run_build)
    return {
        "status": "started",
        "message": "Snapshot build started in background"
    }


@app.get("/api/snapshot/status")
async def snapshot_build_status():
    """Result of the most recent snapshot build"""
    return last_snapshot_build or {"success": None, "written": None}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "activity_stats.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
