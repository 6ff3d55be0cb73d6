"""
FastAPI Application - BTC/RUB Deal Value Dashboard

Serves the refreshed BTC table as an HTML page, as JSON and as a WebSocket
stream. The refresh scheduler starts with the application and runs one cycle
immediately, then one every REFRESH_INTERVAL_SECONDS.

Usage:
    uvicorn app.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    - Swagger: http://localhost:8000/docs
"""

import html
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse, JSONResponse

from core.config import settings, validate_configuration
from core.logging import logger
from core.schemas import RenderedView, Snapshot
from services.event_bus import SNAPSHOT_TOPIC, bus
from services.refresh_scheduler import get_refresh_scheduler
from services.renderer import STATUS_ID, TABLE_BODY_ID


# ============================================
# Lifespan Management
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration, start the scheduler, stop it on shutdown."""
    logger.info("=== Application Starting ===")
    try:
        validate_configuration()
        await get_refresh_scheduler().start()
        logger.info("=== Started Successfully ===")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("=== Shutting Down ===")
    try:
        await get_refresh_scheduler().stop()
        logger.info("=== Shutdown Complete ===")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title="BTC/RUB Deal Value Dashboard",
    description=(
        "BTC market price and traded volume converted to RUB, refreshed every minute.\n\n"
        "## Endpoints\n"
        "- `GET /` - HTML table\n"
        "- `GET /table` - Current table body and status line\n"
        "- `GET /snapshot` - Last successful snapshot\n"
        "- `POST /refresh` - Run a refresh cycle now\n"
        "- `GET /health` - Scheduler state\n\n"
        "## WebSocket\n"
        "- `ws://{host}/ws/snapshot` - Every new snapshot as JSON"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)


PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>BTC / RUB</title>
<style>
  table {{ border-collapse: collapse; margin: 2em auto; font-family: sans-serif; }}
  th, td {{ border: 1px solid #ccc; padding: 0.5em 1em; text-align: right; }}
  .positive {{ color: green; }}
  .negative {{ color: red; }}
  .zero {{ color: gray; }}
  #{status_id} {{ text-align: center; font-family: sans-serif; color: #555; }}
</style>
</head>
<body>
<table>
  <thead>
    <tr><th>Market price</th><th>Volume</th><th>Deal value</th><th>Change</th></tr>
  </thead>
  <tbody id="{table_body_id}">{table_body_html}</tbody>
</table>
<p id="{status_id}">{status_text}</p>
<script>
  async function pollTable() {{
    try {{
      const resp = await fetch("/table");
      const view = await resp.json();
      document.getElementById("{table_body_id}").innerHTML = view.table_body_html;
      document.getElementById("{status_id}").textContent = view.status_text;
    }} catch (e) {{
      console.error(e);
    }}
  }}
  setInterval(pollTable, {poll_ms});
</script>
</body>
</html>
"""


# ============================================
# Dashboard Endpoints
# ============================================

@app.get("/", response_class=HTMLResponse, tags=["Dashboard"])
async def index():
    """HTML page with the table; the page polls /table to stay current."""
    view = get_refresh_scheduler().renderer.surface.view()
    return PAGE_TEMPLATE.format(
        table_body_id=TABLE_BODY_ID,
        status_id=STATUS_ID,
        table_body_html=view.table_body_html,
        status_text=html.escape(view.status_text),
        poll_ms=max(1, settings.refresh_interval_seconds // 4) * 1000,
    )


@app.get("/table", response_model=RenderedView, tags=["Dashboard"])
async def get_table():
    """Current table body HTML and status line."""
    return get_refresh_scheduler().renderer.surface.view()


@app.get("/snapshot", response_model=Snapshot, tags=["Dashboard"])
async def get_snapshot():
    """Last successful snapshot."""
    snapshot = get_refresh_scheduler().last_snapshot
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No snapshot computed yet")
    return snapshot


@app.post("/refresh", tags=["Dashboard"])
async def refresh_now():
    """
    Run a refresh cycle immediately.

    Returns refreshed=false when another cycle is already running or the cycle
    failed; the table then shows the in-flight or error state.
    """
    scheduler = get_refresh_scheduler()
    if scheduler.is_refreshing:
        return {"refreshed": False, "reason": "refresh already in progress", "snapshot": None}

    snapshot = await scheduler.refresh()
    if snapshot is None:
        return {"refreshed": False, "reason": "refresh failed", "snapshot": None}
    return {"refreshed": True, "reason": None, "snapshot": snapshot.model_dump(mode="json")}


@app.get("/health", tags=["System"])
async def health_check():
    """Scheduler state."""
    scheduler = get_refresh_scheduler()
    return {
        "status": "healthy" if scheduler.is_running else "stopped",
        "refreshing": scheduler.is_refreshing,
        "has_snapshot": scheduler.last_snapshot is not None,
        "refresh_interval_seconds": scheduler.interval_seconds,
    }


# ============================================
# WebSocket Endpoints
# ============================================

@app.websocket("/ws/snapshot")
async def websocket_snapshot(websocket: WebSocket):
    """
    Push every new snapshot to the client.

    The last known snapshot, if any, is sent right after connecting.

    Example:
        ws://localhost:8000/ws/snapshot
    """
    await websocket.accept()
    logger.info("WS connected: snapshot")
    queue = await bus.subscribe(SNAPSHOT_TOPIC)
    try:
        last = get_refresh_scheduler().last_snapshot
        if last is not None:
            await websocket.send_json(last.model_dump(mode="json"))
        while True:
            event = await queue.get()
            await websocket.send_json(event)
    except WebSocketDisconnect:
        logger.info("WS disconnected: snapshot")
    except Exception as e:
        logger.error(f"WS error snapshot: {e}")
    finally:
        await bus.unsubscribe(SNAPSHOT_TOPIC, queue)
        logger.info("WS ended: snapshot")


# ============================================
# Error Handlers
# ============================================

@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Handle 404 errors."""
    detail = getattr(exc, "detail", None) or "Not found"
    return JSONResponse(status_code=404, content={"detail": detail, "path": str(request.url)})


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Handle 500 errors."""
    logger.error(f"Internal error: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})
