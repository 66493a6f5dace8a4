import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from eventmi.database import init_db
from eventmi.routers import events

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Eventmi",
    description="Reference event pages (list, add, details, edit, delete) for the Eventmi verifier",
    version="1.0.0",
)


# ============== Global Error Handlers ==============

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all for unhandled exceptions: log full traceback, return safe message."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": "An unexpected error occurred."},
    )


app.include_router(events.router)


@app.on_event("startup")
def on_startup():
    """Create the events table on startup."""
    init_db()


@app.get("/")
def root():
    """Root endpoint: redirect to the events list."""
    return RedirectResponse(url="/Event/All")


@app.get("/health")
def health_check():
    """Health check endpoint: verifies DB connectivity."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError
    from eventmi.database import SessionLocal

    checks = {"db": "ok"}
    status = "healthy"

    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        checks["db"] = str(e)
        status = "unhealthy"
    finally:
        db.close()

    code = 200 if status == "healthy" else 503
    return JSONResponse(status_code=code, content={"status": status, "checks": checks})


def run():
    """Serve the app with uvicorn (``eventmi-web``)."""
    import uvicorn

    uvicorn.run("eventmi.main:app", host="127.0.0.1", port=8000)
