import logging

from fastapi import FastAPI

from app.core.logging_middleware import LoggingMiddleware
from app.db.init_db import init_db

from app.routers.analytics import router as analytics_router
from app.routers.submissions import router as submissions_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Late Submission Analytics")

# Middleware
app.add_middleware(LoggingMiddleware)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(submissions_router, tags=["submissions"])
app.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
