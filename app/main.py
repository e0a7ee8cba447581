import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from app.core.config import settings
from app.core.errors import StudyTrackerError
from app.routers import sessions, reviews, content, gamification

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# Create FastAPI instance
app = FastAPI(
    title=settings.app_name,
    description="Study session tracking with spaced reviews, points, streaks and badges",
    version=settings.version
)

# CORS middleware for the web frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
app.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])
app.include_router(content.router, prefix="/content", tags=["Content"])
app.include_router(gamification.router, prefix="/gamification", tags=["Gamification"])


@app.exception_handler(StudyTrackerError)
async def study_tracker_error_handler(request: Request, exc: StudyTrackerError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/")
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API!",
        "version": settings.version,
        "docs": "/docs"
    }

@app.get("/health")
async def health_check():
    return {"status": "healthy"}

if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
