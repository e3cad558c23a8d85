import logging
import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from routes import auth, tasks, users
from config import get_settings
from database import create_db_and_tables
from middleware.errors import register_exception_handlers
from utils.log import setup_logging

settings = get_settings()
setup_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Task Manager API",
    description="RESTful API for personal task management with cookie-based sessions",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS configuration; credentials are needed for the session cookie
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(users.router, prefix="/api/user", tags=["user"])
app.include_router(tasks.router, prefix="/api", tags=["tasks"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup"""
    create_db_and_tables()
    logger.info("Task Manager API started (%s)", settings.environment)


@app.get("/")
def read_root():
    """Root endpoint"""
    return {
        "message": "Task Manager API is running",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "OK", "message": "Server is running"}


def run():
    """Console entry point: serve the app with uvicorn"""
    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "5000")))
