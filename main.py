#!/usr/bin/env python3
"""
EduNex AI API
=============

Chat proxy for the Nilgiri College of Arts and Science assistant.

Features:
- Groq chat completions (llama-3.1-8b-instant)
- Gemini content generation with runtime model discovery
- Uniform {text, provider} / {error, kind} responses
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from ai.config import get_settings
from ai.routes import text_ai_routes

settings = get_settings()

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)
# httpx logs full request URLs at INFO, and Gemini ListModels carries the API key in the query
logging.getLogger("httpx").setLevel(logging.WARNING)

# Create FastAPI app
app = FastAPI(
    title="EduNex AI API",
    version="1.0.0",
    description="LLM chat proxy for the EduNex college assistant",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(text_ai_routes.router, prefix="/api/ai", tags=["Text AI"])

# Health check
@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "edunex-ai-api",
        "version": "1.0.0"
    }

@app.get("/")
def root():
    """Root endpoint with API info"""
    return {
        "service": "EduNex AI API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "text_ai": [
                "POST /api/ai/groq",
                "POST /api/ai/gemini",
                "GET /api/ai/providers"
            ]
        }
    }

# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "kind": "internal"
        }
    )

# Startup/Shutdown events
@app.on_event("startup")
async def startup_event():
    """Startup tasks"""
    logger.info("EduNex AI API starting up...")
    for name, key in (("Groq", settings.groq_api_key), ("Gemini", settings.gemini_api_key)):
        if not key:
            logger.warning(f"{name} API key not configured - /api/ai/{name.lower()} will return 500")

@app.on_event("shutdown")
async def shutdown_event():
    """Shutdown tasks"""
    logger.info("EduNex AI API shutting down...")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8003,
        reload=True,
        log_level="info"
    )
