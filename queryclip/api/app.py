"""
FastAPI application for Query Clip.
"""

import time
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from queryclip.config import config
from queryclip.api.routes import router
from queryclip.utils.error_handling import describe_error
from queryclip.utils.logger import logging

# FastAPI application
app = FastAPI(
    title=config.APP_NAME,
    version=config.APP_VERSION,
    description="An API that cuts a video down to the moments matching a request",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Middleware to add processing time header to responses."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies in the same shape as pipeline errors."""
    details = "; ".join(error.get("msg", "invalid value") for error in exc.errors())
    logging.warning(f"Rejected request body: {details}")
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled exceptions."""
    return JSONResponse(
        status_code=500,
        content={"error": f"An unexpected error occurred: {describe_error(exc)}"},
    )


# Include API router
app.include_router(router)

# Rendered clips are served as static files
app.mount(config.OUTPUT_URL_PREFIX, StaticFiles(directory=config.OUTPUT_DIR), name="outputs")


# Root
@app.get("/")
async def root():
    """Root endpoint returning basic API information."""
    return {
        "name": config.APP_NAME,
        "version": config.APP_VERSION,
        "description": "Query Clip API",
    }
