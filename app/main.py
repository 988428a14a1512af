from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import asyncio
import logging
import time
from .api import auth, generate, deploy, projects, deployments
from .config import settings
from .database import engine, Base
from .errors import AppError
from .services.vercel_service import REQUEST_TIMEOUT_SECONDS
from .utils import setup_logger

setup_logger("app", settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="App Builder API",
    description="Generate web apps from natural language and deploy them to Vercel",
    version="1.0.0"
)

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})

# Custom middleware to add request timeouts and isolation
@app.middleware("http")
async def timeout_middleware(request: Request, call_next):
    timeout_seconds = 30  # Default timeout

    path = request.url.path
    if path.startswith("/api/v1/generate"):
        timeout_seconds = 180  # LLM generation can take minutes
    elif path.startswith("/api/v1/deploy"):
        timeout_seconds = settings.DEPLOY_TIMEOUT_SECONDS + 2 * REQUEST_TIMEOUT_SECONDS  # Polling window plus upload and bookkeeping
    elif path.endswith("/status"):
        timeout_seconds = 10  # Shorter timeout for status checks

    start_time = time.time()

    try:
        # Execute request with timeout
        response = await asyncio.wait_for(
            call_next(request),
            timeout=timeout_seconds
        )
    except asyncio.TimeoutError:
        logger.error("Request to %s timed out after %s seconds", path, timeout_seconds)
        return error_response(408, f"Request timed out after {timeout_seconds:g} seconds")

    # Add processing time header
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)

    return response

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return error_response(exc.status_code, exc.public_message)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    detail = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_response(400, detail)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(500, "Internal server error")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(generate.router, prefix="/api/v1/generate", tags=["generate"])
app.include_router(deploy.router, prefix="/api/v1/deploy", tags=["deploy"])
app.include_router(projects.router, prefix="/api/v1/projects", tags=["projects"])
app.include_router(deployments.router, prefix="/api/v1/deployments", tags=["deployments"])

@app.get("/")
async def root():
    return {"message": "App Builder API", "version": "1.0.0"}

@app.get("/health")
async def health_check():
    return {"status": "healthy", "timestamp": time.time()}
