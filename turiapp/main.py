from datetime import datetime, timezone
import logging
import time
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth.routes import router as auth_router
from .user.routes import router as user_router
from .person.routes import router as person_router
from .place.routes import router as place_router
from .review.routes import router as review_router
from .comment.routes import router as comment_router
from .category.routes import router as category_router
from .favorite.routes import router as favorite_router
from .core.config import APP_NAME, APP_VERSION, APP_ENV, IS_PRODUCTION, API_PREFIX, CORS_ORIGINS, LOG_LEVEL, PORT
from .core.database import engine, Base
from .core.exceptions import AppError, DEFAULT_ERROR_MESSAGE
from .core.repository import is_unique_violation
from .core.responses import error_response

# Configure logging
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description="API REST para la gestión de lugares turísticos, reseñas y usuarios",
    docs_url="/docs",
    openapi_url="/swagger.json",
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables when starting up
try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created successfully")
except Exception as e:
    logger.error(f"Error creating database tables: {str(e)}")
    raise


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Request-ID"] = request_id
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({duration_ms:.1f} ms) [{request_id}]"
    )
    return response


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.error}")
    return error_response(exc.status_code, exc.error, exc.message, exc.details)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    details = []
    for err in exc.errors():
        # Bỏ phần "body"/"query" ở đầu để tên trường dễ đọc hơn
        location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(location)
        details.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation error", "Invalid request data", details)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    reason = str(exc.orig).lower()
    logger.warning(f"Integrity error on {request.method} {request.url.path}: {reason}")
    if "foreign key" in reason:
        return error_response(status.HTTP_400_BAD_REQUEST, "Foreign Key Constraint", "Referenced resource does not exist")
    if is_unique_violation(exc):
        return error_response(status.HTTP_409_CONFLICT, "Duplicate Entry", "Resource already exists")
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation error", "Invalid request data")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return error_response(exc.status_code, "Route not found", f"Cannot {request.method} {request.url.path}")
    return error_response(exc.status_code, str(exc.detail), DEFAULT_ERROR_MESSAGE)


# Exception handler for generic exceptions
@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {str(exc)}")
    message = DEFAULT_ERROR_MESSAGE if IS_PRODUCTION else str(exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", message)


# Health check endpoint
@app.get("/health")
def health_check():
    return {
        "success": True,
        "message": "TuriApp API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": APP_VERSION,
        "environment": APP_ENV,
    }


@app.get(API_PREFIX)
def api_info():
    return {
        "success": True,
        "message": f"{APP_NAME} v{APP_VERSION}",
        "data": {
            "documentation": "/docs",
            "openapi": "/swagger.json",
            "endpoints": {
                "auth": f"{API_PREFIX}/auth",
                "users": f"{API_PREFIX}/users",
                "persons": f"{API_PREFIX}/persons",
                "places": f"{API_PREFIX}/places",
                "reviews": f"{API_PREFIX}/reviews",
                "comments": f"{API_PREFIX}/comments",
                "categories": f"{API_PREFIX}/categories",
                "favorites": f"{API_PREFIX}/favorites",
            },
        },
    }


# Include routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(person_router)
app.include_router(place_router)
app.include_router(review_router)
app.include_router(comment_router)
app.include_router(category_router)
app.include_router(favorite_router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("turiapp.main:app", host="0.0.0.0", port=PORT, reload=not IS_PRODUCTION, log_level=LOG_LEVEL.lower())
