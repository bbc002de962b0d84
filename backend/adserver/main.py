import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from .config import settings
from .database import init_db, SessionLocal
from .errors import (
    AdServerError, ValidationError, NotFoundError, NoAdsAvailableError, RetryableError
)
from .limiter import limiter
from .middleware.security import SecurityHeadersMiddleware
from .services.preload import SeedLoader
from .utils.helpers import mask_token

# Import routes
from .routes import public, ads, analytics

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Ad selection, click attribution and CTR analytics",
    version="1.0.0",
    docs_url="/api/docs" if settings.ENABLE_API_DOCS else None,
    redoc_url="/api/redoc" if settings.ENABLE_API_DOCS else None
)

# Rate limiter for the public routes
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS - the embed script calls the public routes from any page in development
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins_list,
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=86400,
)
app.add_middleware(SecurityHeadersMiddleware)

# Status code per core error; NoAdsAvailableError is a normal 404, not a fault
ERROR_STATUS = (
    (ValidationError, 400),
    (NoAdsAvailableError, 404),
    (NotFoundError, 404),
    (RetryableError, 503),
)


@app.exception_handler(AdServerError)
async def ad_server_error_handler(request: Request, exc: AdServerError):
    status_code = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 500)
    headers = {"Retry-After": "1"} if isinstance(exc, RetryableError) else None
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": "invalid request", "errors": jsonable_encoder(exc.errors())})


# Include routers - public first so /ad/random wins over /ad/{ad_id}
app.include_router(public.router, prefix="/api")
app.include_router(ads.router, prefix="/api")
app.include_router(analytics.router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Create tables and load seed data. A storage failure stops the process."""
    init_db()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")

    if settings.API_TOKEN:
        logger.info(f"API Token: {mask_token(settings.API_TOKEN)}")
    else:
        logger.warning("API_TOKEN is not set - admin routes will reject every request")

    if settings.PRELOAD_ENABLED:
        db = SessionLocal()
        try:
            summary = SeedLoader(db).load_all(
                settings.PRELOAD_CAMPAIGNS_FILE,
                settings.PRELOAD_ADS_FILE,
                settings.PRELOAD_EVENTS_FILE
            )
            logger.info(f"Seed data: {summary.model_dump()}")
        finally:
            db.close()


@app.get("/api/health")
def health_check():
    return {
        "status": "healthy",
        "environment": settings.APP_ENV
    }


def run():
    import uvicorn
    uvicorn.run("adserver.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
