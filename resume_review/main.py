import logging

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from resume_review.api.routes.parse import router as parse_router
from resume_review.api.routes.review import router as review_router
from resume_review.config import get_settings

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    description="Heuristic resume parsing with per-field confidence and provenance, plus a review session for correcting the result",
    version="0.2.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

app.include_router(parse_router)
app.include_router(review_router)

@app.get("/", tags=["health"])
def root():
    return {"service": "resume-review", "status": "running"}

@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}

def custom_openapi():
    """Generate OpenAPI schema with custom settings."""
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Resume Review API",
        version="0.2.0",
        description="Resume parsing and review API with confidence-scored, source-linked fields",
        routes=app.routes,
    )
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi
