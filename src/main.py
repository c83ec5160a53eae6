from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from src.api.router import api_router
from src.api.schemas import FieldError
from src.config import get_settings, missing_credentials
from src.db.database import init_db
from src.errors import DealFinderError

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up...")
    for name in missing_credentials(settings):
        logger.warning(f"{name} is not set; endpoints that need it will return 500")
    await init_db()

    yield

    logger.info("Shutting down...")


# Disable interactive docs in production
docs_url = None if settings.is_production else "/docs"
redoc_url = None if settings.is_production else "/redoc"

app = FastAPI(
    title="Deal Finder API",
    description="Search shopping deals, store them and ask questions about them",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url,
)

# Configure CORS origins
default_origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
if settings.cors_origins:
    cors_origins = [origin.strip() for origin in settings.cors_origins.split(",")]
else:
    cors_origins = default_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        return JSONResponse(
            status_code=400,
            content={
                "error": "Invalid JSON in request body",
                "details": errors[0].get("msg"),
            },
        )

    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] == "body":
            loc = loc[1:]
        details.append(
            FieldError(field=".".join(loc) or "body", message=err.get("msg", "")).model_dump()
        )
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request data", "details": details},
    )


@app.exception_handler(DealFinderError)
async def deal_finder_error_handler(request: Request, exc: DealFinderError):
    logger.error(f"{request.method} {request.url.path} failed: {exc.message} ({exc.details})")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unexpected error in {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "An unexpected error occurred",
            "details": str(exc) if settings.debug else None,
        },
    )


@app.get("/health")
async def health_check():
    return {"status": "ok"}
