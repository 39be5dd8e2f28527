import os
import logging
import traceback
from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv
from slowapi.errors import RateLimitExceeded

# Load environment variables and validate
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), '../.env'))

from app.database import check_connection, init_models  # noqa: E402
from app.api import auth, users, company  # noqa: E402
from app.errors import AppError  # noqa: E402
from app.security import security_config, validate_environment, is_development  # noqa: E402
from app.services.rate_limit import limiter, rate_limit_exceeded_handler  # noqa: E402

validate_environment()

logger = logging.getLogger(__name__)

app = FastAPI(title="CompanyHub Backend", version="0.1.0")


# JSON error responses
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    detail = exc.to_detail()
    if is_development() and exc.__cause__ is not None:
        detail["debug"] = repr(exc.__cause__)
    return JSONResponse(status_code=exc.status_code, content={"detail": detail})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail if exc.detail else str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ())[1:]), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": {"code": "VALIDATION_FAILED", "message": "Validation failed", "errors": errors}},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = {"code": "INTERNAL_ERROR", "message": "Internal server error"}
    if is_development():
        detail["debug"] = traceback.format_exception_only(type(exc), exc)[-1].strip()
    return JSONResponse(status_code=500, content={"detail": detail})


# Security and rate limiting
security_config.apply_security_middleware(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# Basic routes
@app.get("/")
def root():
    return {"message": "CompanyHub API is running.", "status": "healthy"}


@app.head("/")
def root_head():
    return Response(status_code=200)


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "database": "connected" if await check_connection() else "unavailable",
    }


# Routers
app.include_router(auth.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(company.router, prefix="/api")


@app.on_event("startup")
async def on_startup():
    try:
        await init_models()
    except Exception as e:
        logger.error("Table initialisation failed: %s", e)
