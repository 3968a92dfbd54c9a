import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from requestflow import __version__
from requestflow.core.config import get_settings
from requestflow.core.errors import WorkflowError
from requestflow.core.logging import configure_from_settings
from requestflow.api.routers import actions, health

settings = get_settings()
configure_from_settings(settings)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.app_name,
    description="Approval workflow engine for travel, transport, visa, accommodation and claim requests",
    version=__version__,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(WorkflowError)
async def workflow_error_handler(request: Request, exc: WorkflowError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    fields = {}
    for err in exc.errors():
        location = [str(part) for part in err.get("loc", ()) if part != "body"]
        fields[".".join(location) or "body"] = err.get("msg", "Invalid value")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": {"fields": fields}},
    )


# Include routers
app.include_router(actions.router, prefix="/api")
app.include_router(health.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs" if settings.debug else None,
    }
