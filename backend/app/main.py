# Freelance Flow backend entrypoint: FastAPI app wiring routers, error handlers and uploads.

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from backend.app.core.settings import get_settings
from backend.app.core.logging import configure_logging, get_logger
from backend.app.api import register
from backend.app.api import login
from backend.app.api import profile
from backend.app.api import projects
from backend.app.api import time_entries
from backend.app.api import payments
from backend.app.api import uploads
from backend.app.api import dashboard
from backend.app.core.dev_seed import ensure_default_dev_users
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.services.file_storage import get_upload_dir
from backend.app.services.payment_workflow import PaymentWorkflowError

settings = get_settings()
configure_logging(settings.log_level)
logger = get_logger(__name__)

app = FastAPI(title=settings.app_name, version=settings.api_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(register.router)
app.include_router(login.router)
app.include_router(profile.router)
app.include_router(projects.router)
app.include_router(time_entries.router)
app.include_router(payments.router)
app.include_router(uploads.router)
app.include_router(dashboard.router)

app.mount("/uploads", StaticFiles(directory=str(get_upload_dir()), check_dir=False), name="uploads")


@app.exception_handler(PaymentWorkflowError)
async def payment_workflow_error_handler(request: Request, exc: PaymentWorkflowError):
    logger.info(
        "workflow_error",
        path=request.url.path,
        code=exc.code,
        status_code=exc.status_code,
        detail=exc.message,
    )
    content = {"detail": exc.message, "code": exc.code}
    if exc.errors:
        content["errors"] = exc.errors
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "code": "validation", "errors": jsonable_encoder(exc.errors())},
    )


@app.get("/")
def read_root():
    return {"app": "Freelance Flow backend", "status": "ok"}


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.on_event("startup")
def prepare_database():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        ensure_default_dev_users(db)
    finally:
        db.close()
    logger.info("startup_complete", environment=settings.environment)
