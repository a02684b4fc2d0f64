from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from routers import api_router
from endpoints.realtime_ws import router as realtime_ws_router
from config import settings
from database import engine, Base
from errors import AppError
from realtime import manager
from services.otp import EphemeralOTPStore
from endpoints.logs import log_action, log_error
import models.user, models.payment, models.review, models.course, models.audit_log  # ensure model registration
import os
from sqlalchemy import inspect

def prepare_schema():
    # Rely on Alembic in production; only auto-create for SQLite, tests or an explicit dev flag.
    if os.environ.get("TESTING") or engine.url.get_backend_name() == "sqlite" or os.environ.get("DEV_AUTO_CREATE") == "1":
        Base.metadata.create_all(bind=engine)
        return
    try:
        insp = inspect(engine)
        missing = {t for t in Base.metadata.tables if t not in insp.get_table_names()}
        if missing:
            log_action("schema_incomplete", context={"missing_tables": sorted(missing), "hint": "alembic upgrade head"}, level="WARNING")
    except Exception as e:
        log_error("schema_inspection_failed", e)

@asynccontextmanager
async def lifespan(app: FastAPI):
    prepare_schema()
    app.state.otp_store = EphemeralOTPStore()
    log_action("startup", context={"project": settings.PROJECT_NAME, "environment": settings.ENVIRONMENT})
    yield
    # Pending-registration OTPs do not survive a restart
    app.state.otp_store.clear()
    await manager.close_all()
    log_action("shutdown")

app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
# Available before lifespan runs (e.g. TestClient without a context manager)
app.state.otp_store = EphemeralOTPStore()

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    body = {"success": False, "message": exc.message, "code": exc.code}
    if exc.status_code >= 500:
        log_error("request_failed", exc, context={"path": request.url.path, "detail": exc.detail})
        if settings.is_development and exc.detail:
            body["error"] = exc.detail
    else:
        log_action("request_rejected", context={"path": request.url.path, "code": exc.code, "message": exc.message}, level="WARNING")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=body, headers=headers)

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    message = "Please fill in all required fields correctly"
    if errors and errors[0]["field"]:
        message = f"Invalid value for {errors[0]['field']}: {errors[0]['message']}"
    return JSONResponse(status_code=400, content={"success": False, "message": message, "code": "validation_error", "errors": errors})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    body = {"success": False, "message": exc.detail}
    if exc.status_code == 404 and exc.detail == "Not Found":
        body = {"success": False, "message": "API endpoint not found", "path": request.url.path}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log_error("unhandled_error", exc, context={"path": request.url.path})
    return JSONResponse(status_code=500, content={
        "success": False,
        "message": "Server error",
        "error": str(exc) if settings.is_development else "Internal server error",
    })

# Include API routers
app.include_router(api_router, prefix="/api")
app.include_router(realtime_ws_router, tags=["realtime"])

@app.get("/")
async def root():
    return {"message": f"Welcome to the {settings.PROJECT_NAME}!"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT, reload=settings.DEBUG)
