import logging
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from incidenthub.core.config import settings
from incidenthub.core.database import AsyncSessionLocal, Base, engine
from incidenthub.core.exceptions import IncidentHubError
from incidenthub.core.logging_config import configure_logging
from incidenthub.routers import admin, auth, incidents
from incidenthub.services.user_service import UserService

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="IncidentHub API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(incidents.router)
app.include_router(admin.router)

@app.exception_handler(IncidentHubError)
async def handle_incidenthub_error(request: Request, exc: IncidentHubError):
    logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)

@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    logger.error("HTTP %s on %s %s: %s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    logger.error("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation failed. Please check your input.",
            "fields": jsonable_encoder(exc.errors()),
        },
    )

@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unexpected error occurred on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred. Please try again later."},
    )

async def bootstrap_admin():
    if not (settings.ADMIN_USERNAME and settings.ADMIN_PASSWORD):
        return
    email = settings.ADMIN_EMAIL or f"{settings.ADMIN_USERNAME}@localhost"
    async with AsyncSessionLocal() as session:
        await UserService(session).ensure_admin(settings.ADMIN_USERNAME, email, settings.ADMIN_PASSWORD)

@app.on_event("startup")
async def startup():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await bootstrap_admin()
    logger.info("IncidentHub API started")

@app.on_event("shutdown")
async def shutdown():
    await engine.dispose()

@app.get("/")
async def root():
    return {"message": "IncidentHub API is running"}

def run():
    import uvicorn
    uvicorn.run("incidenthub.main:app", host="0.0.0.0", port=settings.API_PORT)
