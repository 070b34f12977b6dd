import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from ticketwise.config import settings
from ticketwise.middleware.auth_middleware import AuthMiddleware
from ticketwise.api.routes import auth, sheets, tickets, families, payments, teachers, users, dashboard
from ticketwise.api.routes import settings as settings_routes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# JWT authentication for every non-public /api/ route
app.add_middleware(AuthMiddleware)


@app.get("/health")
def health_check():
    """Health check for monitoring"""
    return {"status": "healthy"}


@app.get("/")
def root():
    return {
        "message": f"{settings.PROJECT_NAME} API",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


# Routers
app.include_router(auth.router, prefix=f"{settings.API_V1_STR}/auth", tags=["auth"])
app.include_router(sheets.router, prefix=f"{settings.API_V1_STR}/sheets", tags=["sheets"])
app.include_router(tickets.router, prefix=f"{settings.API_V1_STR}/tickets", tags=["tickets"])
app.include_router(families.router, prefix=f"{settings.API_V1_STR}/families", tags=["families"])
app.include_router(payments.router, prefix=f"{settings.API_V1_STR}/payments", tags=["payments"])
app.include_router(teachers.router, prefix=f"{settings.API_V1_STR}/teachers", tags=["teachers"])
app.include_router(users.router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(settings_routes.router, prefix=f"{settings.API_V1_STR}/settings", tags=["settings"])
app.include_router(dashboard.router, prefix=f"{settings.API_V1_STR}/dashboard", tags=["dashboard"])


@app.on_event("startup")
def startup_event():
    logger.info(f"[STARTUP] {settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    logger.info("[STARTUP] Docs: http://localhost:8000/docs")

    # Create missing tables
    from ticketwise.database import engine
    from ticketwise.models import Base
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("[STARTUP] Could not create database tables")
        raise
    logger.info("[STARTUP] Database tables created/verified")


@app.on_event("shutdown")
def shutdown_event():
    logger.info("[SHUTDOWN] Server stopped")
