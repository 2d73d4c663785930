"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError
from app.config import settings
from app.database import Base, engine
from app.errors import register_error_handlers
from app.mongo import MongoConnection
from app.stores.mongo_store import ACCESS_LOG_COLLECTION, ensure_indexes

# Import routers
from app.routers import access_logs, auth, categories, certificates, dashboard, events, registrations, users

# Import all models so Base.metadata knows about them
from app.models.user import User                    # noqa: F401
from app.models.category import Category            # noqa: F401
from app.models.event import Event                  # noqa: F401
from app.models.registration import Registration    # noqa: F401
from app.models.certificate import Certificate      # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Event Registry",
    description="Events, registrations and certificates of participation with role-based access",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(categories.router, prefix="/api/categories", tags=["Categories"])
app.include_router(events.router, prefix="/api/events", tags=["Events"])
app.include_router(registrations.router, prefix="/api/registrations", tags=["Registrations"])
app.include_router(certificates.router, prefix="/api/certificates", tags=["Certificates"])
app.include_router(access_logs.router, prefix="/api/access-logs", tags=["AccessLogs"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["Dashboard"])


@app.on_event("startup")
def on_startup():
    """Create tables in SQLite dev mode and open the access log connection."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)

    mongo = MongoConnection(settings.MONGO_URL, settings.MONGO_DB, settings.MONGO_TIMEOUT_MS)
    if mongo.connect():
        try:
            ensure_indexes(mongo.collection(ACCESS_LOG_COLLECTION))
        except PyMongoError as exc:
            logger.warning("Could not create access log indexes: %s", exc)
    app.state.mongo = mongo


@app.on_event("shutdown")
def on_shutdown():
    mongo = getattr(app.state, "mongo", None)
    if mongo is not None:
        mongo.close()


@app.get("/api/health")
def health_check():
    mongo = getattr(app.state, "mongo", None)
    return {
        "status": "ok",
        "access_log": "up" if mongo is not None and mongo.available else "down",
    }
