import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.activities.router import router as activities_router
from app.api.v1.attendance.router import router as attendance_router
from app.api.v1.auth.router import router as auth_router
from app.api.v1.dashboard.router import router as dashboard_router
from app.api.v1.users.router import router as users_router
from app.core.config import settings
from app.core.logging_config import configure_logging
from app.db.schema_check import ensure_tables
from app.db.session import engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await ensure_tables(engine)
    logger.info("School tracker API started (timezone=%s)", settings.service_timezone)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="School Tracker Backend", lifespan=lifespan)

    # CORS: allow frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router)
    app.include_router(users_router)
    app.include_router(attendance_router)
    app.include_router(activities_router)
    app.include_router(dashboard_router)

    @app.get("/", tags=["health"])
    async def root():
        return {"status": "ok", "service": "school-tracker"}

    return app


app = create_app()
