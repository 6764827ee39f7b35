"""FastAPI application entrypoint."""

from fastapi import FastAPI

from scheduler.core.config import settings
from scheduler.core.database import import_models
from scheduler.core.exceptions import register_exception_handlers
from scheduler.core.logging import configure_logging
from scheduler.modules.appointments.router import router as appointments_router
from scheduler.modules.practitioners.router import router as practitioners_router
from scheduler.modules.schedule.admin_router import router as admin_schedule_router
from scheduler.modules.schedule.router import router as schedule_router


def create_app() -> FastAPI:
    configure_logging()
    import_models()
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(practitioners_router)
    app.include_router(schedule_router)
    app.include_router(appointments_router)
    app.include_router(admin_schedule_router)

    return app


app = create_app()
