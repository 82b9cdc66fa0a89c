import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedback_admin.api.v1.academic_config.router import router as academic_config_router
from feedback_admin.api.v1.departments.department_router import router as departments_router
from feedback_admin.core.config import settings


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Faculty Feedback Admin Backend")

    # CORS: allow the admin frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(academic_config_router)
    app.include_router(departments_router)

    return app


app = create_app()
