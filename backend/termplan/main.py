from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from termplan.core.config import settings
from termplan.core.logging import configure_logging, logger
from termplan.api.router import api_router
from termplan.db.session import engine
from termplan.db.base import Base
import termplan.db.models  # noqa: F401

def create_app() -> FastAPI:
    configure_logging(settings.ENV)
    app = FastAPI(title="Termplan - management accounting projections", version="0.1.0")

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.on_event("startup")
    def _startup():
        # single snapshot table; demo data is seeded lazily on first load
        Base.metadata.create_all(bind=engine)

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV, storage_key=settings.STORAGE_KEY)
    return app

app = create_app()
