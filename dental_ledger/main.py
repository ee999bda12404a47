# dental_ledger/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dental_ledger.api.exception_handlers import register_exception_handlers
from dental_ledger.api.router import api_router
from dental_ledger.core.config import settings
from dental_ledger.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.API_V1_STR)

    # Health
    @app.get("/health")
    async def health():
        return {"message": "Dental Ledger API running", "version": "v1"}

    return app


app = create_app()
