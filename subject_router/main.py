import logging
import os
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request

from subject_router.api.chat import router as chat_router
from subject_router.api.sessions import router as sessions_router
from subject_router.services.container import Services, build_services
from subject_router.services.health import check_health


def create_app(services_factory: Optional[Callable[[], Services]] = None) -> FastAPI:
    factory = services_factory or build_services

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Build the service graph at startup and release database engines on shutdown."""
        services = factory()
        app.state.services = services
        logging.info(f"[Startup] Routing subjects: {', '.join(services.catalog.subjects())}")
        yield
        await services.aclose()

    app = FastAPI(
        title="Subject Router API",
        description="Routes conversational queries to relational and document subjects",
        lifespan=lifespan
    )

    app.include_router(chat_router, prefix="/api")
    app.include_router(sessions_router, prefix="/api")

    @app.get("/hc")
    async def health(request: Request):
        services: Services = request.app.state.services
        return await check_health(
            services.catalog,
            services.sql_driver,
            services.document_driver,
            services.language_model.model
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")
    uvicorn.run(app, host=host, port=port)
