from fastapi import FastAPI

from backend.core.observability import init_observability
from backend.core.observability.health import router as health_router
from backend.apps.export.api import router as export_router


def create_app() -> FastAPI:
    init_observability()

    app = FastAPI(title="e-Factura XML Export")

    # Routers
    app.include_router(health_router)
    app.include_router(export_router)

    return app


# ASGI app instance
app = create_app()
