"""
POS API main application.
Entry point for the FastAPI server in front of the order engine.
"""

from fastapi import FastAPI

from shared.config.settings import settings
from shared.infrastructure.correlation import CorrelationIdMiddleware
from pos_api.core.cors import configure_cors
from pos_api.core.lifespan import lifespan
from pos_api.routers import (
    cart_router,
    health_router,
    kitchen_router,
    menu_router,
    orders_router,
)


def create_app() -> FastAPI:
    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Restaurant point-of-sale order engine",
        version="0.1.0",
        lifespan=lifespan,
    )

    configure_cors(app)
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(health_router)
    app.include_router(menu_router)
    app.include_router(cart_router)
    app.include_router(orders_router)
    app.include_router(kitchen_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pos_api.main:app", host="0.0.0.0", port=settings.api_port, reload=settings.debug)
